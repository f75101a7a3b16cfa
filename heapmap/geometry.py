"""
Heap page geometry.

Recovers page layout from object addresses alone, using the allocator's
fixed constants:

    align       = 1 << align_log            (page alignment)
    page_bytes  = align - 5 * pointer_size  (malloc keeps some padding)
    header_size = pointer_size              (one pointer-sized page header)

The first slot of a page sits at the first multiple of slot_size at or past
base + header_size; capacity is however many slots fit in what remains.
"""

from dataclasses import dataclass
from typing import Tuple

POINTER_SIZE = 8
PAGE_ALIGN_LOG = 14
SLOT_SIZE = 40
DEBUG_SLOT_SIZE = 56  # object size on GC_DEBUG builds
MALLOC_PADDING_WORDS = 5


@dataclass(frozen=True)
class HeapGeometry:
    pointer_size: int = POINTER_SIZE
    align_log: int = PAGE_ALIGN_LOG
    slot_size: int = SLOT_SIZE

    def __post_init__(self):
        if self.pointer_size <= 0 or self.slot_size <= 0 or self.align_log <= 0:
            raise ValueError(
                f"Invalid heap geometry: pointer_size={self.pointer_size}, "
                f"align_log={self.align_log}, slot_size={self.slot_size}")
        if self.page_bytes - self.header_size < self.slot_size:
            raise ValueError(
                f"Slot size {self.slot_size} does not fit in a "
                f"{self.page_bytes}-byte page")

    @property
    def align(self) -> int:
        return 1 << self.align_log

    @property
    def mask(self) -> int:
        return self.align - 1

    @property
    def malloc_padding(self) -> int:
        return MALLOC_PADDING_WORDS * self.pointer_size

    @property
    def page_bytes(self) -> int:
        return self.align - self.malloc_padding

    @property
    def header_size(self) -> int:
        return self.pointer_size

    @property
    def max_capacity(self) -> int:
        """Slot limit of a page whose first slot needs no extra padding."""
        return (self.page_bytes - self.header_size) // self.slot_size

    def page_base(self, address: int) -> int:
        """Page-aligned base address of the page holding `address`."""
        return address & ~self.mask

    def id_to_address(self, object_id: int) -> int:
        """Undo the tag bit of a compact object id."""
        return object_id << 1

    def num_in_page(self, address: int) -> int:
        """Slot number of `address` counted from its page base."""
        return (address & self.mask) // self.slot_size

    def compute(self, base: int) -> Tuple[int, int]:
        """Return (start, capacity) for the page at `base`."""
        start = base + self.header_size
        remainder = start % self.slot_size
        if remainder != 0:
            start += self.slot_size - remainder
        capacity = (self.page_bytes - (start - base)) // self.slot_size
        return start, capacity


DEFAULT_GEOMETRY = HeapGeometry()


def page_base(address):
    return DEFAULT_GEOMETRY.page_base(address)


def id_to_address(object_id):
    return DEFAULT_GEOMETRY.id_to_address(object_id)


def compute_geometry(base):
    return DEFAULT_GEOMETRY.compute(base)
