"""
Rebuild heap pages from dump records.

Each record is mapped to the page containing its address; pages are created
on first reference from the page geometry. A page only knows which of its
addresses are occupied, so the full slot sequence (occupied and empty) is
materialized on demand by walking the expected slot addresses.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Union

import pandas as pd

from heapmap.errors import DuplicateAddressError, MisalignedSlotError
from heapmap.geometry import DEFAULT_GEOMETRY, HeapGeometry
from heapmap.records import Record, read_records


@dataclass(frozen=True)
class OccupiedSlot:
    record: Record
    empty = False

    @property
    def address(self) -> int:
        return self.record.address

    @property
    def pinned(self) -> bool:
        return self.record.pinned


@dataclass(frozen=True)
class EmptySlot:
    address: int
    empty = True
    pinned = False


Slot = Union[OccupiedSlot, EmptySlot]


class Page:
    def __init__(self, base: int, start: int, capacity: int, slot_size: int):
        self.base = base
        self.start = start
        self.capacity = capacity
        self.slot_size = slot_size
        self.objects: Dict[int, Record] = {}

    def __repr__(self):
        return (f"Page(base={self.base:#x}, start={self.start:#x}, "
                f"capacity={self.capacity}, occupied={len(self.objects)})")

    @property
    def end(self) -> int:
        """Address one past the last slot."""
        return self.start + self.capacity * self.slot_size

    def contains(self, address: int) -> bool:
        return self.start <= address < self.end

    def add(self, record: Record):
        if record.address in self.objects:
            raise DuplicateAddressError(record.address)
        self.objects[record.address] = record

    @property
    def occupied_count(self) -> int:
        return len(self.objects)

    @property
    def pinned_count(self) -> int:
        return sum(1 for r in self.objects.values() if r.pinned)

    def slots(self) -> Iterator[Slot]:
        """Yield all `capacity` slots in address order.

        Occupied addresses are matched against start, start + S, ... and
        every gap becomes an EmptySlot. Raises MisalignedSlotError once the
        walk is done if any record did not land on an expected address.
        """
        pending = sorted(self.objects)
        stray = []
        next_idx = 0
        for i in range(self.capacity):
            expected = self.start + i * self.slot_size
            # records that fell between slots can never match again
            while next_idx < len(pending) and pending[next_idx] < expected:
                stray.append(pending[next_idx])
                next_idx += 1
            if next_idx < len(pending) and pending[next_idx] == expected:
                yield OccupiedSlot(self.objects[expected])
                next_idx += 1
            else:
                yield EmptySlot(expected)

        leftover = stray + pending[next_idx:]
        if leftover:
            raise MisalignedSlotError(self.base, leftover)


class Heap:
    """Pages keyed by base address, in discovery order."""

    def __init__(self, geometry: HeapGeometry = DEFAULT_GEOMETRY):
        self.geometry = geometry
        self.pages: Dict[int, Page] = {}

    def page(self, base: int) -> Page:
        page = self.pages.get(base)
        if page is None:
            start, capacity = self.geometry.compute(base)
            page = Page(base, start, capacity, self.geometry.slot_size)
            self.pages[base] = page
        return page

    def page_for_address(self, address: int) -> Page:
        return self.page(self.geometry.page_base(address))

    def page_for_object_id(self, object_id: int) -> Page:
        return self.page_for_address(self.geometry.id_to_address(object_id))

    def ingest(self, record: Record) -> Page:
        page = self.page_for_address(record.address)
        page.add(record)
        return page

    def extend(self, records):
        for record in records:
            self.ingest(record)
        return self

    @classmethod
    def read(cls, filename, geometry: HeapGeometry = DEFAULT_GEOMETRY) -> 'Heap':
        return cls(geometry).extend(read_records(filename))

    # statistics

    @property
    def total_objects(self) -> int:
        return sum(p.occupied_count for p in self.pages.values())

    @property
    def pinned_objects(self) -> int:
        return sum(p.pinned_count for p in self.pages.values())

    @property
    def pinned_ratio(self) -> float:
        total = self.total_objects
        if total == 0:
            return float('nan')
        return self.pinned_objects / total

    def page_stats(self) -> pd.DataFrame:
        """One row per page, in discovery order."""
        columns = ['base', 'start', 'capacity', 'occupied', 'pinned']
        rows = [(p.base, p.start, p.capacity, p.occupied_count, p.pinned_count)
                for p in self.pages.values()]
        df = pd.DataFrame(rows, columns=columns)
        df['empty'] = df['capacity'] - df['occupied']
        df['occupancy'] = (df['occupied'] / df['capacity']).astype(float)
        return df
