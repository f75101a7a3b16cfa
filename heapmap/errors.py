"""Errors raised while rebuilding a heap from a dump."""


class HeapMapError(Exception):
    pass


class DecodeError(HeapMapError):
    """A dump line could not be decoded into a record."""

    def __init__(self, message, line_number=None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class ConsistencyError(HeapMapError):
    """The dump contradicts the page geometry."""


class DuplicateAddressError(ConsistencyError):
    def __init__(self, address):
        super().__init__(f"Duplicate object at address {address:#x}")
        self.address = address


class MisalignedSlotError(ConsistencyError):
    def __init__(self, page_base, addresses):
        shown = ', '.join(f"{a:#x}" for a in addresses[:5])
        if len(addresses) > 5:
            shown += f", ... ({len(addresses) - 5} more)"
        super().__init__(
            f"Page {page_base:#x}: {len(addresses)} object(s) outside the "
            f"slot layout: {shown}")
        self.page_base = page_base
        self.addresses = addresses


class EmptyHeapError(HeapMapError):
    """Nothing to render: the dump held no heap objects."""
