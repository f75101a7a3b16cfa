from heapmap.errors import (ConsistencyError, DecodeError, DuplicateAddressError,
                            EmptyHeapError, HeapMapError, MisalignedSlotError)
from heapmap.geometry import (DEFAULT_GEOMETRY, HeapGeometry, compute_geometry,
                              id_to_address, page_base)
from heapmap.heap import EmptySlot, Heap, OccupiedSlot, Page
from heapmap.records import Record, read_records
from heapmap.render import pinning_order, render_grid, save_heap_map

__version__ = '0.1.0'

__all__ = [
    'ConsistencyError',
    'DecodeError',
    'DuplicateAddressError',
    'EmptyHeapError',
    'HeapMapError',
    'MisalignedSlotError',
    'DEFAULT_GEOMETRY',
    'HeapGeometry',
    'compute_geometry',
    'id_to_address',
    'page_base',
    'EmptySlot',
    'Heap',
    'OccupiedSlot',
    'Page',
    'Record',
    'read_records',
    'pinning_order',
    'render_grid',
    'save_heap_map',
]
