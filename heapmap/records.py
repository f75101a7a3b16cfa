"""
Heap dump records.

A dump is newline-delimited JSON, one object per line:

    {"address":"0x7f8a1c0a3e28", "type":"STRING", "flags":{"pinned":true}, ...}
    {"type":"ROOT", "root":"vm", "references":["0x7f8a1c0a3e28", ...]}

ROOT lines describe references held outside the heap and are skipped.
"""

import json
from dataclasses import dataclass, field

from heapmap.errors import DecodeError

ROOT_TYPE = 'ROOT'


def parse_hex(value):
    """Parse an address given as a '0x...' string or an int."""
    if isinstance(value, bool):
        raise ValueError(f"not an address: {value!r}")
    if isinstance(value, int):
        address = value
    elif isinstance(value, str):
        address = int(value, 16)
    else:
        raise ValueError(f"not an address: {value!r}")
    if address < 0:
        raise ValueError(f"negative address: {value!r}")
    return address


@dataclass(frozen=True)
class Record:
    address: int
    pinned: bool = False
    kind: str = ''
    raw: dict = field(default=None, compare=False, repr=False)

    @classmethod
    def from_entry(cls, entry):
        if not isinstance(entry, dict):
            raise ValueError(f"expected a JSON object, got {type(entry).__name__}")
        if 'address' not in entry:
            raise ValueError("missing 'address'")
        address = parse_hex(entry['address'])
        # no flags and flags.pinned == false are treated the same
        flags = entry.get('flags') or {}
        if not isinstance(flags, dict):
            raise ValueError(f"invalid flags: {flags!r}")
        pinned = flags.get('pinned', False)
        if not isinstance(pinned, bool):
            raise ValueError(f"invalid pinned flag: {pinned!r}")
        return cls(address=address,
                   pinned=pinned,
                   kind=entry.get('type', ''),
                   raw=entry)


def iter_entries(lines):
    """Decode one JSON object per non-empty line, yielding (line_number, entry).

    Lines may be str or undecoded bytes; bad UTF-8 is a DecodeError too.
    """
    for line_number, line in enumerate(lines, 1):
        if not line.strip():
            continue
        try:
            entry = json.loads(line)
        except ValueError as e:
            # UnicodeDecodeError is a ValueError
            raise DecodeError(str(e), line_number) from e
        yield line_number, entry


def iter_records(lines):
    """Yield heap-resident Records, dropping ROOT entries."""
    for line_number, entry in iter_entries(lines):
        if isinstance(entry, dict) and entry.get('type') == ROOT_TYPE:
            continue
        try:
            record = Record.from_entry(entry)
        except ValueError as e:
            raise DecodeError(str(e), line_number) from e
        yield record


def read_records(filename):
    with open(filename, 'rb') as f:
        yield from iter_records(f)
