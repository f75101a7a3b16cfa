import json

import pytest

from heapmap.geometry import HeapGeometry


@pytest.fixture
def geometry():
    return HeapGeometry()


@pytest.fixture
def tiny_geometry():
    # 64-byte pages, 8-byte slots: page 0 starts at 8 and holds 2 slots
    return HeapGeometry(pointer_size=8, align_log=6, slot_size=8)


@pytest.fixture
def entry():
    def _entry(address, pinned=None, kind='OBJECT'):
        obj = {'address': hex(address), 'type': kind}
        if pinned is not None:
            obj['flags'] = {'pinned': pinned}
        return obj
    return _entry


@pytest.fixture
def write_dump(tmp_path):
    def _write(entries, name='heap.json'):
        path = tmp_path / name
        with open(path, 'wb') as f:
            for e in entries:
                if isinstance(e, dict):
                    e = json.dumps(e)
                if isinstance(e, str):
                    e = e.encode('utf-8')
                f.write(e + b'\n')
        return path
    return _write
