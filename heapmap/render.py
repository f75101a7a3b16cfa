"""
Render a heap as a page/slot map.

Every page is a 2-pixel-wide column, every slot a 2x2 block down that
column: red for pinned objects, green for other live objects, transparent
for free slots. Pages are ordered most-pinned first.
"""

import numpy as np
import png

from heapmap.errors import EmptyHeapError

TRANSPARENT = (0, 0, 0, 0)
PINNED_COLOR = (255, 0, 0, 255)
UNPINNED_COLOR = (0, 255, 0, 255)
BLOCK = 2  # pixels per slot edge


def pinning_order(pages):
    """Pages sorted by pinned count, descending; ties keep discovery order."""
    return sorted(pages, key=lambda page: page.pinned_count, reverse=True)


def render_grid(heap):
    """Return the map as a uint8 RGBA array indexed grid[y, x]."""
    pages = pinning_order(heap.pages.values())
    height = BLOCK * heap.geometry.max_capacity
    width = BLOCK * len(pages)

    grid = np.full((height, width, 4), TRANSPARENT, dtype=np.uint8)

    for i, page in enumerate(pages):
        x = i * BLOCK
        for j, slot in enumerate(page.slots()):
            if slot.empty:
                continue
            y = j * BLOCK
            color = PINNED_COLOR if slot.pinned else UNPINNED_COLOR
            grid[y:y + BLOCK, x:x + BLOCK] = color

    return grid


def save_heap_map(grid, output_file):
    """Write the grid as an Adam7-interlaced RGBA PNG."""
    height, width = grid.shape[:2]
    if height == 0 or width == 0:
        raise EmptyHeapError("No heap pages to render")
    writer = png.Writer(width, height, greyscale=False, alpha=True,
                        bitdepth=8, interlace=True)
    with open(output_file, 'wb') as f:
        writer.write(f, grid.reshape(height, width * 4).tolist())
