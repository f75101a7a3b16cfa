#!/usr/bin/env python3
"""
Map the pages of a garbage-collected heap from an object dump.

Reads a newline-delimited JSON heap dump, rebuilds the page/slot layout
from object addresses, prints pinning statistics and writes a PNG where
each page is a column and each slot a 2x2 block (red = pinned,
green = live, transparent = free).

Usage:
    heapmap heap.json
    heapmap heap.json -o pages.png --csv pages.csv --top 10
"""

import argparse
import sys

from heapmap.errors import HeapMapError
from heapmap.geometry import (DEBUG_SLOT_SIZE, PAGE_ALIGN_LOG, POINTER_SIZE,
                              SLOT_SIZE, HeapGeometry)
from heapmap.heap import Heap
from heapmap.render import render_grid, save_heap_map

DEFAULT_OUTPUT = 'heap_map.png'


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Map heap pages and pinned objects from a heap dump',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s heap.json
  %(prog)s heap.json -o pages.png --top 10
  %(prog)s heap.json --debug-slots
        """
    )
    parser.add_argument('dump_file', help='Heap dump, one JSON object per line')
    parser.add_argument('-o', '--output', default=DEFAULT_OUTPUT,
                        help=f'Output PNG (default: {DEFAULT_OUTPUT})')
    parser.add_argument('--csv', dest='csv_file',
                        help='Also write per-page statistics to this CSV file')
    parser.add_argument('--top', type=int, default=0,
                        help='Print the N pages with the most pinned objects')

    geometry = parser.add_argument_group('heap geometry')
    slot = geometry.add_mutually_exclusive_group()
    slot.add_argument('--slot-size', type=int, default=SLOT_SIZE,
                      help=f'Object slot size in bytes (default: {SLOT_SIZE})')
    slot.add_argument('--debug-slots', action='store_const', dest='slot_size',
                      const=DEBUG_SLOT_SIZE,
                      help=f'Use the GC_DEBUG slot size ({DEBUG_SLOT_SIZE} bytes)')
    geometry.add_argument('--pointer-size', type=int, default=POINTER_SIZE,
                          help=f'Pointer width in bytes (default: {POINTER_SIZE})')
    geometry.add_argument('--align-log', type=int, default=PAGE_ALIGN_LOG,
                          help=f'log2 of the page alignment (default: {PAGE_ALIGN_LOG})')

    return parser.parse_args(argv)


def print_summary(heap):
    print(f"{'Pages:':16s}{len(heap.pages)}")
    print(f"{'Pinned:':16s}{heap.pinned_objects}")
    print(f"{'Pinned ratio:':16s}{heap.pinned_ratio}")
    print(f"{'Total:':16s}{heap.total_objects}")


def print_top_pages(stats, count):
    top = stats.sort_values('pinned', ascending=False, kind='stable').head(count)
    print(f"\nTop {len(top)} pages by pinned objects:")
    print(f"{'base':>18s} {'pinned':>8s} {'occupied':>9s} {'capacity':>9s} {'occupancy':>10s}")
    for row in top.itertuples(index=False):
        print(f"{int(row.base):#18x} {int(row.pinned):8d} {int(row.occupied):9d} "
              f"{int(row.capacity):9d} {row.occupancy:10.1%}")


def run(args):
    geometry = HeapGeometry(pointer_size=args.pointer_size,
                            align_log=args.align_log,
                            slot_size=args.slot_size)

    print(f"[1/3] Loading heap dump from {args.dump_file}...")
    heap = Heap.read(args.dump_file, geometry)
    print(f"  → {heap.total_objects:,} objects in {len(heap.pages):,} pages")

    print_summary(heap)

    if args.top > 0 or args.csv_file:
        stats = heap.page_stats()
        if args.top > 0:
            print_top_pages(stats, args.top)
        if args.csv_file:
            stats.to_csv(args.csv_file, index=False)
            print(f"Page statistics saved to {args.csv_file}")

    print(f"[2/3] Laying out {len(heap.pages):,} pages x {geometry.max_capacity} slots...")
    grid = render_grid(heap)

    print(f"[3/3] Writing {grid.shape[1]}x{grid.shape[0]} map...")
    save_heap_map(grid, args.output)
    print(f"Saved to {args.output}")


def main(argv=None):
    args = parse_args(argv)

    try:
        run(args)
    except FileNotFoundError as e:
        print(f"Error: File '{e.filename}' not found", file=sys.stderr)
        sys.exit(1)
    except (HeapMapError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
