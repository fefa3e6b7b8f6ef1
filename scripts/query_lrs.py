"""Query a binary LRS payload from the command line.

Usage:
  python scripts/query_lrs.py lrs.bin info
  python scripts/query_lrs.py lrs.bin lookup 1.0 5.0 line-1
  python scripts/query_lrs.py lrs.bin resolve line-1 A+005
  python scripts/query_lrs.py lrs.bin range line-1 A+000 B+000
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from track_lrs import LrmScaleMeasure, Lrs, LrsError, load


def _info(lrs: Lrs, args: argparse.Namespace) -> None:
    for key, value in lrs.metadata.items():
        print(f"{key} = {value}")
    for lrm_id in lrs.lrm_ids():
        anchors = lrs.anchors(lrm_id)
        names = ", ".join(a.name for a in anchors)
        print(f"{lrm_id}: length {lrs.curve(lrm_id).length:.3f}, anchors [{names}]")


def _lookup(lrs: Lrs, args: argparse.Namespace) -> None:
    for pr in lrs.lookup((args.x, args.y), args.lrm):
        print(
            f"{pr.lrm_id} {pr.measure}  point ({pr.point.x:.3f}, {pr.point.y:.3f})"
            f"  distance {pr.distance:.3f}  offset {pr.offset:+.3f}"
        )


def _resolve(lrs: Lrs, args: argparse.Namespace) -> None:
    p = lrs.resolve(args.lrm, LrmScaleMeasure.parse(args.measure))
    print(f"{p.x:.3f} {p.y:.3f}")


def _range(lrs: Lrs, args: argparse.Namespace) -> None:
    points = lrs.resolve_range(
        args.lrm, LrmScaleMeasure.parse(args.start), LrmScaleMeasure.parse(args.end)
    )
    for p in points:
        print(f"{p.x:.3f} {p.y:.3f}")


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Query an LRS payload")
    ap.add_argument("file", help="Binary payload path")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("info", help="List LRMs and metadata").set_defaults(run=_info)

    p_lookup = sub.add_parser("lookup", help="Project a coordinate on an LRM")
    p_lookup.add_argument("x", type=float)
    p_lookup.add_argument("y", type=float)
    p_lookup.add_argument("lrm")
    p_lookup.set_defaults(run=_lookup)

    p_resolve = sub.add_parser("resolve", help="Coordinate of a measure such as 10+120")
    p_resolve.add_argument("lrm")
    p_resolve.add_argument("measure")
    p_resolve.set_defaults(run=_resolve)

    p_range = sub.add_parser("range", help="Polyline between two measures")
    p_range.add_argument("lrm")
    p_range.add_argument("start")
    p_range.add_argument("end")
    p_range.set_defaults(run=_range)

    args = ap.parse_args(argv)

    try:
        lrs = load(Path(args.file).read_bytes())
        args.run(lrs, args)
    except OSError as exc:
        print(f"  [!] Cannot read {args.file}: {exc}", file=sys.stderr)
        sys.exit(1)
    except (LrsError, ValueError) as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
