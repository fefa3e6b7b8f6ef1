"""Build a binary LRS payload from a JSON description.

Usage:
  python scripts/build_lrs.py --input lrs.json --output lrs.bin

Input layout::

  {
    "metadata": {"source": "survey-2024"},
    "curves": [[[0, 0], [0, 10], [0, 20]]],
    "lrms": [
      {
        "id": "line-1",
        "curve": 0,
        "properties": {"name": "Main line"},
        "anchors": [
          {"name": "A", "curve_position": 0, "scale_position": 0},
          {"name": "B", "curve_position": 20, "scale_position": 2000,
           "properties": {"kind": "kilometre post"}}
        ]
      }
    ]
  }

The written file is loaded back before the script reports success, so a
payload that ``track_lrs.load`` would reject is never left behind.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from track_lrs import Anchor, LrsBuilder, LrsError, load


def build_payload(description: dict) -> bytes:
    """Encode a parsed JSON description into payload bytes.

    Raises:
        KeyError: If a required field is missing.
        IndexError: If an LRM refers to a curve that is not listed.
    """
    builder = LrsBuilder()
    for key, value in description.get("metadata", {}).items():
        builder.set_metadata(str(key), str(value))
    for points in description["curves"]:
        builder.add_curve(points)
    for lrm in description["lrms"]:
        anchors = [
            Anchor(
                name=str(a["name"]),
                curve_position=float(a["curve_position"]),
                scale_position=float(a["scale_position"]),
                properties={str(k): str(v) for k, v in a.get("properties", {}).items()},
            )
            for a in lrm["anchors"]
        ]
        properties = {str(k): str(v) for k, v in lrm.get("properties", {}).items()}
        builder.add_lrm(str(lrm["id"]), int(lrm["curve"]), anchors, properties)
    return builder.to_bytes()


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Convert a JSON LRS description to binary")
    ap.add_argument("--input", required=True, help="JSON description path")
    ap.add_argument("--output", required=True, help="Binary payload path")
    args = ap.parse_args(argv)

    try:
        description = json.loads(Path(args.input).read_text(encoding="utf-8"))
        payload = build_payload(description)
    except (OSError, ValueError, KeyError, IndexError, TypeError) as exc:
        print(f"  [!] Cannot build {args.input}: {exc}", file=sys.stderr)
        sys.exit(1)

    try:
        lrs = load(payload)
    except LrsError as exc:
        print(f"  [!] Invalid LRS description: {exc}", file=sys.stderr)
        sys.exit(1)

    Path(args.output).write_bytes(payload)
    print(f"Curves : {len(lrs.curves)}")
    print(f"LRMs   : {lrs.lrm_count()}")
    print(f"Bytes  : {len(payload)}")
    print(f"\n[OK] Wrote {args.output}")


if __name__ == "__main__":
    main()
