#!/usr/bin/env python3
"""
Convert a local HTML file (one post body) to Portable Text JSON, offline.

Useful to check how a WordPress post will look after conversion before
running the migration.  Images are only kept when their URL appears in the
optional asset map (a JSON object of ``url -> asset id``).

Usage:
  python scripts/convert_html.py \\
    --input data/post.html \\
    --assets data/asset_map.json \\
    --output data/post.portable.json

Without ``--output`` the JSON is printed to stdout.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict

# Allow running the script from a checkout without installing the package
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from wp2sanity.parsers import SequentialKeyGenerator, convert_html_to_portable_text


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert an HTML post body to Portable Text JSON."
    )
    parser.add_argument("--input", required=True, help="Path of the HTML file")
    parser.add_argument("--assets", help="JSON file mapping image URL to Sanity asset id")
    parser.add_argument("--output", help="Where to write the JSON (default: stdout)")
    parser.add_argument(
        "--stable-keys",
        action="store_true",
        help="Use sequential keys (k1, k2, ...) so outputs can be diffed",
    )
    return parser.parse_args()


def load_assets(path: str) -> Dict[str, str]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def main() -> None:
    args = parse_args()
    html = Path(args.input).read_text(encoding="utf-8")
    assets = load_assets(args.assets) if args.assets else {}
    key_gen = SequentialKeyGenerator() if args.stable_keys else None

    blocks = convert_html_to_portable_text(html, assets, key_gen=key_gen)
    output = json.dumps(blocks, ensure_ascii=False, indent=2)

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(output + "\n", encoding="utf-8")
        print(f"Wrote {len(blocks)} blocks to {out_path}")
    else:
        print(output)


if __name__ == "__main__":
    main()
