from __future__ import annotations

import argparse
import asyncio
import pathlib
import sys
from typing import Optional

from .assembler import DeckAssembler
from .errors import DeckAssemblyError
from .fragments import (
    DEFAULT_AUTHOR,
    DEFAULT_FRAGMENTS,
    DEFAULT_LAYOUT,
    DEFAULT_OUTPUT,
    DEFAULT_TITLE,
    load_manifest,
)
from .utils import LAYOUTS, DeckConfig, log


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="html2deck",
        description="Assemble a PowerPoint deck from an ordered list of HTML slide fragments.",
    )
    parser.add_argument(
        "fragments",
        nargs="*",
        help="Fragment file names, in slide order, relative to --base-dir. "
        "Default: the built-in twelve-slide sequence.",
    )
    parser.add_argument(
        "--base-dir",
        "-d",
        type=str,
        default=".",
        help="Directory the fragment names are resolved against. Default: current directory",
    )
    parser.add_argument(
        "--manifest",
        "-m",
        type=str,
        default=None,
        help="File listing fragment names, one per line. Cannot be combined with positional fragments.",
    )
    parser.add_argument(
        "--out",
        "-o",
        type=str,
        default=DEFAULT_OUTPUT,
        help=f"Output file path. Default: {DEFAULT_OUTPUT}",
    )
    parser.add_argument(
        "--layout",
        choices=sorted(LAYOUTS),
        default=DEFAULT_LAYOUT,
        help=f"Slide size. Default: {DEFAULT_LAYOUT}",
    )
    parser.add_argument(
        "--author",
        type=str,
        default=DEFAULT_AUTHOR,
        help=f"Deck author metadata. Default: {DEFAULT_AUTHOR}",
    )
    parser.add_argument(
        "--title",
        type=str,
        default=DEFAULT_TITLE,
        help=f"Deck title metadata. Default: {DEFAULT_TITLE}",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print extra detail while converting fragments.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    base_dir = pathlib.Path(args.base_dir).expanduser().resolve()
    if not base_dir.is_dir():
        print(f"[html2deck] ERROR: base dir is not a directory: {base_dir}", file=sys.stderr)
        return 1

    if args.manifest and args.fragments:
        print("[html2deck] ERROR: pass fragments or --manifest, not both", file=sys.stderr)
        return 1

    try:
        if args.manifest:
            fragments = load_manifest(pathlib.Path(args.manifest).expanduser())
        else:
            fragments = list(args.fragments) or list(DEFAULT_FRAGMENTS)

        config = DeckConfig(
            base_dir=base_dir,
            fragments=fragments,
            output_path=pathlib.Path(args.out).expanduser().resolve(),
            layout=args.layout,
            author=args.author,
            title=args.title,
        )
        if args.verbose:
            log(f"Building {len(fragments)} slide(s) from {base_dir} ({config.layout})")
        result = asyncio.run(DeckAssembler(config, verbose=args.verbose).run())
    except DeckAssemblyError as e:
        print(f"[html2deck] ERROR: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        log(f"{result.slide_count} slide(s) written to {result.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
