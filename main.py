#!/usr/bin/env python3
"""Entry point: convert 9-patch PNGs to HTML, or open the inspector window.

Usage:
  python main.py button.9.png panel.9.png
  python main.py assets/ --flatten --width 320 --height 120
  python main.py --gui
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

import converter
from ninepatch import NinePatchError

logger = logging.getLogger("ninepatch_html")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Convert 9-patch PNGs into table-based HTML backgrounds.")
    p.add_argument("paths", nargs="*",
                   help="9-patch files (*.9.png) or directories containing them.")
    p.add_argument("--flatten", action="store_true",
                   help="Composite slices over white, for browsers without PNG alpha support.")
    p.add_argument("--images-dir", default="images",
                   help="Name of the slice directory created beside each source (default: images).")
    p.add_argument("--width", type=int, default=None,
                   help="Width in px of the demo container (default: twice the interior width).")
    p.add_argument("--height", type=int, default=None,
                   help="Height in px of the demo container (default: twice the interior height).")
    p.add_argument("--id", dest="element_id", default=None,
                   help="id attribute of the container div (default: the asset name).")
    p.add_argument("--class", dest="class_name", default="",
                   help="Extra class for the container div.")
    p.add_argument("--gui", action="store_true", help="Open the inspector window.")
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return p.parse_args(argv)


def collect_paths(paths: List[str]) -> List[str]:
    """Expand directories into the 9-patch files they contain."""
    found: List[str] = []
    for path in paths:
        if os.path.isdir(path):
            found.extend(converter.find_ninepatches(path))
        else:
            found.append(path)
    return found


def run(paths: List[str], options: converter.ConvertOptions) -> int:
    """Convert every file, carrying on past failures.  Returns the exit status."""
    failed = 0
    for path in paths:
        try:
            result = converter.convert(path, options)
        except NinePatchError as e:
            logger.error("%s", e)
            failed += 1
            continue
        logger.info("%s -> %s", result.asset.filename, result.document_path)
    if failed:
        logger.error("%d of %d file(s) failed", failed, len(paths))
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(format="[%(levelname)s] %(message)s", stream=sys.stdout)
    root_logger.setLevel(logging.DEBUG if args.verbose else logging.INFO)

    if args.gui:
        from gui import App

        app = App()
        app.mainloop()
        return 0

    paths = collect_paths(args.paths)
    if not paths:
        logger.error("No 9-patch files given.")
        return 2

    options = converter.ConvertOptions(
        flatten=args.flatten,
        images_dir=args.images_dir,
        width=args.width,
        height=args.height,
        element_id=args.element_id,
        class_name=args.class_name,
    )
    return run(paths, options)


if __name__ == "__main__":
    sys.exit(main())
