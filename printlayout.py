#!/usr/bin/env python3
"""
PagePack - lay out images on printable A4 pages

Reads a JSON list of image sizes (cm) and writes the most compact
multi-page layout, with optional PDF proof and PNG previews.
"""

import sys

from pagepack.cli import main

if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
