#!/usr/bin/env python3
"""
CLI script to generate the Ardour EmmyLua annotation file.

Fetches https://manual.ardour.org/lua-scripting/class_reference/ (or reads a
saved copy), extracts every class and enum and writes one annotated .lua file.

Usage:
    python run_scraper.py ardour.lua
    python run_scraper.py ardour.lua --html-file class_reference.html
"""

import sys

from ardour_emmylua.cli import main


if __name__ == "__main__":
    sys.exit(main())
