"""
Command-line entry point.

Usage:
    ardour-emmylua ardour.lua
    ardour-emmylua ardour.lua --html-file class_reference.html
    ardour-emmylua ardour.lua --function-doc my_functiondoc.json -v
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv

from .config import ScraperConfig
from .exceptions import ScraperError
from .main import StubGenerator
from .overrides import DocOverrides
from .logger import get_module_logger, setup_logger

logger = get_module_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ardour-emmylua",
        description="Generate EmmyLua annotations from the Ardour Lua class reference"
    )
    parser.add_argument(
        "output",
        nargs="*",
        help="Output .lua file"
    )
    parser.add_argument(
        "--html-file",
        help="Read a saved copy of the reference page instead of fetching it"
    )
    parser.add_argument(
        "--url",
        help="Reference page URL (default: ARDOUR_LUA_REFERENCE_URL or the Ardour manual)"
    )
    parser.add_argument(
        "--class-doc",
        help="Class documentation override JSON"
    )
    parser.add_argument(
        "--function-doc",
        help="Function documentation override JSON"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Fetch timeout in seconds"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if len(args.output) != 1:
        parser.print_usage(sys.stderr)
        print("Please, specify output file", file=sys.stderr)
        return 2

    try:
        config = ScraperConfig.from_env(
            reference_url=args.url,
            class_doc_path=args.class_doc,
            function_doc_path=args.function_doc,
            timeout=args.timeout,
            log_level="DEBUG" if args.verbose else None
        )
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    setup_logger(level=config.log_level_number)

    try:
        overrides = DocOverrides.load(config.class_doc_path, config.function_doc_path)
        generator = StubGenerator(overrides=overrides)

        if args.html_file:
            annotations = generator.annotate_file(args.html_file)
        else:
            annotations = generator.annotate_url(config.reference_url, timeout=config.timeout)

        document = generator.render_document(annotations, source_url=config.reference_url)
        generator.write_output(args.output[0], document)

    except ScraperError as e:
        logger.error(f"{type(e).__name__}: {e.message}")
        if e.details:
            logger.error(f"Details: {e.details}")
        print(f"✗ {e.message}", file=sys.stderr)
        return 1

    except OSError as e:
        logger.error(f"I/O error: {e}")
        print(f"✗ {e}", file=sys.stderr)
        return 1

    print(f"Saved to: {args.output[0]}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
