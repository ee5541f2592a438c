"""Command-line entry point: collect facts, render, print."""

import argparse
import dataclasses
import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from machine_report.collectors import collect_facts
from machine_report.config import LayoutConfig
from machine_report.render import render_bordered, render_plain
from machine_report.report import build_sections

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def build_argparser():
    ap = argparse.ArgumentParser(
        prog="machine-report",
        description="Print a machine status report for this host.",
    )
    ap.add_argument("--plain", action="store_true", help="Label-style report without box borders")
    ap.add_argument("--no-color", action="store_true", help="Draw bar graphs without colour")
    ap.add_argument("--unicode-width", action="store_true",
                    help="Measure text with Unicode cell widths instead of the UTF-8 length classes")
    ap.add_argument("--title", type=str, default=None, help="Report title")
    ap.add_argument("--subtitle", type=str, default=None, help="Second title line (empty string to omit)")
    ap.add_argument("--min-width", type=int, default=None, help="Minimum data column width")
    ap.add_argument("--max-width", type=int, default=None, help="Maximum data column width")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log collector details to stderr")
    return ap


def setup_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def config_from_args(args):
    """LayoutConfig with CLI overrides applied; raises ValueError if invalid."""
    overrides = {
        "title": args.title,
        "subtitle": args.subtitle,
        "min_data_len": args.min_width,
        "max_data_len": args.max_width,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    overrides["color"] = not args.no_color
    overrides["unicode_width"] = args.unicode_width
    return dataclasses.replace(LayoutConfig(), **overrides)


def print_report(lines, out=None):
    out = out or console
    for line in lines:
        # soft_wrap: never wrap or crop the frame to the terminal width
        out.print(Text.from_ansi(line), soft_wrap=True)


def main(argv=None):
    ap = build_argparser()
    args = ap.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = config_from_args(args)
    except ValueError as e:
        ap.error(str(e))

    facts = collect_facts()
    logger.debug("collected facts: %s", facts)
    sections = build_sections(facts)

    lines = render_plain(sections, config) if args.plain else render_bordered(sections, config)
    print_report(lines)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
