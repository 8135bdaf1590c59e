from __future__ import annotations

import contextlib
import logging
import sys
from argparse import ArgumentParser, ArgumentTypeError, Namespace
from pathlib import Path
from typing import Iterable, Iterator, TextIO

from progress.counter import Counter  # type: ignore

from .errors import HeaderStatsError
from .header_stats import HeaderStats
from .mediawiki_export_reading import Page, opensesame, pages
from .namespaces import Namespace as WikiNamespace
from .output import OutputFormat, SortOrder, sort_records, write_records


class Settings:
    dump_path: Path
    namespaces: list[WikiNamespace]
    page_limit: int | None
    verbose: bool
    output_format: OutputFormat
    output_path: Path | None
    sort_order: SortOrder

    @classmethod
    def from_parsed_arguments(cls, parsed_arguments: Namespace):
        s = cls()
        s.dump_path = Path(parsed_arguments.dump)
        s.namespaces = list(parsed_arguments.namespaces or [WikiNamespace.MAIN])
        s.page_limit = parsed_arguments.limit
        s.verbose = parsed_arguments.verbose
        s.output_format = parsed_arguments.format
        s.output_path = Path(parsed_arguments.output) if parsed_arguments.output else None
        s.sort_order = parsed_arguments.sort
        return s


def namespace_argument(value: str) -> WikiNamespace:
    try:
        return WikiNamespace.from_name(value)
    except HeaderStatsError as e:
        raise ArgumentTypeError(str(e)) from e


def page_limit_argument(value: str) -> int:
    limit = int(value)
    if limit < 0:
        raise ArgumentTypeError(f"page limit must not be negative: {value}")
    return limit


def make_argument_parser(prog=None):
    argument_parser = ArgumentParser(
        prog=prog,
        description="Count section headers by level in a MediaWiki export dump",
    )
    argument_parser.add_argument("dump", help="pages-articles XML dump, optionally bz2")
    argument_parser.add_argument(
        "-n",
        "--namespace",
        dest="namespaces",
        action="append",
        type=namespace_argument,
        help="namespace to include, by name or code (repeatable, default: main)",
    )
    argument_parser.add_argument(
        "-l", "--limit", type=page_limit_argument, help="stop after this many pages"
    )
    argument_parser.add_argument(
        "-f",
        "--format",
        type=OutputFormat,
        choices=list(OutputFormat),
        default=OutputFormat.JSON,
    )
    argument_parser.add_argument("-o", "--output", help="output file (default: stdout)")
    argument_parser.add_argument(
        "-s",
        "--sort",
        type=SortOrder,
        choices=list(SortOrder),
        default=SortOrder.HEADER,
    )
    argument_parser.add_argument(
        "-v", "--verbose", action="store_true", help="report markup warnings"
    )
    return argument_parser


def counting(prgrss: Counter, pages_: Iterable[Page]) -> Iterator[Page]:
    for page in pages_:
        prgrss.next()
        yield page


def run(settings: Settings, out: TextIO = sys.stdout) -> int:
    stats = HeaderStats()
    prgrss = Counter("pages read: ")
    with prgrss, opensesame(settings.dump_path) as inf:
        page_count = stats.parse(
            counting(prgrss, pages(inf)),
            settings.page_limit,
            settings.namespaces,
            verbose=settings.verbose,
        )
    stats.finalize()
    logging.info(
        "%d pages, %d distinct headers, %d headers outside of levels 2..6",
        page_count,
        len(stats.header_counts),
        stats.ignored_headers,
    )
    records = sort_records(stats.records(), settings.sort_order)
    with contextlib.ExitStack() as stack:
        if settings.output_path is not None:
            out = stack.enter_context(
                open(settings.output_path, "w", encoding="utf-8", newline="")
            )
        write_records(out, records, settings.output_format)
    return 0


def main(argv=None) -> int:
    argument_parser = make_argument_parser()
    args = argument_parser.parse_args(argv)
    settings = Settings.from_parsed_arguments(args)
    logging.basicConfig(
        level=logging.INFO if settings.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    try:
        return run(settings)
    except HeaderStatsError as e:
        logging.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
