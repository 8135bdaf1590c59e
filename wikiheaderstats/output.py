from __future__ import annotations

import csv
import dataclasses
import enum
import json
from typing import TYPE_CHECKING

import rich
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .header_stats import MAX_HEADER_LEVEL, MIN_HEADER_LEVEL, HeaderStat

if TYPE_CHECKING:
    from _typeshed import SupportsWrite

LEVELS = range(MIN_HEADER_LEVEL, MAX_HEADER_LEVEL + 1)


class OutputFormat(enum.StrEnum):
    JSON = enum.auto()
    CSV = enum.auto()
    TABLE = enum.auto()


class SortOrder(enum.StrEnum):
    HEADER = enum.auto()
    TOTAL = enum.auto()


def sort_records(records: list[HeaderStat], by: SortOrder = SortOrder.HEADER) -> list[HeaderStat]:
    if by is SortOrder.TOTAL:
        return sorted(records, key=lambda r: (-sum(r.counts), r.header))
    return sorted(records, key=lambda r: r.header)


def write_json(out: SupportsWrite[str], records: list[HeaderStat]) -> None:
    json.dump(
        [dataclasses.asdict(record) for record in records],
        out,
        ensure_ascii=False,
        indent=1,
    )
    out.write("\n")


def write_csv(out: SupportsWrite[str], records: list[HeaderStat]) -> None:
    fieldnames = ["header"] + [f"level{level}" for level in LEVELS]
    w = csv.writer(out)
    w.writerow(fieldnames)
    w.writerows([record.header, *record.counts] for record in records)


def print_table(records: list[HeaderStat], console: Console | None = None) -> None:
    table = Table("header")
    for level in LEVELS:
        table.add_column(f"=={level}==", justify="right")
    table.add_column("total", justify="right")
    for record in records:
        table.add_row(
            escape(record.header),
            *[str(count) for count in record.counts],
            str(sum(record.counts)),
        )
    (console or rich.get_console()).print(table)


def write_records(
    out: SupportsWrite[str],
    records: list[HeaderStat],
    output_format: OutputFormat,
) -> None:
    match output_format:
        case OutputFormat.JSON:
            write_json(out, records)
        case OutputFormat.CSV:
            write_csv(out, records)
        case OutputFormat.TABLE:
            print_table(records, Console(file=out))
