from __future__ import annotations

import dataclasses
import logging
from typing import Callable, Iterable

from .diagnostics import report_warnings
from .errors import HeaderLevelError, StatsFinalizedError
from .mediawiki_export_reading import Page
from .namespaces import Namespace
from .page_selection import select_pages
from .wikinodes import (
    Bold,
    BoldItalic,
    Category,
    CharacterEntity,
    Comment,
    DefinitionList,
    EndTag,
    ExternalLink,
    Heading,
    HorizontalDivider,
    Image,
    Italic,
    Link,
    MagicWord,
    Node,
    OrderedList,
    ParagraphBreak,
    Parameter,
    Preformatted,
    Redirect,
    StartTag,
    Table,
    Tag,
    Template,
    Text,
    UnorderedList,
    get_nodes_text,
)
from .wikitext_tree import ParseOutput
from .wikitext_tree import parse as parse_wikitext

MIN_HEADER_LEVEL = 2
MAX_HEADER_LEVEL = 6
HEADER_LEVEL_ARRAY_SIZE = MAX_HEADER_LEVEL - MIN_HEADER_LEVEL + 1


def header_level_index(level: int) -> int:
    """
    Slot of a header level in HeaderCounts

    >>> header_level_index(2), header_level_index(6)
    (0, 4)
    >>> header_level_index(7)
    Traceback (most recent call last):
      ...
    wikiheaderstats.errors.HeaderLevelError: header level 7 is outside of 2..6
    """

    if not MIN_HEADER_LEVEL <= level <= MAX_HEADER_LEVEL:
        raise HeaderLevelError(level)
    return level - MIN_HEADER_LEVEL


class HeaderCounts:
    """Occurrences of one header at each of the levels 2 through 6"""

    __slots__ = ("_counts",)

    def __init__(self, counts: Iterable[int] = ()) -> None:
        counts = list(counts)
        if len(counts) > HEADER_LEVEL_ARRAY_SIZE:
            raise ValueError("too many counts", counts)
        self._counts = counts + [0] * (HEADER_LEVEL_ARRAY_SIZE - len(counts))

    def __getitem__(self, level: int) -> int:
        return self._counts[header_level_index(level)]

    def increment(self, level: int) -> None:
        self._counts[header_level_index(level)] += 1

    def __add__(self, other: HeaderCounts) -> HeaderCounts:
        if not isinstance(other, HeaderCounts):
            return NotImplemented
        return HeaderCounts(a + b for a, b in zip(self._counts, other._counts))

    def __eq__(self, other) -> bool:
        if not isinstance(other, HeaderCounts):
            return NotImplemented
        return self._counts == other._counts

    def __repr__(self) -> str:
        return f"HeaderCounts({self._counts!r})"

    def total(self) -> int:
        return sum(self._counts)

    def as_list(self) -> list[int]:
        return list(self._counts)


@dataclasses.dataclass
class HeaderStat:
    header: str
    counts: list[int]


def header_key(text: str, nodes: list[Node]) -> str:
    """
    Header text used to tell headers apart, trimmed of spaces and tabs only

    >>> header_key("==\\t Etymology 1 \\n==", [Text(2, 17, "\\t Etymology 1 \\n")])
    'Etymology 1 \\n'
    """

    return get_nodes_text(text, nodes).strip(" \t")


class HeaderStats:
    def __init__(self) -> None:
        self.header_counts: dict[str, HeaderCounts] = {}
        self.ignored_headers = 0
        self.finalized = False

    def parse(
        self,
        pages: Iterable[Page],
        page_limit: int | None,
        namespaces: Iterable[Namespace],
        verbose: bool = False,
        parser: Callable[[str], ParseOutput] = parse_wikitext,
    ) -> int:
        """Count the headers of the selected pages, returning how many pages were read"""

        page_count = 0
        for page in select_pages(pages, namespaces, page_limit):
            logging.debug("title: [[%s]]", page.title)
            parser_output = parser(page.text)
            if verbose:
                report_warnings(page, parser_output.warnings)
            self.process_nodes(page, parser_output.nodes)
            page_count += 1
        return page_count

    def process_nodes(self, page: Page, nodes: list[Node]) -> None:
        for node in nodes:
            match node:
                case DefinitionList(items=items):
                    for item in items:
                        self.process_nodes(page, item.nodes)
                case Heading(nodes=heading_nodes, level=level):
                    self.process_header(page, heading_nodes, level)
                case Preformatted(nodes=children) | Tag(nodes=children):
                    self.process_nodes(page, children)
                case Image(text=text) | Link(text=text):
                    self.process_nodes(page, text)
                case OrderedList(items=items) | UnorderedList(items=items):
                    for item in items:
                        self.process_nodes(page, item.nodes)
                case Parameter(name=name, default=default):
                    if default is not None:
                        self.process_nodes(page, default)
                    self.process_nodes(page, name)
                case Table(attributes=attributes, captions=captions, rows=rows):
                    self.process_nodes(page, attributes)
                    for caption in captions:
                        if caption.attributes is not None:
                            self.process_nodes(page, caption.attributes)
                        self.process_nodes(page, caption.content)
                    for row in rows:
                        self.process_nodes(page, row.attributes)
                        for cell in row.cells:
                            if cell.attributes is not None:
                                self.process_nodes(page, cell.attributes)
                            self.process_nodes(page, cell.content)
                case Template(name=name, parameters=parameters):
                    self.process_nodes(page, name)
                    for parameter in parameters:
                        if parameter.name is not None:
                            self.process_nodes(page, parameter.name)
                        self.process_nodes(page, parameter.value)
                case (
                    Bold()
                    | BoldItalic()
                    | Category()
                    | CharacterEntity()
                    | Comment()
                    | EndTag()
                    | ExternalLink()
                    | HorizontalDivider()
                    | Italic()
                    | MagicWord()
                    | ParagraphBreak()
                    | Redirect()
                    | StartTag()
                    | Text()
                ):
                    pass
                case _:
                    raise TypeError(f"unexpected node {node!r} in [[{page.title}]]")

    def process_header(self, page: Page, nodes: list[Node], level: int) -> None:
        key = header_key(page.text, nodes)
        if not MIN_HEADER_LEVEL <= level <= MAX_HEADER_LEVEL:
            logging.debug("ignoring level %d header %r in [[%s]]", level, key, page.title)
            self.ignored_headers += 1
            return
        self.record_header(key, level)

    def record_header(self, key: str, level: int) -> None:
        if self.finalized:
            raise StatsFinalizedError()
        header_level_index(level)
        counts = self.header_counts.get(key)
        if counts is None:
            counts = self.header_counts[key] = HeaderCounts()
        counts.increment(level)

    def merge(self, other: HeaderStats) -> None:
        if self.finalized:
            raise StatsFinalizedError()
        for key, counts in other.header_counts.items():
            mine = self.header_counts.get(key)
            self.header_counts[key] = HeaderCounts(counts.as_list()) if mine is None else mine + counts
        self.ignored_headers += other.ignored_headers

    def finalize(self) -> HeaderStats:
        self.finalized = True
        return self

    def records(self) -> list[HeaderStat]:
        return [
            HeaderStat(header, counts.as_list())
            for header, counts in sorted(self.header_counts.items())
        ]
