"""Markup tree produced by wikitext_tree.parse

Every node records the span it covers in the page text as string offsets.
"""

from __future__ import annotations

import dataclasses
import enum

__all__ = [
    "Bold",
    "BoldItalic",
    "Category",
    "CharacterEntity",
    "Comment",
    "DefinitionList",
    "DefinitionListItem",
    "DefinitionListItemType",
    "EndTag",
    "ExternalLink",
    "Heading",
    "HorizontalDivider",
    "Image",
    "Italic",
    "Link",
    "ListItem",
    "MagicWord",
    "Node",
    "OrderedList",
    "ParagraphBreak",
    "Parameter",
    "ParseWarning",
    "Preformatted",
    "Redirect",
    "StartTag",
    "Table",
    "TableCaption",
    "TableCell",
    "TableCellType",
    "TableRow",
    "Tag",
    "Template",
    "TemplateParameter",
    "Text",
    "UnorderedList",
    "WarningMessage",
    "get_nodes_text",
]


@dataclasses.dataclass
class Node:
    start: int
    end: int


# fmt: off
@dataclasses.dataclass
class Bold(Node): ...
@dataclasses.dataclass
class BoldItalic(Node): ...
@dataclasses.dataclass
class Comment(Node): ...
@dataclasses.dataclass
class HorizontalDivider(Node): ...
@dataclasses.dataclass
class Italic(Node): ...
@dataclasses.dataclass
class MagicWord(Node): ...
@dataclasses.dataclass
class ParagraphBreak(Node): ...
# fmt: on


@dataclasses.dataclass
class Text(Node):
    value: str


@dataclasses.dataclass
class CharacterEntity(Node):
    character: str


@dataclasses.dataclass
class StartTag(Node):
    name: str


@dataclasses.dataclass
class EndTag(Node):
    name: str


@dataclasses.dataclass
class Redirect(Node):
    target: str


@dataclasses.dataclass
class Category(Node):
    target: str
    ordinal: list[Node] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class ExternalLink(Node):
    nodes: list[Node] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Heading(Node):
    level: int
    nodes: list[Node] = dataclasses.field(default_factory=list)


class DefinitionListItemType(enum.Enum):
    TERM = ";"
    DETAILS = ":"


@dataclasses.dataclass
class DefinitionListItem(Node):
    type: DefinitionListItemType
    nodes: list[Node] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class ListItem(Node):
    nodes: list[Node] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class DefinitionList(Node):
    items: list[DefinitionListItem] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class OrderedList(Node):
    items: list[ListItem] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class UnorderedList(Node):
    items: list[ListItem] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Preformatted(Node):
    nodes: list[Node] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Tag(Node):
    name: str
    nodes: list[Node] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Image(Node):
    target: str
    text: list[Node] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Link(Node):
    target: str
    text: list[Node] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Parameter(Node):
    name: list[Node] = dataclasses.field(default_factory=list)
    default: list[Node] | None = None


@dataclasses.dataclass
class TemplateParameter(Node):
    name: list[Node] | None = None
    value: list[Node] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Template(Node):
    name: list[Node] = dataclasses.field(default_factory=list)
    parameters: list[TemplateParameter] = dataclasses.field(default_factory=list)


class TableCellType(enum.Enum):
    ORDINARY = "|"
    HEADING = "!"


@dataclasses.dataclass
class TableCaption(Node):
    attributes: list[Node] | None = None
    content: list[Node] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class TableCell(Node):
    type: TableCellType = TableCellType.ORDINARY
    attributes: list[Node] | None = None
    content: list[Node] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class TableRow(Node):
    attributes: list[Node] = dataclasses.field(default_factory=list)
    cells: list[TableCell] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Table(Node):
    attributes: list[Node] = dataclasses.field(default_factory=list)
    captions: list[TableCaption] = dataclasses.field(default_factory=list)
    rows: list[TableRow] = dataclasses.field(default_factory=list)


class WarningMessage(enum.Enum):
    OVERLAPPING_ELEMENT = "Element crosses the boundary of another element and was ignored."
    STRAY_TEXT_IN_TABLE = "Text outside of any table cell or caption."
    UNCLOSED_TABLE = "Table is not closed."

    def message(self) -> str:
        return self.value


@dataclasses.dataclass
class ParseWarning:
    start: int
    end: int
    message: WarningMessage


def get_nodes_text(text: str, nodes: list[Node]) -> str:
    """
    Return the part of text covered by nodes, from the first to the last

    >>> get_nodes_text("== A [[B]] ==", [Text(2, 5, " A "), Link(5, 10, "B"), Text(10, 11, " ")])
    ' A [[B]] '
    >>> get_nodes_text("anything", [])
    ''
    """

    if not nodes:
        return ""
    return text[nodes[0].start : nodes[-1].end]
