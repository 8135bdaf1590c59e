"""
Build a wikinodes tree from wikitext

wikitextparser finds the balanced constructs (templates, parser functions,
parameters, wiki links, external links, comments and tags) of the page, and
the headings, tables and lists of each region those constructs enclose.
This module nests the constructs, splits template arguments, and fills the
gaps between blocks with paragraph breaks, dividers, preformatted text and
inline nodes.
"""

from __future__ import annotations

import dataclasses
import enum
import html
import re
from typing import Callable, Iterator, NamedTuple

import wikitextparser as wtp  # type: ignore

from .wikinodes import (
    Bold,
    BoldItalic,
    Category,
    CharacterEntity,
    Comment,
    DefinitionList,
    DefinitionListItem,
    DefinitionListItemType,
    EndTag,
    ExternalLink,
    Heading,
    HorizontalDivider,
    Image,
    Italic,
    Link,
    ListItem,
    MagicWord,
    Node,
    OrderedList,
    ParagraphBreak,
    Parameter,
    ParseWarning,
    Preformatted,
    Redirect,
    StartTag,
    Table,
    TableCaption,
    TableCell,
    TableCellType,
    TableRow,
    Tag,
    Template,
    TemplateParameter,
    Text,
    UnorderedList,
    WarningMessage,
)

MASK = "\x00"
COMMENT_MASK = "\x01"
# keeps a region that starts mid-line from being read as a line start
MID_LINE_PREFIX = "_"

RAW_TAGS = frozenset(
    [
        "chem",
        "ce",
        "graph",
        "math",
        "nowiki",
        "pre",
        "score",
        "source",
        "syntaxhighlight",
        "templatedata",
    ]
)
LINK_IMAGE_NAMESPACES = ("file", "image")
LINK_CATEGORY_NAMESPACE = "category"

INLINE_RE = re.compile(
    r"(?P<apostrophes>'{2,})"
    r"|(?P<entity>&(?:#[0-9]+|#[xX][0-9a-fA-F]+|[a-zA-Z][a-zA-Z0-9]*);)"
    r"|(?P<magic_word>__[A-Z]+__)"
    r"|(?P<end_tag></(?P<end_tag_name>[a-zA-Z][a-zA-Z0-9]*)\s*>)"
    r"|(?P<start_tag><(?P<start_tag_name>[a-zA-Z][a-zA-Z0-9]*)(?:\s[^<>]*)?/?>)"
)
REDIRECT_RE = re.compile(r"\s*(?P<redirect>#redirect\s*:?\s*)", re.IGNORECASE)
TAG_NAME_RE = re.compile(r"<\s*([^\s/>]+)")
LINE_BREAK_RE = re.compile(r"[\r\n]")
CAPTION_LINE_RE = re.compile(r"^[ \t]*(\|\+)", re.MULTILINE)
ROW_LINE_RE = re.compile(r"^[ \t]*(\|-+)([^\r\n]*)", re.MULTILINE)


class ElementKind(enum.Enum):
    COMMENT = enum.auto()
    EXTERNAL_LINK = enum.auto()
    LINK = enum.auto()
    PARAMETER = enum.auto()
    TAG = enum.auto()
    TEMPLATE = enum.auto()


@dataclasses.dataclass
class Element:
    kind: ElementKind
    start: int
    end: int
    children: list[Element] = dataclasses.field(default_factory=list)


class Line(NamedTuple):
    start: int
    end: int
    shadow: str


class Block(NamedTuple):
    start: int
    end: int
    nodes: list[Node]


@dataclasses.dataclass
class ParseOutput:
    nodes: list[Node]
    warnings: list[ParseWarning]


def parse(text: str) -> ParseOutput:
    return TreeBuilder(text).build()


def find_elements(text: str) -> list[Element]:
    parsed = wtp.parse(text)
    found = [
        (ElementKind.COMMENT, parsed.comments),
        (ElementKind.TEMPLATE, parsed.templates),
        (ElementKind.TEMPLATE, parsed.parser_functions),
        (ElementKind.PARAMETER, parsed.parameters),
        (ElementKind.LINK, parsed.wikilinks),
        (ElementKind.EXTERNAL_LINK, parsed.external_links),
        (ElementKind.TAG, parsed.get_tags()),
    ]
    elements: dict[tuple[int, int], Element] = {}
    for kind, objs in found:
        for obj in objs:
            start, end = obj.span
            if end <= start:
                continue
            if kind is ElementKind.EXTERNAL_LINK and not text.startswith("[", start):
                continue
            elements.setdefault((start, end), Element(kind, start, end))
    return list(elements.values())


def nest_elements(
    elements: list[Element],
    warn: Callable[[int, int, WarningMessage], None],
) -> list[Element]:
    """Arrange elements by containment, dropping any that cross a boundary"""

    roots: list[Element] = []
    stack: list[Element] = []
    for element in sorted(elements, key=lambda e: (e.start, -e.end)):
        while stack and stack[-1].end <= element.start:
            stack.pop()
        if stack and element.end > stack[-1].end:
            warn(element.start, element.end, WarningMessage.OVERLAPPING_ELEMENT)
            continue
        (stack[-1].children if stack else roots).append(element)
        stack.append(element)
    return roots


def within(elements: list[Element], start: int, end: int) -> list[Element]:
    return [e for e in elements if start <= e.start and e.end <= end]


def cuts_into(elements: list[Element], start: int, end: int) -> bool:
    """Whether start..end begins inside an element or ends partway through one"""

    return any(e.start <= start < e.end or e.start < end < e.end for e in elements)


def split_lines(shadow: str, offset: int) -> Iterator[Line]:
    pos = offset
    for part in shadow.split("\n"):
        yield Line(pos, pos + len(part), part)
        pos += len(part) + 1


def count_while(lines: list[Line], i: int, predicate: Callable[[Line], bool]) -> int:
    j = i
    while j < len(lines) and predicate(lines[j]):
        j += 1
    return j - i


def is_blank(line: Line) -> bool:
    return line.shadow.strip(" \t\r") == ""


def inline_token_nodes(m: re.Match) -> list[Node]:
    start, end = m.span()
    match m.lastgroup:
        case "apostrophes":
            count = end - start
            if count == 2:
                return [Italic(start, end)]
            if count == 3:
                return [Bold(start, end)]
            if count == 4:
                return [Text(start, start + 1, "'"), Bold(start + 1, end)]
            if count == 5:
                return [BoldItalic(start, end)]
            return [Text(start, end - 5, "'" * (count - 5)), BoldItalic(end - 5, end)]
        case "entity":
            character = html.unescape(m.group())
            if character == m.group():
                return [Text(start, end, m.group())]
            return [CharacterEntity(start, end, character)]
        case "magic_word":
            return [MagicWord(start, end)]
        case "end_tag":
            return [EndTag(start, end, m.group("end_tag_name").lower())]
        case "start_tag":
            return [StartTag(start, end, m.group("start_tag_name").lower())]
    raise ValueError("unexpected inline token", m)


def merge_text(nodes: list[Node]) -> list[Node]:
    merged: list[Node] = []
    for node in nodes:
        previous = merged[-1] if merged else None
        if (
            isinstance(node, Text)
            and isinstance(previous, Text)
            and previous.end == node.start
        ):
            merged[-1] = Text(previous.start, node.end, previous.value + node.value)
        else:
            merged.append(node)
    return merged


class TreeBuilder:
    def __init__(self, text: str) -> None:
        self.text = text
        self.warnings: list[ParseWarning] = []

    def warn(self, start: int, end: int, message: WarningMessage) -> None:
        self.warnings.append(ParseWarning(start, end, message))

    def build(self) -> ParseOutput:
        roots = nest_elements(find_elements(self.text), self.warn)
        nodes: list[Node] = []
        start = 0
        redirect = self.redirect_node(roots)
        if redirect is not None:
            nodes.append(redirect)
            start = redirect.end
        nodes.extend(self.block_nodes(start, len(self.text), roots))
        return ParseOutput(merge_text(nodes), self.warnings)

    def at_line_start(self, pos: int) -> bool:
        return pos == 0 or self.text[pos - 1] == "\n"

    def shadow(self, start: int, end: int, elements: list[Element]) -> str:
        chars = list(self.text[start:end])
        for element in within(elements, start, end):
            mask = COMMENT_MASK if element.kind is ElementKind.COMMENT else MASK
            length = element.end - element.start
            chars[element.start - start : element.end - start] = mask * length
        return "".join(chars)

    def find(self, start: int, end: int, elements: list[Element], char: str) -> int | None:
        index = self.shadow(start, end, elements).find(char)
        return None if index == -1 else start + index

    def split(
        self, start: int, end: int, elements: list[Element], char: str
    ) -> list[tuple[int, int]]:
        shadow = self.shadow(start, end, elements)
        segments = []
        pos = start
        index = shadow.find(char)
        while index != -1:
            segments.append((pos, start + index))
            pos = start + index + 1
            index = shadow.find(char, index + 1)
        segments.append((pos, max(pos, end)))
        return segments

    def redirect_node(self, roots: list[Element]) -> Redirect | None:
        m = REDIRECT_RE.match(self.text)
        if not m:
            return None
        for element in roots:
            if element.start == m.end() and element.kind is ElementKind.LINK:
                link = self.link_node(element)
                return Redirect(m.start("redirect"), element.end, link.target)
        return None

    def line_end(self, start: int, end: int, elements: list[Element]) -> int:
        m = LINE_BREAK_RE.search(self.shadow(start, end, elements))
        return end if m is None else start + m.start()

    def trim_line_break(self, start: int, end: int) -> int:
        return start + len(self.text[start:end].rstrip("\r\n"))

    def is_free(
        self, start: int, end: int, elements: list[Element], blocks: list[Block]
    ) -> bool:
        if cuts_into(elements, start, end):
            return False
        return not any(block.start < end and start < block.end for block in blocks)

    def blocks(self, start: int, end: int, elements: list[Element]) -> list[Block]:
        """Tables, headings and lists of a region, in text order"""

        if self.at_line_start(start):
            parsed, offset = wtp.parse(self.text[start:end]), start
        else:
            parsed = wtp.parse(MID_LINE_PREFIX + self.text[start:end])
            offset = start - len(MID_LINE_PREFIX)
        blocks: list[Block] = []
        for table in parsed.get_tables():
            table_start, table_end = (offset + i for i in table.span)
            if self.is_free(table_start, table_end, elements, blocks):
                node = self.table_node(table, offset, elements)
                blocks.append(Block(table_start, table_end, [node]))
        for section in parsed.get_sections(include_subsections=False):
            if section.level == 0:
                continue
            block = self.heading_block(section, offset, end, elements, blocks)
            if block is not None:
                blocks.append(block)
        for wikilist in parsed.get_lists():
            list_start, list_end = (offset + i for i in wikilist.span)
            if self.is_free(list_start, list_end, elements, blocks):
                node = self.list_node(wikilist, offset, elements)
                blocks.append(Block(list_start, list_end, [node]))
        return sorted(blocks, key=lambda block: block.start)

    def block_nodes(self, start: int, end: int, elements: list[Element]) -> list[Node]:
        elements = within(elements, start, end)
        nodes: list[Node] = []
        pos = start
        for block in self.blocks(start, end, elements):
            nodes.extend(self.line_nodes(pos, block.start, elements))
            nodes.extend(block.nodes)
            pos = block.end
        nodes.extend(self.line_nodes(pos, end, elements))
        return merge_text(nodes)

    def line_nodes(self, start: int, end: int, elements: list[Element]) -> list[Node]:
        lines = list(split_lines(self.shadow(start, end, elements), start))
        nodes: list[Node] = []
        i = 0
        while i < len(lines):
            line = lines[i]
            consumed = 1
            if not self.at_line_start(line.start):
                nodes.extend(self.inline_nodes(line.start, line.end, elements))
            elif is_blank(line):
                consumed = count_while(lines, i, is_blank)
                if i + consumed < len(lines):
                    last = lines[i + consumed - 1]
                    nodes.append(ParagraphBreak(line.start, last.end))
            elif line.shadow.startswith("----"):
                dashes = len(line.shadow) - len(line.shadow.lstrip("-"))
                nodes.append(HorizontalDivider(line.start, line.start + dashes))
                nodes.extend(self.inline_nodes(line.start + dashes, line.end, elements))
            elif line.shadow.startswith(" "):
                consumed = count_while(
                    lines,
                    i,
                    lambda other: other.shadow.startswith(" ") and not is_blank(other),
                )
                last = lines[i + consumed - 1]
                content = self.inline_nodes(line.start + 1, last.end, elements)
                nodes.append(Preformatted(line.start, last.end, content))
            else:
                nodes.extend(self.inline_nodes(line.start, line.end, elements))
            i += consumed
            last = lines[i - 1]
            if last.end < end:
                nodes.append(Text(last.end, last.end + 1, "\n"))
        return nodes

    def heading_block(
        self,
        section: wtp.Section,
        offset: int,
        end: int,
        elements: list[Element],
        blocks: list[Block],
    ) -> Block | None:
        start = offset + section.span[0]
        nodes: list[Node] = []
        pos = start
        for element in elements:
            if element.start == pos and element.kind is ElementKind.COMMENT:
                nodes.append(Comment(element.start, element.end))
                pos = element.end
        level = section.level
        title_start = pos + level
        title_end = title_start + len(section.title)
        body_end = title_end + level
        line_end = self.line_end(body_end, end, elements)
        if not self.is_free(start, line_end, elements, blocks):
            return None
        content = self.inline_nodes(title_start, title_end, elements)
        nodes.append(Heading(pos, body_end, level, content))
        nodes.extend(self.inline_nodes(body_end, line_end, elements))
        return Block(start, line_end, nodes)

    def inline_nodes(self, start: int, end: int, elements: list[Element]) -> list[Node]:
        nodes: list[Node] = []
        pos = start
        for element in within(elements, start, end):
            nodes.extend(self.gap_nodes(pos, element.start))
            nodes.append(self.element_node(element))
            pos = element.end
        nodes.extend(self.gap_nodes(pos, end))
        return merge_text(nodes)

    def gap_nodes(self, start: int, end: int) -> list[Node]:
        nodes: list[Node] = []
        pos = start
        for m in INLINE_RE.finditer(self.text, start, end):
            if m.start() > pos:
                nodes.append(Text(pos, m.start(), self.text[pos : m.start()]))
            nodes.extend(inline_token_nodes(m))
            pos = m.end()
        if end > pos:
            nodes.append(Text(pos, end, self.text[pos:end]))
        return nodes

    def element_node(self, element: Element) -> Node:
        match element.kind:
            case ElementKind.COMMENT:
                return Comment(element.start, element.end)
            case ElementKind.EXTERNAL_LINK:
                nodes = self.inline_nodes(element.start + 1, element.end - 1, element.children)
                return ExternalLink(element.start, element.end, nodes)
            case ElementKind.LINK:
                return self.link_node(element)
            case ElementKind.PARAMETER:
                return self.parameter_node(element)
            case ElementKind.TAG:
                return self.tag_node(element)
            case ElementKind.TEMPLATE:
                return self.template_node(element)
        raise ValueError("unexpected element kind", element.kind)

    def template_node(self, element: Element) -> Template:
        children = element.children
        segments = self.split(element.start + 2, element.end - 2, children, "|")
        name_start, name_end = segments[0]
        parameters = []
        for seg_start, seg_end in segments[1:]:
            equals = self.find_parameter_equals(seg_start, seg_end, children)
            if equals is None:
                name = None
                value = self.block_nodes(seg_start, seg_end, children)
            else:
                name = self.block_nodes(seg_start, equals, children)
                value = self.block_nodes(equals + 1, seg_end, children)
            parameters.append(TemplateParameter(seg_start - 1, seg_end, name, value))
        name_nodes = self.block_nodes(name_start, name_end, children)
        return Template(element.start, element.end, name_nodes, parameters)

    def find_parameter_equals(
        self, start: int, end: int, elements: list[Element]
    ) -> int | None:
        """First "=" of a template parameter that is not part of a heading line"""

        for line in split_lines(self.shadow(start, end, elements), start):
            if self.at_line_start(line.start) and line.shadow.startswith("="):
                continue
            index = line.shadow.find("=")
            if index != -1:
                return line.start + index
        return None

    def parameter_node(self, element: Element) -> Parameter:
        children = element.children
        inner_start, inner_end = element.start + 3, element.end - 3
        bar = self.find(inner_start, inner_end, children, "|")
        if bar is None:
            name = self.block_nodes(inner_start, inner_end, children)
            return Parameter(element.start, element.end, name, None)
        name = self.block_nodes(inner_start, bar, children)
        default = self.block_nodes(bar + 1, inner_end, children)
        return Parameter(element.start, element.end, name, default)

    def link_node(self, element: Element) -> Category | Image | Link:
        children = element.children
        inner_start, inner_end = element.start + 2, element.end - 2
        bar = self.find(inner_start, inner_end, children, "|")
        if bar is None:
            target = self.text[inner_start:inner_end].strip()
            text = self.block_nodes(inner_start, inner_end, children)
        else:
            target = self.text[inner_start:bar].strip()
            text = self.block_nodes(bar + 1, inner_end, children)
        prefix, colon, _ = target.partition(":")
        namespace = prefix.strip().lower() if colon else ""
        if namespace == LINK_CATEGORY_NAMESPACE:
            return Category(element.start, element.end, target, [] if bar is None else text)
        if namespace in LINK_IMAGE_NAMESPACES:
            return Image(element.start, element.end, target, [] if bar is None else text)
        return Link(element.start, element.end, target, text)

    def tag_node(self, element: Element) -> Tag:
        m = TAG_NAME_RE.match(self.text, element.start)
        name = m.group(1).lower() if m else ""
        open_end = self.text.find(">", element.start, element.end) + 1
        if open_end == 0 or open_end >= element.end:
            return Tag(element.start, element.end, name, [])
        close_start = self.text.rfind("</", open_end, element.end)
        if close_start == -1:
            close_start = element.end
        if name in RAW_TAGS:
            content = self.text[open_end:close_start]
            nodes: list[Node] = [Text(open_end, close_start, content)] if content else []
        else:
            nodes = self.block_nodes(open_end, close_start, element.children)
        return Tag(element.start, element.end, name, nodes)

    def list_node(
        self, wikilist: wtp.WikiList, offset: int, elements: list[Element]
    ) -> Node:
        start, end = (offset + i for i in wikilist.span)
        level = wikilist.level
        sublists = sorted(wikilist.sublists(), key=lambda sub: sub.span[0])
        items = []
        pos = start
        for fullitem in wikilist.fullitems:
            # an inline definition (";term : details") lies inside its term
            if not self.text.startswith(fullitem, pos):
                continue
            item_start, item_end = pos, pos + len(fullitem)
            pos = item_end
            nested = [
                sub for sub in sublists if item_start <= offset + sub.span[0] < item_end
            ]
            content_start = item_start + level
            content_end = self.line_end(item_start, item_end, elements)
            if nested:
                content_end = min(content_end, offset + nested[0].span[0])
            nodes = self.inline_nodes(
                content_start, max(content_start, content_end), elements
            )
            nodes.extend(self.list_node(sub, offset, elements) for sub in nested)
            marker = self.text[item_start + level - 1]
            item_end = self.trim_line_break(item_start, item_end)
            if marker in ";:":
                items.append(
                    DefinitionListItem(
                        item_start, item_end, DefinitionListItemType(marker), nodes
                    )
                )
            else:
                items.append(ListItem(item_start, item_end, nodes))
        end = self.trim_line_break(start, end)
        match self.text[start + level - 1]:
            case "*":
                return UnorderedList(start, end, items)
            case "#":
                return OrderedList(start, end, items)
        return DefinitionList(start, end, items)

    def cell_node(self, cell, offset: int, elements: list[Element]) -> TableCell:
        cell_start, cell_end = (offset + i for i in cell.span)
        content_start = cell_end - len(cell.value)
        head = self.text[cell_start:content_start]
        marker = cell_start + len(head) - len(head.lstrip())
        marker_end = marker + (2 if self.text.startswith(("||", "!!"), marker) else 1)
        attributes = None
        if content_start > marker_end and self.text[content_start - 1] == "|":
            attributes = self.block_nodes(marker_end, content_start - 1, elements)
        return TableCell(
            marker,
            cell_end,
            TableCellType.HEADING if cell.is_header else TableCellType.ORDINARY,
            attributes,
            self.block_nodes(content_start, cell_end, elements),
        )

    def table_node(self, table: wtp.Table, offset: int, elements: list[Element]) -> Table:
        start, end = (offset + i for i in table.span)
        closed = self.text.endswith("|}", start, end)
        if not closed:
            self.warn(start, end, WarningMessage.UNCLOSED_TABLE)
        first_line_end = self.line_end(start, end, elements)
        body_end = self.text.rfind("\n", start, end) + 1 if closed else end

        rows: list[TableRow] = []
        row_search = first_line_end
        structure_start = body_end
        for row_cells in table.cells(span=False):
            if not row_cells:
                continue
            cells = [self.cell_node(cell, offset, elements) for cell in row_cells]
            separators = list(ROW_LINE_RE.finditer(self.text, row_search, cells[0].start))
            if separators:
                m = separators[-1]
                row_start = m.start(1)
                attributes = self.block_nodes(m.end(1), m.end(2), elements)
            else:
                row_start, attributes = cells[0].start, []
            structure_start = min(structure_start, row_start)
            rows.append(TableRow(row_start, cells[-1].end, attributes, cells))
            row_search = cells[-1].end

        captions = []
        caption = table.caption
        m = CAPTION_LINE_RE.search(self.text, first_line_end, structure_start)
        if caption is not None and m is not None:
            marker_end = m.end(1)
            caption_attributes = table.caption_attrs
            if caption_attributes is None:
                content_start = marker_end
                attributes = None
            else:
                content_start = marker_end + len(caption_attributes) + 1
                attributes = self.block_nodes(marker_end, content_start - 1, elements)
            content_end = content_start + len(caption)
            content = self.block_nodes(content_start, content_end, elements)
            captions.append(TableCaption(m.start(1), content_end, attributes, content))
            structure_start = m.start(1)

        attributes_end = first_line_end
        if first_line_end < structure_start:
            stray_shadow = self.shadow(first_line_end + 1, structure_start, elements)
            for line in split_lines(stray_shadow, first_line_end + 1):
                if not is_blank(line):
                    self.warn(line.start, line.end, WarningMessage.STRAY_TEXT_IN_TABLE)
                    attributes_end = line.end
        attributes = self.block_nodes(start + 2, attributes_end, elements)
        return Table(start, end, attributes, captions, rows)
