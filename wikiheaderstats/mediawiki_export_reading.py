from __future__ import annotations

import bz2
import xml.dom.pulldom
import xml.sax
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional, cast
from xml.dom.minidom import Element, Node

from .errors import DumpError
from .mediawiki_export_constants import (
    EXPORT_NS_PREFIX,
    FORMAT,
    MODEL,
    NS,
    PAGE,
    TEXT,
    TITLE,
)


@dataclass
class Page:
    title: str
    namespace: str | None
    model: str | None
    format: str | None
    text: str


def opensesame(path) -> BinaryIO:
    f = bz2.open(path, "rb")
    try:
        f.peek(0)
    except OSError as e:
        f.close()
        if e.args != ("Invalid data stream",):
            raise
        return open(path, "rb")
    return f


def get_text_property(
    element: Element,
    property_uri: str,
    property_local_name: str,
) -> Optional[str]:
    node_list = element.getElementsByTagNameNS(property_uri, property_local_name)
    if not node_list:
        return None
    property_element = node_list.item(0)
    if not property_element:
        return None
    property_element.normalize()
    text_node = property_element.firstChild
    if not text_node:
        return None
    if text_node.nodeType != Node.TEXT_NODE:
        return None
    return text_node.wholeText


def pages(xmlfile, /) -> Iterator[Page]:
    for page_elem in page_elements(xmlfile):
        ns_uri = page_elem.namespaceURI
        title = get_text_property(page_elem, ns_uri, TITLE)
        namespace = get_text_property(page_elem, ns_uri, NS)
        model = get_text_property(page_elem, ns_uri, MODEL)
        format_ = get_text_property(page_elem, ns_uri, FORMAT)
        text = get_text_property(page_elem, ns_uri, TEXT)
        page = Page(title or "", namespace, model, format_, text or "")
        page_elem.unlink()
        yield page


def page_elements(xmlfile) -> Iterator[Element]:
    docstream = xml.dom.pulldom.parse(xmlfile)
    try:
        for event, node in docstream:
            node = cast(Node, node)
            if (
                event == xml.dom.pulldom.START_ELEMENT
                and (node.namespaceURI or "").startswith(EXPORT_NS_PREFIX)
                and node.localName == PAGE
            ):
                page_element = cast(Element, node)
                docstream.expandNode(page_element)
                yield page_element
    except xml.sax.SAXParseException as e:
        raise DumpError(f"error while parsing dump: {e}", xmlfile) from e
