from __future__ import annotations

import itertools
from typing import Iterable, Iterator

from .mediawiki_export_reading import Page
from .namespaces import Namespace


def in_namespaces(page: Page, namespaces: set[Namespace]) -> bool:
    return Namespace.from_code(page.namespace, page.title) in namespaces


def select_pages(
    pages: Iterable[Page],
    namespaces: Iterable[Namespace],
    page_limit: int | None = None,
) -> Iterator[Page]:
    """
    Pages in any of namespaces, stopping after page_limit of them

    A page with an unknown namespace code raises UnknownNamespaceError.
    No page past the last selected one is pulled from pages.
    """

    namespaces = set(namespaces)
    if page_limit is not None and page_limit < 0:
        raise ValueError("page limit must not be negative", page_limit)
    selected = (page for page in pages if in_namespaces(page, namespaces))
    return itertools.islice(selected, page_limit)
