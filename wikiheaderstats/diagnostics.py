from __future__ import annotations

import logging
from typing import Iterable

from .mediawiki_export_reading import Page
from .wikinodes import ParseWarning


def report_warnings(page: Page, warnings: Iterable[ParseWarning]) -> None:
    size = len(page.text)
    for warning in warnings:
        start, end = warning.start, warning.end
        message = warning.message.message().rstrip(".")
        if not 0 <= start <= end <= size:
            logging.warning(
                "position %d or %d in warning %s is out of range of 0..%d, size of [[%s]]",
                start,
                end,
                message,
                size,
                page.title,
            )
        else:
            logging.warning(
                "%s at %d..%d (%r) in [[%s]]",
                message,
                start,
                end,
                page.text[start:end],
                page.title,
            )
