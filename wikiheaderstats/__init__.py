"""Section header statistics for MediaWiki export dumps"""

from .header_stats import HeaderCounts, HeaderStat, HeaderStats
from .wikitext_tree import parse

__all__ = ["HeaderCounts", "HeaderStat", "HeaderStats", "parse"]
