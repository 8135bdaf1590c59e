from __future__ import annotations


class HeaderStatsError(Exception):
    pass


class DumpError(HeaderStatsError):
    def __init__(self, msg: str, source=None) -> None:
        super().__init__(msg)
        self.source = source


class UnknownNamespaceError(HeaderStatsError):
    def __init__(self, code, title: str | None = None) -> None:
        if title is None:
            super().__init__(f"unknown namespace {code!r}")
        else:
            super().__init__(f"unknown namespace {code!r} for [[{title}]]")
        self.code = code
        self.title = title


class HeaderLevelError(HeaderStatsError, ValueError):
    def __init__(self, level: int) -> None:
        super().__init__(f"header level {level!r} is outside of 2..6")
        self.level = level


class StatsFinalizedError(HeaderStatsError):
    def __init__(self) -> None:
        super().__init__("header stats are finalized")
