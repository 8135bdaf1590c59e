from __future__ import annotations

import enum

from .errors import UnknownNamespaceError


class Namespace(enum.IntEnum):
    """Namespaces of a Wiktionary export, by their numeric codes"""

    MEDIA = -2
    SPECIAL = -1
    MAIN = 0
    TALK = 1
    USER = 2
    USER_TALK = 3
    WIKTIONARY = 4
    WIKTIONARY_TALK = 5
    FILE = 6
    FILE_TALK = 7
    MEDIAWIKI = 8
    MEDIAWIKI_TALK = 9
    TEMPLATE = 10
    TEMPLATE_TALK = 11
    HELP = 12
    HELP_TALK = 13
    CATEGORY = 14
    CATEGORY_TALK = 15
    THREAD = 90
    THREAD_TALK = 91
    SUMMARY = 92
    SUMMARY_TALK = 93
    APPENDIX = 100
    APPENDIX_TALK = 101
    CONCORDANCE = 102
    CONCORDANCE_TALK = 103
    INDEX = 104
    INDEX_TALK = 105
    RHYMES = 106
    RHYMES_TALK = 107
    TRANSWIKI = 108
    TRANSWIKI_TALK = 109
    THESAURUS = 110
    THESAURUS_TALK = 111
    CITATIONS = 114
    CITATIONS_TALK = 115
    SIGN_GLOSS = 116
    SIGN_GLOSS_TALK = 117
    RECONSTRUCTION = 118
    RECONSTRUCTION_TALK = 119
    TIMEDTEXT = 710
    TIMEDTEXT_TALK = 711
    MODULE = 828
    MODULE_TALK = 829
    GADGET = 2300
    GADGET_TALK = 2301
    GADGET_DEFINITION = 2302
    GADGET_DEFINITION_TALK = 2303

    @classmethod
    def from_code(cls, code: int | str | None, title: str | None = None) -> Namespace:
        """
        Resolve the namespace code found in a dump

        >>> Namespace.from_code("0")
        <Namespace.MAIN: 0>
        >>> Namespace.from_code(118)
        <Namespace.RECONSTRUCTION: 118>
        """

        try:
            return cls(int(code))
        except (TypeError, ValueError) as e:
            raise UnknownNamespaceError(code, title) from e

    @classmethod
    def from_name(cls, name: str) -> Namespace:
        """
        Resolve a namespace given by name or by code

        >>> Namespace.from_name("main")
        <Namespace.MAIN: 0>
        >>> Namespace.from_name("User talk")
        <Namespace.USER_TALK: 3>
        >>> Namespace.from_name("10")
        <Namespace.TEMPLATE: 10>
        """

        key = name.strip()
        if key.lstrip("-").isdigit():
            return cls.from_code(key)
        key = key.upper().replace(" ", "_").replace("-", "_")
        if key in ("", "(MAIN)", "ARTICLE"):
            return cls.MAIN
        try:
            return cls[key]
        except KeyError as e:
            raise UnknownNamespaceError(name) from e
