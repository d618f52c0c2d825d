# src/wowhead/errors.py

from enum import Enum


class WowheadError(Exception):
    """Base class for every error raised by the parser and SQL builder."""


class ExtractionKind(str, Enum):
    NotFound  = "not_found"
    Malformed = "malformed"


class ExtractionError(WowheadError):
    """
    A page did not contain usable listview data.

    Page-scoped: callers log it and move on to the next page.
    """

    def __init__(self, kind: ExtractionKind, page_id, detail: str = ""):
        self.kind = kind
        self.page_id = page_id
        self.detail = detail
        what = "no listview data" if kind is ExtractionKind.NotFound else "malformed listview data"
        msg = f"{what} on page {page_id}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class ArgumentError(WowheadError, ValueError):
    """Malformed call into the SQL builder."""


class BuilderClosedError(ArgumentError):
    """The builder was already rendered and no longer accepts records."""


class InvalidSemantics(WowheadError):
    """Unknown query type; propagates unwrapped out of Settings validation."""

    def __init__(self, query_type):
        self.query_type = query_type
        super().__init__(f"Invalid query type: {query_type!r}")


class ConfigError(WowheadError):
    """Settings file missing, unreadable or invalid."""
