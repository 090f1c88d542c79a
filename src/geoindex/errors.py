"""
Error Types

Exceptions raised by the ingestion core. Engine, decode and rule-table
failures are wrapped so callers can catch a single base class, while the
original exception stays available through ``__cause__``.
"""


class GeoIndexError(Exception):
    """Base class for all ingestion core errors."""


class InvalidIngestionState(GeoIndexError):
    """Raised when a writer operation does not match the transaction state."""


class TileDecodeError(GeoIndexError):
    """Raised when vector tile bytes cannot be decoded."""

    def __init__(self, message: str, tile_id: str = ""):
        super().__init__(message)
        self.tile_id = tile_id


class SubstitutionRuleError(GeoIndexError):
    """Raised when a substitution rule table holds a malformed pattern."""

    def __init__(self, language: str, pattern: str, reason: str):
        super().__init__(f"Invalid substitution rule for {language!r}: {pattern!r} ({reason})")
        self.language = language
        self.pattern = pattern


class IndexWriterError(GeoIndexError):
    """Raised by index writer backends when the underlying engine fails."""
