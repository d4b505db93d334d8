"""Exception hierarchy for Cipher.

All brain-specific exceptions inherit from CipherError, enabling callers to
catch broad (CipherError) or narrow (e.g., RankingError). None of these are
meant to reach the host: each component recovers from its own errors at its
boundary and degrades to a safe answer.
"""

from __future__ import annotations


class CipherError(Exception):
    """Base exception for all Cipher errors."""


class ClassificationError(CipherError):
    """Raised when a classification rule fails while evaluating input.

    The classifier converts this into an ``unknown`` classification.
    """


class RankingError(CipherError):
    """Raised when no handler can be scored or an anchor handler is missing.

    The ranking engine converts this into the anchor-only safe result.
    """


class HandlerNotFoundError(CipherError):
    """Raised when a handler name is not present in the capability registry."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown handler: {name}")
        self.name = name


class PersistenceError(CipherError):
    """Raised when state cannot be read from or written to the store.

    Examples: unreadable JSON file, permission denied on save.
    """


class SchemaVersionError(PersistenceError):
    """Raised when persisted state was written by a newer schema version."""

    def __init__(self, found: int, supported: int) -> None:
        super().__init__(
            f"Persisted schema version {found} is newer than supported version {supported}"
        )
        self.found = found
        self.supported = supported


class PatternExtractionError(CipherError):
    """Raised when an outcome lacks the fields a pattern extractor needs.

    The feedback loop logs it and skips pattern creation.
    """
