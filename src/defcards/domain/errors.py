"""Errors surfaced by the core to its callers."""


class DefcardsError(Exception):
    """Base class for defcards errors."""


class UnknownTermError(DefcardsError, LookupError):
    """Raised when a term key cannot be resolved to a schedulable definition.

    Callers running a study session should skip the card and continue rather
    than abort the session.
    """

    def __init__(self, term: str, reason: str = "not found"):
        self.term = term
        self.reason = reason
        super().__init__(f"Unknown term '{term}': {reason}")


class ConfigError(DefcardsError):
    """Raised when the resolved configuration is invalid."""


class PersistenceError(DefcardsError):
    """Raised when state cannot be written back without damaging a file."""
