"""Custom exceptions for pasdb.

The extraction core itself never raises on source text; these cover the
surrounding layers (configuration and unit loading) where failing loudly is
the right answer.
"""


class PasdbError(Exception):
    """Base class for pasdb errors.

    Attributes:
        message: Human-readable error description
        details: Dict with context for debugging (paths, offending values)
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(PasdbError):
    """Raised when a configuration value is not one pasdb understands."""


class UnitReadError(PasdbError):
    """Raised when a unit file cannot be read or decoded."""
