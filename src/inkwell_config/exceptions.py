"""Custom exception hierarchy for the Inkwell configuration loader.

Maps unreadable files, malformed documents and missing configuration to
typed exceptions so callers can react to one failure signal or inspect the
underlying cause.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base exception for all configuration errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class ConfigFileError(ConfigError):
    """Raised when the configuration file is missing or cannot be read."""


class ConfigParseError(ConfigError):
    """Raised when a document is not well-formed XML or does not fit the schema."""


class ConfigNotFoundError(ConfigError):
    """Raised when no usable configuration exists in any source."""
