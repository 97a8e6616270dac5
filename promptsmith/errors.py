"""Error taxonomy for the rule and scoring engine."""

from __future__ import annotations


class PromptSmithError(Exception):
    """Base class for every error raised by promptsmith."""


class ConfigurationError(PromptSmithError, ValueError):
    """A pattern library, weight table or settings file is invalid.

    Raised while the registry or settings are being built; never recovered.
    """


class InvalidInputError(PromptSmithError, ValueError):
    """Caller supplied input that violates an operation's contract."""


def ensure_text(value: object, name: str = "prompt") -> str:
    """Return ``value`` unchanged if it is a string, else raise InvalidInputError."""
    if not isinstance(value, str):
        raise InvalidInputError(f"{name} must be a string, got {type(value).__name__}")
    return value


__all__ = ["PromptSmithError", "ConfigurationError", "InvalidInputError", "ensure_text"]
