"""Exception hierarchy for forgery."""

from __future__ import annotations


class ForgeryError(Exception):
    """Base class for every error raised while turning a trace into tests."""


class PropertyNameError(ForgeryError):
    """Raised when a line has no `<subject>.<property>(` fragment to name a test after."""

    def __init__(self, line: str) -> None:
        super().__init__(f"No property name found in line: {line!r}")
        self.line = line


class CheatsDataError(ForgeryError):
    """Raised when the trailing `(key=value, ...)` group of a call line is unusable."""

    def __init__(self, message: str, key: str | None = None, raw_value: str | None = None) -> None:
        super().__init__(message)
        self.key = key
        self.raw_value = raw_value


class CallLineError(ForgeryError):
    """Raised when a call line cannot be turned into statements.

    `phase` names the step that failed ("cheats data" or "property call").
    The underlying error is chained as `__cause__`.
    """

    def __init__(self, phase: str, line: str) -> None:
        super().__init__(f"Failed to parse {phase} of call line: {line!r}")
        self.phase = phase
        self.line = line


class ProtocolStateError(ForgeryError):
    """Raised when the parser's own bookkeeping is inconsistent."""


class ConfigError(ForgeryError):
    """Raised when the medusa project configuration cannot be used."""


__all__ = [
    "ForgeryError",
    "PropertyNameError",
    "CheatsDataError",
    "CallLineError",
    "ProtocolStateError",
    "ConfigError",
]
