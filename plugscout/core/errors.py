"""Error types raised by plugin discovery."""

from __future__ import annotations

from typing import Optional


class PlugscoutError(Exception):
    """Base exception for all discovery errors."""

    def __str__(self) -> str:
        return self.args[0] if self.args else "An error occurred during plugin discovery"


class ParseError(PlugscoutError):
    """Raised when JSON, frontmatter or a reference string is malformed."""


class NotFoundError(PlugscoutError):
    """Raised when a required file or path is absent."""

    def __init__(self, path: str, message: Optional[str] = None):
        super().__init__(message or f"Not found: {path}")
        self.path = path


class NetworkError(PlugscoutError):
    """Raised when fetching a remote archive fails."""

    def __init__(self, message: str, *, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class UnsupportedConfigError(PlugscoutError):
    """Raised when a config file is present but matches no known schema."""

    def __init__(self, harness: str, reason: str):
        super().__init__(f"{harness}: {reason}")
        self.harness = harness
        self.reason = reason


__all__ = [
    "PlugscoutError",
    "ParseError",
    "NotFoundError",
    "NetworkError",
    "UnsupportedConfigError",
]
