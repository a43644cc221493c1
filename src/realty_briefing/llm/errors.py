"""Errors raised by the text-generation client."""
from __future__ import annotations


class GenerationError(Exception):
    """Base class for every terminal generation failure."""


class ConfigurationError(GenerationError):
    """No API credential configured; raised before any network call."""


class UpstreamTimeoutError(GenerationError, TimeoutError):
    """An attempt exceeded its deadline."""


class TransportError(GenerationError):
    """Connection-level failure (DNS, refused, reset, TLS)."""


class UpstreamError(GenerationError):
    """The API answered with a non-2xx status."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"upstream returned HTTP {status}")
        self.status = status
        self.body = body


class MalformedResponseError(GenerationError):
    """A 2xx response that could not be parsed or carried no text."""
