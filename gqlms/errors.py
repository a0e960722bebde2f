"""Error taxonomy for a sweep run."""

from __future__ import annotations


class ConfigError(ValueError):
    """Raised for unusable inputs before any request is sent."""


class TransportError(RuntimeError):
    """Raised when a request cannot reach the target (DNS, connect, TLS, timeout)."""

    def __init__(self, message: str, endpoint: str | None = None):
        super().__init__(message)
        self.endpoint = endpoint
