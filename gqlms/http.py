"""Request executor: POSTs GraphQL payloads with the captured headers."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

import requests

from gqlms.errors import ConfigError, TransportError

DEFAULT_PROXY = "http://127.0.0.1:8080"
DEFAULT_TIMEOUT = 30.0

# The body sent is never the captured one, so these are recomputed by requests
_TRANSPORT_HEADERS = frozenset({"content-length", "transfer-encoding", "connection"})


@dataclass(frozen=True)
class HttpResult:
    """A fully buffered response; ``body`` can be read any number of times."""

    status_code: int
    body: bytes


def validate_proxy(proxy: str) -> str:
    """Check that a proxy URL has an http or https scheme and a host."""
    parsed = urlparse(proxy)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid proxy URL: {proxy!r}")
    return proxy


class RequestExecutor:
    """Sends every request of a run through one ``requests.Session``.

    The proxy, when given, applies to both http and https targets.
    """

    def __init__(
        self,
        *,
        proxy: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = True,
    ):
        self._session = requests.Session()
        self._timeout = timeout
        self._session.verify = verify
        self.proxy = validate_proxy(proxy) if proxy else None
        if self.proxy:
            self._session.proxies = {"http": self.proxy, "https": self.proxy}

    @property
    def session(self) -> requests.Session:
        return self._session

    def send(self, endpoint: str, headers: Mapping[str, str], payload: bytes) -> HttpResult:
        """POST *payload* to *endpoint* and buffer the whole response.

        Captured headers overwrite the defaults of the same name.

        Raises:
            TransportError: If the target cannot be reached.
        """
        request_headers: dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        for name, value in headers.items():
            if name.lower() in _TRANSPORT_HEADERS:
                continue
            # Case-insensitive overwrite, keeping the captured spelling
            for existing in [k for k in request_headers if k.lower() == name.lower()]:
                del request_headers[existing]
            request_headers[name] = value

        try:
            resp = self._session.post(
                endpoint,
                data=payload,
                headers=request_headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Request to {endpoint} failed: {e}", endpoint=endpoint) from e

        return HttpResult(status_code=resp.status_code, body=resp.content)

    def post_json(self, endpoint: str, headers: Mapping[str, str], body: dict[str, Any]) -> HttpResult:
        return self.send(endpoint, headers, json.dumps(body).encode("utf-8"))
