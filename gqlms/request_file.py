"""Parse a captured raw HTTP request (e.g. saved from an intercepting proxy)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from gqlms.errors import ConfigError

_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"})


@dataclass
class CapturedRequest:
    """Endpoint, headers (in captured order and case) and body of a request."""

    endpoint: str
    headers: dict[str, str] = field(default_factory=lambda: dict[str, str]())
    body: str = ""
    method: str = "POST"


def get_header(headers: dict[str, str], name: str) -> str | None:
    """Get a header value by name (case-insensitive, first match wins)."""
    name_lower = name.lower()
    for key, value in headers.items():
        if key.lower() == name_lower:
            return value
    return None


def parse_request(text: str, *, use_ssl: bool = True) -> CapturedRequest:
    """Parse raw request text.

    The first non-empty line is ``METHOD TARGET [VERSION]``; header lines
    follow up to the first blank line; the rest is the body.  A relative
    TARGET is completed with the scheme and the Host header.

    Raises:
        ConfigError: If there is no request line, or no Host for a relative target.
    """
    lines = text.splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    if not lines:
        raise ConfigError("Request file is empty")

    parts = lines[0].split()
    if len(parts) < 2 or parts[0].upper() not in _METHODS:
        raise ConfigError(f"No request line found (got {lines[0]!r})")
    method, target = parts[0].upper(), parts[1]

    headers: dict[str, str] = {}
    body_lines: list[str] = []
    in_body = False
    for line in lines[1:]:
        if in_body:
            body_lines.append(line)
        elif not line.strip():
            in_body = True
        elif ":" in line:
            key, value = line.split(":", 1)
            headers[key.strip()] = value.strip()

    if not target.startswith(("http://", "https://")):
        host = get_header(headers, "Host")
        if not host:
            raise ConfigError("No Host header found, can't determine endpoint")
        scheme = "https" if use_ssl else "http"
        target = f"{scheme}://{host}{target}"

    return CapturedRequest(endpoint=target, headers=headers, body="\n".join(body_lines), method=method)


def parse_request_file(path: str | Path, *, use_ssl: bool = True) -> CapturedRequest:
    """Read and parse a request file.  See ``parse_request``."""
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ConfigError(f"Cannot read request file {path}: {e}") from e
    return parse_request(text, use_ssl=use_ssl)
