"""Shared rich console and output helpers for the sweep CLI."""

from __future__ import annotations

import json

from rich.console import Console
from rich.markup import escape

console = Console()

MAX_BODY_PREVIEW = 500


def truncate(s: str, max_len: int) -> str:
    """Truncate a string to max_len, adding '...' if needed."""
    if len(s) <= max_len:
        return s
    return s[: max_len - 3] + "..."


def warn(msg: str) -> None:
    console.print(f"[yellow]Warning:[/yellow] {escape(msg)}")


def print_body(body: bytes) -> None:
    """Pretty-print a response body: JSON when it parses, truncated text otherwise."""
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        console.print(f"  <binary, {len(body)} bytes>")
        return
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        console.print(f"  {truncate(text, MAX_BODY_PREVIEW)}", markup=False)
        return
    console.print_json(json.dumps(data))
