"""Authorization classifier: maps a completed response to Allowed or Denied.

Signals are checked in a fixed order and the first match wins:

1. HTTP 401 / 403
2. an error whose ``extensions.code`` is a denial code
3. an error message containing denial vocabulary
4. errors with null or absent ``data``, whatever the status
5. denial vocabulary anywhere in the raw body
6. otherwise Allowed

The classifier is total: every response maps to exactly one verdict.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import ValidationError

from gqlms.graphql.envelope import GraphQLResponse

DENIED_STATUS_CODES = frozenset({401, 403})
DENIED_ERROR_CODES = frozenset({"UNAUTHENTICATED", "FORBIDDEN", "ACCESS_DENIED"})
DENIED_KEYWORDS = ("unauthorized", "forbidden", "access denied", "restricted")


class Verdict(str, enum.Enum):
    ALLOWED = "allowed"
    DENIED = "denied"


@dataclass(frozen=True)
class ClassificationResult:
    """Verdict for one mutation plus the signal that decided it."""

    verdict: Verdict
    evidence: str
    status_code: int | None = None
    transport_error: bool = False

    @property
    def allowed(self) -> bool:
        return self.verdict is Verdict.ALLOWED

    @classmethod
    def unreachable(cls, error: Exception) -> ClassificationResult:
        """A request that never got a response is recorded as Denied."""
        return cls(Verdict.DENIED, f"transport error: {error}", transport_error=True)


def _denied(evidence: str, status_code: int) -> ClassificationResult:
    return ClassificationResult(Verdict.DENIED, evidence, status_code)


def _matching_keyword(text: str) -> str | None:
    lowered = text.lower()
    for keyword in DENIED_KEYWORDS:
        if keyword in lowered:
            return keyword
    return None


def _parse_envelope(body: bytes) -> GraphQLResponse | None:
    try:
        return GraphQLResponse.model_validate_json(body)
    except ValidationError:
        return None


def classify(status_code: int, body: bytes) -> ClassificationResult:
    """Classify one mutation response."""
    if status_code in DENIED_STATUS_CODES:
        return _denied(f"HTTP {status_code}", status_code)

    envelope = _parse_envelope(body)
    errors = envelope.errors if envelope is not None and envelope.errors else []

    for error in errors:
        if error.code.upper() in DENIED_ERROR_CODES:
            return _denied(f"error code {error.code.upper()}", status_code)

    for error in errors:
        keyword = _matching_keyword(str(error.message or ""))
        if keyword:
            return _denied(f"error message matches '{keyword}'", status_code)

    if errors and envelope is not None and envelope.data is None:
        return _denied("errors with null data", status_code)

    keyword = _matching_keyword(body.decode("utf-8", errors="replace"))
    if keyword:
        return _denied(f"body contains '{keyword}'", status_code)

    return ClassificationResult(Verdict.ALLOWED, f"HTTP {status_code}", status_code)
