"""Pydantic model for the JSON sweep report (``--report``)."""

from __future__ import annotations

from pydantic import BaseModel, Field

from gqlms.runner import RunSummary


class MutationResult(BaseModel):
    name: str
    verdict: str  # "allowed" | "denied"
    evidence: str
    status_code: int | None = None
    transport_error: bool = False


class SweepStats(BaseModel):
    total: int = 0
    allowed: int = 0
    denied: int = 0
    unreachable: int = 0


class SweepReport(BaseModel):
    format_version: str = "1.0.0"
    endpoint: str
    created_at: str
    unauth_headers: list[str] = Field(default_factory=list)
    stats: SweepStats
    results: list[MutationResult] = Field(default_factory=list)

    @classmethod
    def from_summary(
        cls,
        summary: RunSummary,
        *,
        endpoint: str,
        created_at: str,
        unauth_headers: list[str] | None = None,
    ) -> SweepReport:
        return cls(
            endpoint=endpoint,
            created_at=created_at,
            unauth_headers=unauth_headers or [],
            stats=SweepStats(
                total=summary.total,
                allowed=summary.allowed_count,
                denied=summary.denied_count,
                unreachable=summary.unreachable_count,
            ),
            results=[
                MutationResult(
                    name=o.name,
                    verdict=o.result.verdict.value,
                    evidence=o.result.evidence,
                    status_code=o.result.status_code,
                    transport_error=o.result.transport_error,
                )
                for o in summary.outcomes
            ],
        )
