"""Sweep orchestration: discover mutations, drop credentials, test each one.

A run is strictly sequential:

    fetch schema (authenticated) -> strip headers -> for each mutation:
    build payload -> send -> classify -> record -> pause -> summary

Only the catalog fetch uses the full credential set.  Input-type lookups and
mutations go out with the stripped set.

The catalog fetch is the only fatal step.  Per-mutation transport failures
are recorded as Denied with ``transport_error`` set.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from gqlms.classify import ClassificationResult, classify
from gqlms.credentials import CredentialSet
from gqlms.errors import ConfigError, TransportError
from gqlms.graphql.introspection import Introspector
from gqlms.graphql.payload import PayloadBuilder
from gqlms.graphql.types import MutationField
from gqlms.http import HttpResult, RequestExecutor
from gqlms.sinks import ResultSink

ResultCallback = Callable[[int, int, str, ClassificationResult, HttpResult | None], None]


class SweepAborted(Exception):
    """The operator declined to continue with missing unauth headers."""

    def __init__(self, missing: list[str]):
        super().__init__(f"Aborted: headers not found in request: {', '.join(missing)}")
        self.missing = missing


@dataclass
class MutationOutcome:
    name: str
    result: ClassificationResult


@dataclass
class RunSummary:
    """Counters for a finished run; ``total == allowed_count + denied_count``."""

    allowed_count: int = 0
    denied_count: int = 0
    unreachable_count: int = 0
    outcomes: list[MutationOutcome] = field(default_factory=lambda: list[MutationOutcome]())

    @property
    def total(self) -> int:
        return self.allowed_count + self.denied_count

    def record(self, name: str, result: ClassificationResult) -> None:
        self.outcomes.append(MutationOutcome(name=name, result=result))
        if result.allowed:
            self.allowed_count += 1
        else:
            self.denied_count += 1
            if result.transport_error:
                self.unreachable_count += 1


class SweepRunner:
    """Runs one authorization sweep against a GraphQL endpoint.

    *confirm* is asked, with the list of missing names, whether to proceed
    when some *unauth_headers* are absent from *credentials*; it defaults to
    proceeding.  *sleep* is injectable for tests.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        endpoint: str,
        credentials: CredentialSet,
        *,
        unauth_headers: Sequence[str] = (),
        delay: float = 1.0,
        confirm: Callable[[list[str]], bool] | None = None,
        on_progress: Callable[[str], None] | None = None,
        on_result: ResultCallback | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if delay < 0:
            raise ConfigError(f"Delay must be >= 0, got {delay}")
        self.executor = executor
        self.endpoint = endpoint
        self.credentials = credentials
        self.unauth_headers = list(unauth_headers)
        self.delay = delay
        self._confirm = confirm or (lambda _missing: True)
        self._on_progress = on_progress or (lambda _msg: None)
        self._on_result = on_result
        self._sleep = sleep

    def run(
        self,
        discovered: ResultSink,
        allowed: ResultSink,
        denied: ResultSink,
    ) -> RunSummary:
        """Execute the sweep, appending names to the three sinks as it goes.

        Raises:
            SweepAborted: If *confirm* declines to continue.
            TransportError: If the schema cannot be fetched.
        """
        missing = self.credentials.missing(self.unauth_headers)
        if missing and not self._confirm(missing):
            raise SweepAborted(missing)

        introspector = Introspector(self.executor, self.endpoint, on_progress=self._on_progress)
        mutations = introspector.fetch_mutations(self.credentials)
        for mutation in mutations:
            discovered.append(mutation.name)
        self._on_progress(f"Fetched {len(mutations)} mutations")

        sweep_credentials = self.credentials
        if self.unauth_headers:
            sweep_credentials = self.credentials.without(self.unauth_headers)
            self._on_progress(
                f"Switching to unauthenticated mode, removed: {', '.join(self.unauth_headers)}"
            )

        builder = PayloadBuilder(
            lambda type_name: introspector.fetch_input_fields(type_name, sweep_credentials),
            on_progress=self._on_progress,
        )

        summary = RunSummary()
        for index, mutation in enumerate(mutations):
            result, response = self._test_one(builder, mutation, sweep_credentials)
            summary.record(mutation.name, result)
            (allowed if result.allowed else denied).append(mutation.name)

            if self._on_result is not None:
                self._on_result(index + 1, len(mutations), mutation.name, result, response)

            if index < len(mutations) - 1 and self.delay:
                self._sleep(self.delay)

        return summary

    def _test_one(
        self,
        builder: PayloadBuilder,
        mutation: MutationField,
        credentials: CredentialSet,
    ) -> tuple[ClassificationResult, HttpResult | None]:
        payload = builder.build(mutation)
        try:
            response = self.executor.send(self.endpoint, credentials, payload.to_bytes())
        except TransportError as e:
            self._on_progress(f"{mutation.name}: {e}")
            return ClassificationResult.unreachable(e), None
        return classify(response.status_code, response.body), response
