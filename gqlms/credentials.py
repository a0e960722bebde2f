"""Immutable header set sent with every request of a run."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

AUTH_HEADER_NAMES = ("authorization", "cookie")


@dataclass(frozen=True)
class CredentialSet(Mapping[str, str]):
    """Captured headers, names kept exactly as captured (case-sensitive keys).

    The unauthenticated phase gets a new set from ``without()``; an existing
    set is never modified.
    """

    headers: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @classmethod
    def from_mapping(cls, headers: Mapping[str, str]) -> CredentialSet:
        return cls(tuple(headers.items()))

    def __getitem__(self, name: str) -> str:
        for key, value in self.headers:
            if key == name:
                return value
        raise KeyError(name)

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self.headers)

    def __len__(self) -> int:
        return len(self.headers)

    def missing(self, names: Iterable[str]) -> list[str]:
        """Names from *names* that are not present in this set."""
        return [n for n in names if n not in self]

    def without(self, names: Iterable[str]) -> CredentialSet:
        """A new set minus *names*; names that are absent are ignored."""
        drop = set(names)
        return CredentialSet(tuple((k, v) for k, v in self.headers if k not in drop))

    @property
    def looks_authenticated(self) -> bool:
        return any(k.lower() in AUTH_HEADER_NAMES for k in self)
