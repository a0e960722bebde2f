"""Append-only name sinks for sweep results."""

from __future__ import annotations

from pathlib import Path
from typing import IO, Protocol

ALL_MUTATIONS_FILE = "allMutations.txt"
ALLOWED_MUTATIONS_FILE = "allowedMutations.txt"
DENIED_MUTATIONS_FILE = "unallowedMutations.txt"


class ResultSink(Protocol):
    def append(self, name: str) -> None: ...


class MemorySink:
    """Collects names in a list."""

    def __init__(self) -> None:
        self.names: list[str] = []

    def append(self, name: str) -> None:
        self.names.append(name)


class FileSink:
    """Writes one name per line, flushing after each so an interrupted run
    still leaves a consistent partial file.

    Nothing touches the disk until the first ``append`` or an explicit
    ``open``, which truncates the file.  A run that aborts before recording
    anything leaves the previous file in place.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._fh: IO[str] | None = None

    def _handle(self) -> IO[str]:
        if self._fh is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = open(self.path, "w", encoding="utf-8")
        return self._fh

    def open(self) -> None:
        """Create or truncate the file without writing a name."""
        self._handle()

    def append(self, name: str) -> None:
        fh = self._handle()
        fh.write(name + "\n")
        fh.flush()

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> FileSink:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()


def result_sinks(output_dir: str | Path) -> tuple[FileSink, FileSink, FileSink]:
    """Sinks for the discovered / allowed / denied files under *output_dir*.

    The files are created lazily; see ``FileSink``.
    """
    out = Path(output_dir)
    return (
        FileSink(out / ALL_MUTATIONS_FILE),
        FileSink(out / ALLOWED_MUTATIONS_FILE),
        FileSink(out / DENIED_MUTATIONS_FILE),
    )
