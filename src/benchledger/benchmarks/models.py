"""Models for benchmark history.

This module defines the records persisted in the history artifact:
commits, individual benchmark measurements, runs, and the store
holding one run series per benchmark suite.

All models are frozen. Fields this library does not know about are
kept (``extra="allow"``) so that they survive a load/merge/save cycle.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt

RANGE_PREFIX = "± "


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the artifact's dictionary layout.

        Declared fields come first in their documented order, unknown
        fields follow. Optional fields that were never set are omitted.

        Returns:
            Dictionary representation of the record.
        """
        return self.model_dump(by_alias=True, exclude_unset=True)


class GitUser(_Record):
    """Author or committer identity of a commit.

    Attributes:
        email: E-mail address.
        name: Display name.
        username: Hosting-service login, when known.
    """

    email: str
    name: str
    username: str | None = None


class Commit(_Record):
    """The code revision a run measured.

    Attributes:
        author: Commit author.
        committer: Commit committer.
        distinct: Whether the commit is distinct within its push.
        id: Commit hash.
        message: Full commit message.
        timestamp: ISO-8601 timestamp with offset, kept verbatim.
        tree_id: Hash of the commit's tree.
        url: Web URL of the commit.

    Example:
        >>> commit = Commit(
        ...     author=GitUser(email="dev@example.com", name="Dev"),
        ...     committer=GitUser(email="dev@example.com", name="Dev"),
        ...     distinct=True,
        ...     id="f25173f9",
        ...     message="add benchmarks",
        ...     timestamp="2023-11-12T20:24:44+08:00",
        ...     tree_id="7366a162",
        ...     url="https://github.com/acme/lib/commit/f25173f9",
        ... )
    """

    author: GitUser
    committer: GitUser
    distinct: bool
    id: str
    message: str
    timestamp: str
    tree_id: str
    url: str

    @property
    def committed_at(self) -> datetime:
        """Commit timestamp as an aware datetime.

        Raises:
            ValueError: If the timestamp is not ISO-8601.
        """
        return parse_iso_timestamp(self.timestamp)


class Benchmark(_Record):
    """One named measurement within a run.

    Attributes:
        name: Benchmark name, unique within its run.
        value: Measured value. Integers stay integers.
        range: Symmetric error as ``"± N"``.
        unit: Unit tag, e.g. ``ns/iter``.
        extra: Free-text harness detail (iterations, procs).
    """

    name: str
    value: StrictInt | Annotated[StrictFloat, Field(allow_inf_nan=False)]
    range: str = ""
    unit: str
    extra: str | None = None

    @property
    def variance(self) -> float | None:
        """Numeric part of ``range``, or None when it cannot be parsed."""
        text = self.range.strip()
        if text.startswith("±"):
            text = text[1:]
        try:
            return float(text.strip().replace(",", ""))
        except ValueError:
            return None


class Run(_Record):
    """One CI execution's benchmark batch.

    Attributes:
        commit: The measured commit.
        date: Capture time in milliseconds since the epoch.
        tool: Harness identifier that produced the batch.
        benches: Benchmarks in harness emission order.
    """

    commit: Commit
    date: int
    tool: str
    benches: tuple[Benchmark, ...]

    def get(self, name: str) -> Benchmark | None:
        """Return the benchmark called ``name``, if this run has one."""
        for bench in self.benches:
            if bench.name == name:
                return bench
        return None


class BenchmarkStore(_Record):
    """The full benchmark history.

    Attributes:
        last_update: Latest run date merged, in milliseconds since the epoch.
        repo_url: Repository the history belongs to.
        entries: Run series keyed by suite name, each ascending by date.
    """

    last_update: int = Field(alias="lastUpdate")
    repo_url: str = Field(alias="repoUrl")
    entries: dict[str, tuple[Run, ...]]

    @classmethod
    def empty(cls, repo_url: str = "") -> BenchmarkStore:
        """Create a store with no history."""
        return cls(last_update=0, repo_url=repo_url, entries={})


def parse_iso_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``.

    Args:
        value: Timestamp text.

    Returns:
        Parsed datetime.

    Raises:
        ValueError: If the text is not ISO-8601.
    """
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def format_range(variance: float) -> str:
    """Render a variance magnitude as ``"± N"``.

    Integral values are written without a fractional part.

    Example:
        >>> format_range(62175)
        '± 62175'
        >>> format_range(0.25)
        '± 0.25'
    """
    if isinstance(variance, float) and variance.is_integer():
        variance = int(variance)
    return f"{RANGE_PREFIX}{variance}"
