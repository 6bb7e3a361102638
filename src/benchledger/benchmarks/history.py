"""History store operations and the ingestion cycle.

This module provides the functional store operations (``load``,
``merge``, ``series``) and BenchmarkHistory, the high-level API that
runs one ingestion cycle against a persisted artifact:

    load -> analyze -> merge -> encode -> write

Concurrent cycles against the same artifact are not synchronized here;
callers must serialize them (last writer wins at the storage layer).
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from benchledger.benchmarks.models import BenchmarkStore, Run
from benchledger.benchmarks.serializer import DEFAULT_GLOBAL_NAME, decode, encode
from benchledger.benchmarks.storage import FileStore, StorageProtocol
from benchledger.core.exceptions import NotFoundError

if TYPE_CHECKING:
    from benchledger.regression import RegressionResult, RegressionThresholds

logger = logging.getLogger(__name__)


def load(
    source: StorageProtocol | str | Path,
    repo_url: str = "",
    global_name: str = DEFAULT_GLOBAL_NAME,
) -> BenchmarkStore:
    """Load a store from a path or storage backend.

    Args:
        source: Artifact path or storage backend.
        repo_url: Repository URL for a freshly created store.
        global_name: Identifier the artifact assigns its value to.

    Returns:
        The stored history, or an empty store if the source does not exist.

    Raises:
        CorruptStoreError: If the artifact exists but cannot be decoded.
    """
    storage = source if isinstance(source, StorageProtocol) else FileStore(source)
    text = storage.read()
    if text is None:
        return BenchmarkStore.empty(repo_url)
    return decode(text, global_name)


def merge(store: BenchmarkStore, run: Run, suite: str | None = None) -> BenchmarkStore:
    """Insert a run into its series.

    The run goes after every run dated at or before it, so the series
    stays ascending by date and equal dates keep ingestion order. Runs
    already present are neither changed nor moved.

    Args:
        store: The current store (not modified).
        run: The run to insert.
        suite: Series name. Defaults to ``run.tool``.

    Returns:
        A new store containing the run.
    """
    name = suite or run.tool
    existing = store.entries.get(name, ())
    index = bisect.bisect_right(existing, run.date, key=lambda r: r.date)
    if index < len(existing):
        logger.debug(f"Inserting out-of-order run into {name!r} at {index} of {len(existing)}")

    entries = dict(store.entries)
    entries[name] = (*existing[:index], run, *existing[index:])
    return store.model_copy(
        update={
            "entries": entries,
            "last_update": max(store.last_update, run.date),
        }
    )


def series(store: BenchmarkStore, tool: str) -> tuple[Run, ...]:
    """Return the runs of one series, ascending by date.

    Raises:
        NotFoundError: If nothing was ever merged under ``tool``.
    """
    try:
        return store.entries[tool]
    except KeyError:
        raise NotFoundError(f"No history for {tool!r}") from None


def has_commit(store: BenchmarkStore, tool: str, commit_id: str) -> bool:
    """Check whether a series already holds a run for ``commit_id``."""
    return any(run.commit.id == commit_id for run in store.entries.get(tool, ()))


@dataclass
class IngestResult:
    """Outcome of one ingestion cycle.

    Attributes:
        store: The store after the cycle.
        regression: Classification of the run (None if it was skipped).
        skipped: True if the run was a duplicate and nothing was written.
    """

    store: BenchmarkStore
    regression: RegressionResult | None
    skipped: bool = False


class BenchmarkHistory:
    """High-level API for benchmark history.

    Runs ingestion cycles against one persisted artifact. A cycle either
    writes the whole updated artifact or leaves it untouched.

    Example:
        >>> history = BenchmarkHistory("dev/bench/data.js")
        >>> result = history.ingest(run, suite="Rust Benchmark")
        >>> if result.regression and result.regression.has_regressions:
        ...     print(result.regression.summary())
    """

    def __init__(
        self,
        storage: StorageProtocol | str | Path = "dev/bench/data.js",
        thresholds: RegressionThresholds | None = None,
        repo_url: str = "",
        global_name: str = DEFAULT_GLOBAL_NAME,
    ) -> None:
        """Initialize with storage backend.

        Args:
            storage: Storage backend or artifact path.
            thresholds: Thresholds for regression detection.
            repo_url: Repository URL for a freshly created store.
            global_name: Identifier the artifact assigns its value to.
        """
        self._storage: StorageProtocol = storage if isinstance(storage, StorageProtocol) else FileStore(storage)
        self._thresholds = thresholds
        self._repo_url = repo_url
        self._global_name = global_name

    def load(self) -> BenchmarkStore:
        """Load the current store."""
        return load(self._storage, repo_url=self._repo_url, global_name=self._global_name)

    def get_history(self, suite: str) -> tuple[Run, ...]:
        """Get the runs of a series.

        Raises:
            NotFoundError: If the series does not exist.
        """
        return series(self.load(), suite)

    def ingest(
        self,
        run: Run,
        suite: str | None = None,
        skip_duplicate: bool = False,
    ) -> IngestResult:
        """Analyze a run, merge it and persist the result.

        Args:
            run: The validated run.
            suite: Series name. Defaults to ``run.tool``.
            skip_duplicate: Do nothing if the series already has a run
                for the same commit.

        Returns:
            IngestResult with the new store and the run's classification.

        Raises:
            CorruptStoreError: If the persisted artifact cannot be read.
        """
        from benchledger.regression import Classification, RegressionDetector

        name = suite or run.tool
        store = self.load()

        if skip_duplicate and has_commit(store, name, run.commit.id):
            logger.info(f"Commit {run.commit.id} already recorded in {name!r}, skipping")
            return IngestResult(store=store, regression=None, skipped=True)

        previous = store.entries.get(name, ())
        if not previous:
            logger.info(f"Starting new series {name!r}")

        regression = RegressionDetector(self._thresholds).detect(run, previous)
        for alert in regression.alerts:
            log = logger.warning if alert.classification == Classification.REGRESSION else logger.info
            log(f"[{name}] {alert.message}")

        updated = merge(store, run, suite=name)
        self._storage.write(encode(updated, self._global_name))
        return IngestResult(store=updated, regression=regression)
