"""Validation of raw harness output into runs.

This module turns one harness batch (a tool identifier, the measured
commit and a sequence of raw measurements) into a validated Run.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import TYPE_CHECKING, NamedTuple

from pydantic import ValidationError as PydanticValidationError

from benchledger.benchmarks.models import Benchmark, Commit, Run, format_range, parse_iso_timestamp
from benchledger.core.exceptions import ValidationError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from typing import Any

logger = logging.getLogger(__name__)


class RawBenchmark(NamedTuple):
    """One measurement as emitted by a harness.

    Attributes:
        name: Benchmark name.
        value: Aggregated measured value.
        variance: Symmetric error magnitude (non-negative).
        unit: Unit tag.
        extra: Optional free-text harness detail.
    """

    name: str
    value: float
    variance: float
    unit: str
    extra: str | None = None


class MonotonicClock:
    """Millisecond wall clock that never moves backwards.

    Successive calls return non-decreasing values even if the system
    clock is adjusted between them.

    Example:
        >>> clock = MonotonicClock()
        >>> clock() <= clock()
        True
    """

    def __init__(self, source: Callable[[], float] = time.time) -> None:
        """Initialize the clock.

        Args:
            source: Returns the current time in seconds since the epoch.
        """
        self._source = source
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            now = int(self._source() * 1000)
            if now < self._last:
                now = self._last
            self._last = now
            return now


default_clock = MonotonicClock()


def _coerce_commit(commit: Commit | Mapping[str, Any]) -> Commit:
    if isinstance(commit, Commit):
        return commit
    try:
        return Commit.model_validate(commit)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid commit: {e}") from e


def _check_value(name: str, value: object) -> int | float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"Benchmark {name!r} has a non-numeric value: {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"Benchmark {name!r} has a non-finite value: {value!r}")
    return value


def _check_variance(name: str, variance: object) -> int | float:
    if isinstance(variance, bool) or not isinstance(variance, (int, float)):
        raise ValidationError(f"Benchmark {name!r} has a non-numeric variance: {variance!r}")
    if not math.isfinite(variance):
        raise ValidationError(f"Benchmark {name!r} has a non-finite variance: {variance!r}")
    if variance < 0:
        raise ValidationError(f"Benchmark {name!r} has a negative variance: {variance!r}")
    return variance


def build_run(
    tool: str,
    commit: Commit | Mapping[str, Any],
    benchmarks: Iterable[RawBenchmark | tuple[Any, ...]],
    clock: Callable[[], int] = default_clock,
) -> Run:
    """Validate a harness batch into a Run.

    Args:
        tool: Harness identifier (e.g. ``cargo``).
        commit: The measured commit, as a model or its dictionary form.
        benchmarks: Raw ``(name, value, variance, unit[, extra])`` tuples
            in harness emission order.
        clock: Source of the run date in milliseconds since the epoch.

    Returns:
        The validated run.

    Raises:
        ValidationError: If the tool, commit or any benchmark is invalid,
            if the batch is empty, or if a name repeats.

    Example:
        >>> run = build_run("cargo", commit, [("parse", 31, 0, "ns/iter")])
        >>> run.benches[0].range
        '± 0'
    """
    if not tool or not tool.strip():
        raise ValidationError("Tool identifier must be a non-empty string")

    parsed_commit = _coerce_commit(commit)
    if not parsed_commit.id:
        raise ValidationError("Commit identifier must be a non-empty string")
    try:
        parse_iso_timestamp(parsed_commit.timestamp)
    except ValueError as e:
        raise ValidationError(f"Commit timestamp is not ISO-8601: {parsed_commit.timestamp!r}") from e

    benches: list[Benchmark] = []
    seen: set[str] = set()
    for raw in benchmarks:
        try:
            item = RawBenchmark(*raw)
        except TypeError as e:
            raise ValidationError(f"Malformed benchmark tuple: {raw!r}") from e
        if not isinstance(item.name, str) or not item.name:
            raise ValidationError("Benchmark name must be a non-empty string")
        if item.name in seen:
            raise ValidationError(f"Duplicate benchmark name in batch: {item.name!r}")
        seen.add(item.name)

        value = _check_value(item.name, item.value)
        variance = _check_variance(item.name, item.variance)
        fields: dict[str, Any] = {
            "name": item.name,
            "value": value,
            "range": format_range(variance),
            "unit": item.unit,
        }
        if item.extra is not None:
            fields["extra"] = item.extra
        try:
            benches.append(Benchmark(**fields))
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid benchmark {item.name!r}: {e}") from e

    if not benches:
        raise ValidationError("Benchmark batch is empty")

    run = Run(commit=parsed_commit, date=clock(), tool=tool, benches=tuple(benches))
    logger.debug(f"Built run for {tool} at {run.date} with {len(benches)} benchmarks")
    return run
