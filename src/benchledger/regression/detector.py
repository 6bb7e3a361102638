"""Regression detector for benchmark runs.

This module provides the RegressionDetector class, which classifies
each benchmark of an incoming run against the most recent earlier
value of the same benchmark in its series.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from benchledger.regression.models import (
    Classification,
    Comparator,
    RegressionAlert,
    RegressionResult,
    RegressionThresholds,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from benchledger.benchmarks.models import Benchmark, Run

logger = logging.getLogger(__name__)


# Harness tools whose values are throughputs (increase = improvement)
HIGHER_IS_BETTER_TOOLS: set[str] = {"customBiggerIsBetter", "pytest", "benchmarkjs"}


class RegressionDetector:
    """Detect regressions of a run against its series history.

    The detector never reads the wall clock and holds no state between
    calls: the same run, series and thresholds always give the same result.

    Attributes:
        thresholds: Thresholds and comparator for classification.

    Example:
        >>> detector = RegressionDetector(
        ...     thresholds=RegressionThresholds(threshold=0.02, alert_threshold=0.05),
        ... )
        >>> result = detector.detect(run, series)
        >>> for alert in result.alerts:
        ...     print(alert.message)
    """

    def __init__(self, thresholds: RegressionThresholds | None = None) -> None:
        """Initialize detector.

        Args:
            thresholds: Thresholds for classification. Defaults to RegressionThresholds().
        """
        self.thresholds = thresholds or RegressionThresholds()

    def comparator_for(self, tool: str) -> Comparator:
        """Resolve the comparator for a harness tool.

        An explicitly configured comparator wins. Without one the default
        is lower-is-better, except for the tools in
        ``HIGHER_IS_BETTER_TOOLS`` whose output is a throughput
        (``customBiggerIsBetter``, ``pytest``, ``benchmarkjs``); their
        series are compared higher-is-better as the dashboard charts them.
        """
        if self.thresholds.comparator is not None:
            return self.thresholds.comparator
        if tool in HIGHER_IS_BETTER_TOOLS:
            return Comparator.HIGHER_IS_BETTER
        return Comparator.LOWER_IS_BETTER

    def classify(self, delta: float, comparator: Comparator) -> Classification:
        """Classify a fractional change.

        Args:
            delta: ``(current - baseline) / |baseline|``.
            comparator: Which direction is better.

        Returns:
            The classification. Both bounds are inclusive.
        """
        worsening = delta if comparator == Comparator.LOWER_IS_BETTER else -delta
        if worsening >= self.thresholds.alert_threshold:
            return Classification.REGRESSION
        if worsening >= self.thresholds.threshold:
            return Classification.WARNING
        if worsening <= -self.thresholds.threshold:
            return Classification.IMPROVEMENT
        return Classification.WITHIN_TOLERANCE

    @staticmethod
    def find_baseline(series: Sequence[Run], name: str, date: int) -> tuple[Run, Benchmark] | None:
        """Find the most recent value of ``name`` no later than ``date``.

        Runs lacking the benchmark are skipped; absence never counts as zero.

        Args:
            series: Runs ascending by date.
            name: Benchmark name.
            date: Date of the incoming run.

        Returns:
            The baseline run and benchmark, or None.
        """
        for run in reversed(series):
            if run.date > date:
                continue
            bench = run.get(name)
            if bench is not None:
                return run, bench
        return None

    def detect(self, run: Run, series: Sequence[Run] = ()) -> RegressionResult:
        """Classify every benchmark of ``run``.

        Args:
            run: The incoming run.
            series: The run's series as it was before ``run`` was merged.

        Returns:
            RegressionResult with one comparison per benchmark.
        """
        comparator = self.comparator_for(run.tool)
        comparisons: list[RegressionAlert] = []

        for bench in run.benches:
            found = self.find_baseline(series, bench.name, run.date)
            if found is None:
                logger.debug(f"No baseline for {bench.name!r}")
                comparisons.append(
                    RegressionAlert(
                        name=bench.name,
                        tool=run.tool,
                        current_value=bench.value,
                        classification=Classification.NEW,
                        unit=bench.unit,
                    )
                )
                continue

            baseline_run, baseline = found

            # A zero baseline cannot be compared
            if baseline.value == 0:
                logger.debug(f"Zero baseline for {bench.name!r}, treating as new")
                comparisons.append(
                    RegressionAlert(
                        name=bench.name,
                        tool=run.tool,
                        current_value=bench.value,
                        classification=Classification.NEW,
                        baseline_value=baseline.value,
                        unit=bench.unit,
                        baseline_commit=baseline_run.commit.id,
                    )
                )
                continue

            delta = (bench.value - baseline.value) / abs(baseline.value)
            comparisons.append(
                RegressionAlert(
                    name=bench.name,
                    tool=run.tool,
                    current_value=bench.value,
                    classification=self.classify(delta, comparator),
                    baseline_value=baseline.value,
                    delta=delta,
                    unit=bench.unit,
                    baseline_commit=baseline_run.commit.id,
                )
            )

        return RegressionResult(
            tool=run.tool,
            commit_id=run.commit.id,
            comparator=comparator,
            thresholds=self.thresholds,
            comparisons=comparisons,
        )
