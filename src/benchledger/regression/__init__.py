"""Regression detection module for benchledger.

This module classifies each benchmark of a new run against the most
recent earlier value of the same benchmark in its series.

Example:
    >>> from benchledger.regression import RegressionDetector, RegressionThresholds
    >>>
    >>> detector = RegressionDetector(
    ...     thresholds=RegressionThresholds(threshold=0.02, alert_threshold=0.05),
    ... )
    >>> result = detector.detect(run, series)
    >>> if result.has_regressions:
    ...     print("Regressions detected!")
"""

from __future__ import annotations

from benchledger.regression.detector import HIGHER_IS_BETTER_TOOLS, RegressionDetector
from benchledger.regression.models import (
    Classification,
    Comparator,
    RegressionAlert,
    RegressionResult,
    RegressionThresholds,
)

__all__ = [
    "HIGHER_IS_BETTER_TOOLS",
    "Classification",
    "Comparator",
    "RegressionAlert",
    "RegressionDetector",
    "RegressionResult",
    "RegressionThresholds",
]
