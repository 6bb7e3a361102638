"""Models for regression detection.

This module provides the comparator and classification enums and the
dataclasses for regression thresholds, alerts, and results.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from benchledger.core.exceptions import ConfigurationError


class Comparator(str, Enum):
    """Which direction of change is an improvement."""

    LOWER_IS_BETTER = "lower-is-better"
    HIGHER_IS_BETTER = "higher-is-better"


class Classification(str, Enum):
    """Judgement of a new value against its baseline."""

    NEW = "new"
    REGRESSION = "regression"
    WARNING = "warning"
    IMPROVEMENT = "improvement"
    WITHIN_TOLERANCE = "within-tolerance"


@dataclass(frozen=True)
class RegressionThresholds:
    """Thresholds for regression detection.

    Deltas are fractional changes relative to the baseline, oriented so
    that a positive delta is a change for the worse.

    Attributes:
        threshold: Change reported as warning or improvement (default 2%).
        alert_threshold: Change reported as regression (default 5%).
            Must be >= threshold.
        comparator: Direction of "better". None infers it from the tool.

    Example:
        >>> thresholds = RegressionThresholds(threshold=0.01, alert_threshold=0.10)
        >>> thresholds.alert_threshold
        0.1
    """

    threshold: float = 0.02
    alert_threshold: float = 0.05
    comparator: Comparator | None = None

    def __post_init__(self) -> None:
        for name in ("threshold", "alert_threshold"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ConfigurationError(f"{name} must be a finite number, got {value!r}")
        if self.threshold < 0:
            raise ConfigurationError(f"threshold must be >= 0, got {self.threshold}")
        if self.alert_threshold < self.threshold:
            raise ConfigurationError(
                f"alert_threshold ({self.alert_threshold}) must be >= threshold ({self.threshold})"
            )
        if self.comparator is not None and not isinstance(self.comparator, Comparator):
            try:
                object.__setattr__(self, "comparator", Comparator(self.comparator))
            except ValueError as e:
                raise ConfigurationError(f"Unknown comparator: {self.comparator!r}") from e

    @classmethod
    def from_yaml(cls, path: Path | str) -> RegressionThresholds:
        """Load thresholds from a YAML file.

        The file may hold the keys at top level or under ``thresholds:``.
        Both ``alert_threshold`` and ``alert-threshold`` spellings are accepted.

        Args:
            path: Path to the YAML file.

        Returns:
            RegressionThresholds loaded from the file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ConfigurationError: If the content is not a mapping or a value is invalid.
        """
        import yaml

        path = Path(path)
        if not path.exists():
            msg = f"Configuration file not found: {path}"
            raise FileNotFoundError(msg)

        data = yaml.safe_load(path.read_text())
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError(f"Thresholds file must contain a mapping: {path}")

        section = data.get("thresholds", data)
        if not isinstance(section, dict):
            raise ConfigurationError(f"thresholds section must be a mapping: {path}")
        values = {str(key).replace("-", "_"): value for key, value in section.items()}
        known = {"threshold", "alert_threshold", "comparator"}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(f"Unknown threshold keys: {', '.join(sorted(unknown))}")
        return cls(**values)


@dataclass(frozen=True)
class RegressionAlert:
    """Classification of one benchmark of a run against its baseline.

    Attributes:
        name: Benchmark name.
        tool: Harness identifier of the run.
        current_value: Value in the new run.
        classification: The judgement.
        baseline_value: Baseline value (None when there is no baseline).
        delta: ``(current - baseline) / |baseline|`` (None without baseline).
        unit: Unit of the benchmark.
        baseline_commit: Commit id of the baseline run.

    Example:
        >>> alert = RegressionAlert(
        ...     name="parse",
        ...     tool="cargo",
        ...     current_value=106,
        ...     classification=Classification.REGRESSION,
        ...     baseline_value=100,
        ...     delta=0.06,
        ...     unit="ns/iter",
        ... )
        >>> alert.message
        'parse: regression 100 -> 106 ns/iter (+6.00%)'
    """

    name: str
    tool: str
    current_value: float
    classification: Classification
    baseline_value: float | None = None
    delta: float | None = None
    unit: str = ""
    baseline_commit: str | None = None

    @property
    def change_percent(self) -> float | None:
        """Delta as a percentage."""
        return None if self.delta is None else self.delta * 100

    @property
    def message(self) -> str:
        """Human-readable alert message."""
        unit = f" {self.unit}" if self.unit else ""
        if self.baseline_value is None or self.change_percent is None:
            return f"{self.name}: {self.classification.value} at {self.current_value}{unit}"
        return (
            f"{self.name}: {self.classification.value} {self.baseline_value} -> {self.current_value}{unit} "
            f"({self.change_percent:+.2f}%)"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return {
            "name": self.name,
            "tool": self.tool,
            "classification": self.classification.value,
            "baseline_value": self.baseline_value,
            "current_value": self.current_value,
            "delta": self.delta,
            "unit": self.unit,
            "baseline_commit": self.baseline_commit,
        }


@dataclass
class RegressionResult:
    """Result of regression detection for one run.

    Attributes:
        tool: Harness identifier of the run.
        commit_id: Commit measured by the run.
        comparator: Comparator used for the run.
        thresholds: Thresholds used for the run.
        comparisons: One entry per benchmark of the run, in run order.

    Example:
        >>> result = detector.detect(run, series)
        >>> if result.has_regressions:
        ...     print(result.summary())
    """

    tool: str
    commit_id: str
    comparator: Comparator
    thresholds: RegressionThresholds
    comparisons: list[RegressionAlert] = field(default_factory=list)

    @property
    def alerts(self) -> list[RegressionAlert]:
        """Comparisons that are neither new nor within tolerance."""
        return [
            c
            for c in self.comparisons
            if c.classification not in (Classification.NEW, Classification.WITHIN_TOLERANCE)
        ]

    @property
    def new(self) -> list[RegressionAlert]:
        """Benchmarks without a usable baseline."""
        return [c for c in self.comparisons if c.classification == Classification.NEW]

    def _count(self, classification: Classification) -> int:
        return sum(1 for c in self.comparisons if c.classification == classification)

    @property
    def regression_count(self) -> int:
        """Count of regressions."""
        return self._count(Classification.REGRESSION)

    @property
    def warning_count(self) -> int:
        """Count of warnings."""
        return self._count(Classification.WARNING)

    @property
    def improvement_count(self) -> int:
        """Count of improvements."""
        return self._count(Classification.IMPROVEMENT)

    @property
    def has_regressions(self) -> bool:
        """Check if any regression was detected."""
        return self.regression_count > 0

    def summary(self) -> str:
        """Generate a human-readable summary.

        Returns:
            Multi-line summary string.
        """
        if not self.alerts:
            return f"No significant changes for {self.tool} at {self.commit_id}."

        lines = [
            f"Benchmark changes for {self.tool} at {self.commit_id} ({self.comparator.value})",
            f"  Regressions: {self.regression_count}, Warnings: {self.warning_count}, "
            f"Improvements: {self.improvement_count}",
            "",
            "Alerts:",
        ]
        markers = {
            Classification.REGRESSION: "[REGRESSION]",
            Classification.WARNING: "[WARNING]",
            Classification.IMPROVEMENT: "[IMPROVEMENT]",
        }
        for alert in self.alerts:
            lines.append(f"  {markers[alert.classification]} {alert.message}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return {
            "tool": self.tool,
            "commit": self.commit_id,
            "comparator": self.comparator.value,
            "threshold": self.thresholds.threshold,
            "alert_threshold": self.thresholds.alert_threshold,
            "alerts": [a.to_dict() for a in self.alerts],
            "new": [c.name for c in self.new],
        }
