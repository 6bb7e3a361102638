"""Extraction of benchmark results from harness output.

Each supported tool has a parser that turns the harness's textual or
JSON output into RawBenchmark tuples ready for ``build_run``.

Supported tools:
    - cargo: ``cargo bench`` (libtest) text output
    - go: ``go test -bench`` text output
    - pytest: pytest-benchmark ``--benchmark-json`` output
    - customSmallerIsBetter / customBiggerIsBetter: a JSON list of
      ``{"name", "value", "unit", "range"?, "extra"?}`` objects
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Any

from benchledger.benchmarks.entry import RawBenchmark
from benchledger.core.exceptions import ExtractionError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

_CARGO_LINE = re.compile(r"^test (.+?)\s+\.\.\. bench:\s+([0-9,.]+) (\w+/\w+) \(\+/- ([0-9,.]+)\)$")
_GO_LINE = re.compile(r"^(Benchmark\S+?)(?:-(\d+))?\s+(\d+)\s+(.+)$")


def _parse_number(text: str) -> int | float:
    cleaned = text.replace(",", "")
    try:
        return float(cleaned) if any(c in cleaned for c in ".eE") else int(cleaned)
    except ValueError as e:
        raise ExtractionError(f"Not a number: {text!r}") from e


def _load_json(output: str, tool: str) -> Any:
    try:
        return json.loads(output)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Output for {tool} is not valid JSON: {e}") from e


def extract_cargo(output: str) -> list[RawBenchmark]:
    """Parse libtest bench output.

    Example line::

        test canada_parse ... bench:   7,384,641 ns/iter (+/- 62,175)
    """
    results: list[RawBenchmark] = []
    for line in output.splitlines():
        match = _CARGO_LINE.match(line.strip())
        if match is None:
            continue
        name, value, unit, variance = match.groups()
        results.append(RawBenchmark(name.strip(), _parse_number(value), _parse_number(variance), unit))
    return results


def extract_go(output: str) -> list[RawBenchmark]:
    """Parse ``go test -bench`` output.

    Only the first ``<value> <unit>`` pair of each line is recorded;
    iteration count and procs go to ``extra``.

    Example line::

        BenchmarkFib10-8   	 5000000	       325 ns/op
    """
    results: list[RawBenchmark] = []
    for line in output.splitlines():
        match = _GO_LINE.match(line.strip())
        if match is None:
            continue
        name, procs, times, rest = match.groups()
        pieces = rest.split()
        if len(pieces) < 2:
            logger.debug(f"Skipping go line without a unit: {line!r}")
            continue
        extra = f"{times} times"
        if procs is not None:
            extra += f"\n{procs} procs"
        results.append(RawBenchmark(name, _parse_number(pieces[0]), 0, pieces[1], extra))
    return results


def extract_pytest(output: str) -> list[RawBenchmark]:
    """Parse pytest-benchmark JSON.

    The recorded value is operations per second, so higher is better.
    """
    data = _load_json(output, "pytest")
    if not isinstance(data, dict) or not isinstance(data.get("benchmarks"), list):
        raise ExtractionError("pytest-benchmark output must be an object with a 'benchmarks' list")

    results: list[RawBenchmark] = []
    for bench in data["benchmarks"]:
        try:
            stats = bench["stats"]
            name = bench.get("fullname") or bench["name"]
            results.append(
                RawBenchmark(
                    name,
                    stats["ops"],
                    stats["stddev"],
                    "iter/sec",
                    f"mean: {stats['mean']} sec\nrounds: {stats['rounds']}",
                )
            )
        except (KeyError, TypeError) as e:
            raise ExtractionError(f"Malformed pytest-benchmark entry: {e}") from e
    return results


def extract_custom(output: str) -> list[RawBenchmark]:
    """Parse a JSON list of ready-made benchmark objects."""
    data = _load_json(output, "custom")
    if not isinstance(data, list):
        raise ExtractionError("Custom benchmark output must be a JSON list")

    results: list[RawBenchmark] = []
    for item in data:
        if not isinstance(item, dict):
            raise ExtractionError(f"Custom benchmark entry must be an object: {item!r}")
        try:
            name, value, unit = item["name"], item["value"], item["unit"]
        except KeyError as e:
            raise ExtractionError(f"Custom benchmark entry is missing {e}") from e
        variance: int | float = 0
        if item.get("range"):
            variance = _parse_number(str(item["range"]).replace("±", "").strip())
        results.append(RawBenchmark(name, value, variance, unit, item.get("extra")))
    return results


EXTRACTORS: dict[str, Callable[[str], list[RawBenchmark]]] = {
    "cargo": extract_cargo,
    "go": extract_go,
    "pytest": extract_pytest,
    "customSmallerIsBetter": extract_custom,
    "customBiggerIsBetter": extract_custom,
}


def extract_benchmarks(tool: str, output: str) -> list[RawBenchmark]:
    """Extract benchmarks from harness output.

    Args:
        tool: Harness identifier (a key of ``EXTRACTORS``).
        output: Raw harness output.

    Returns:
        Benchmarks in output order.

    Raises:
        ExtractionError: If the tool is unknown, the output is malformed,
            or no benchmark was found.
    """
    try:
        extractor = EXTRACTORS[tool]
    except KeyError:
        supported = ", ".join(sorted(EXTRACTORS))
        raise ExtractionError(f"Unsupported tool {tool!r} (supported: {supported})") from None

    results = extractor(output)
    if not results:
        raise ExtractionError(f"No benchmark result found in {tool} output")
    logger.debug(f"Extracted {len(results)} benchmarks from {tool} output")
    return results
