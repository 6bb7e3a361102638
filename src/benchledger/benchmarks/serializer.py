"""Serializer for the history artifact.

The history is persisted as a script that assigns one global identifier
to a JSON value, so that a static dashboard can load it with a plain
``<script>`` tag::

    window.BENCHMARK_DATA = {
      "lastUpdate": 1699792251385,
      "repoUrl": "https://github.com/acme/lib",
      "entries": {...}
    }
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from benchledger.benchmarks.models import BenchmarkStore, Run
from benchledger.core.exceptions import CorruptStoreError

logger = logging.getLogger(__name__)

DEFAULT_GLOBAL_NAME = "window.BENCHMARK_DATA"

_ROOT_FIELDS = ("lastUpdate", "repoUrl", "entries")
_RUN_FIELDS = ("commit", "date", "tool", "benches")


def _reject_constant(name: str) -> Any:
    raise CorruptStoreError(f"Non-finite number {name} in history")


def _parse_finite_float(literal: str) -> float:
    value = float(literal)
    if not math.isfinite(value):
        raise CorruptStoreError(f"Number {literal} in history is out of range")
    return value


def encode(store: BenchmarkStore, global_name: str = DEFAULT_GLOBAL_NAME) -> str:
    """Render a store as a loadable script.

    Root keys are written as ``lastUpdate``, ``repoUrl``, ``entries``,
    followed by any unknown root fields. Numbers keep their exact value:
    integers stay integers and floats use their shortest exact repr.

    Args:
        store: The store to render.
        global_name: Identifier the value is assigned to.

    Returns:
        Script text without a trailing newline.
    """
    data = store.to_dict()
    content = json.dumps(data, indent=2, ensure_ascii=False, allow_nan=False)
    return f"{global_name} = {content}"


def _strip_assignment(text: str, global_name: str) -> str:
    match = re.match(rf"\s*{re.escape(global_name)}\s*=", text)
    if match is None:
        raise CorruptStoreError(f"Root identifier {global_name!r} not found")
    body = text[match.end() :].strip()
    if body.endswith(";"):
        body = body[:-1]
    return body


def _check_layout(data: Any) -> None:
    if not isinstance(data, dict):
        raise CorruptStoreError(f"Root value must be an object, got {type(data).__name__}")

    missing = [key for key in _ROOT_FIELDS if key not in data]
    if missing:
        raise CorruptStoreError(f"Missing required top-level fields: {', '.join(missing)}")

    entries = data["entries"]
    if not isinstance(entries, dict):
        raise CorruptStoreError("'entries' must be an object")

    for name, runs in entries.items():
        if not isinstance(runs, list):
            raise CorruptStoreError(f"Series {name!r} must be a list, got {type(runs).__name__}")
        for index, run in enumerate(runs):
            if not isinstance(run, dict):
                raise CorruptStoreError(f"Run {index} of {name!r} must be an object")
            missing = [key for key in _RUN_FIELDS if key not in run]
            if missing:
                raise CorruptStoreError(f"Run {index} of {name!r} is missing: {', '.join(missing)}")


def decode(text: str, global_name: str = DEFAULT_GLOBAL_NAME) -> BenchmarkStore:
    """Parse script text back into a store.

    Args:
        text: Script text as produced by :func:`encode`.
        global_name: Identifier the value is expected to be assigned to.

    Returns:
        The decoded store. Unknown fields are kept on their records.

    Raises:
        CorruptStoreError: If the identifier is missing, the JSON is
            invalid, or a required field is missing or malformed.
    """
    body = _strip_assignment(text, global_name)
    try:
        data = json.loads(body, parse_float=_parse_finite_float, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise CorruptStoreError(f"Invalid JSON in history: {e}") from e

    _check_layout(data)

    try:
        store = BenchmarkStore.model_validate(data)
    except PydanticValidationError as e:
        raise CorruptStoreError(f"Malformed history: {e}") from e

    for name, runs in store.entries.items():
        _warn_if_unsorted(name, runs)

    return store


def _warn_if_unsorted(name: str, runs: tuple[Run, ...]) -> None:
    for previous, current in zip(runs, runs[1:]):
        if current.date < previous.date:
            logger.warning(f"Series {name!r} is not in chronological order at date {current.date}")
            return
