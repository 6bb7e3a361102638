"""Unit tests for the history artifact serializer."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from benchledger.benchmarks import BenchmarkStore, decode, encode, series
from benchledger.core.exceptions import CorruptStoreError
from benchledger.regression import Classification, RegressionDetector

SAMPLE = """window.BENCHMARK_DATA = {
  "lastUpdate": 1699792251385,
  "repoUrl": "https://github.com/acme/lib",
  "entries": {
    "Rust Benchmark": [
      {
        "commit": {
          "author": {
            "email": "dev@example.com",
            "name": "Dev Eloper",
            "username": "dev"
          },
          "committer": {
            "email": "dev@example.com",
            "name": "Dev Eloper",
            "username": "dev"
          },
          "distinct": true,
          "id": "f25173f91612d89e280e508cf77f51029590bff9",
          "message": "add benchmarks\\n\\nSigned-off-by: Dev Eloper <dev@example.com>",
          "timestamp": "2023-11-12T20:24:44+08:00",
          "tree_id": "7366a1621a988f4da01eb72b8d228f80e245380e",
          "url": "https://github.com/acme/lib/commit/f25173f91612d89e280e508cf77f51029590bff9"
        },
        "date": 1699792250702,
        "tool": "cargo",
        "benches": [
          {
            "name": "from_string",
            "value": 31,
            "range": "± 0",
            "unit": "ns/iter"
          },
          {
            "name": "canada parse",
            "value": 7384641,
            "range": "± 62175",
            "unit": "ns/iter"
          }
        ]
      }
    ]
  }
}"""


def _data() -> dict:
    return json.loads(SAMPLE.split("=", 1)[1])


def _text(data: dict, name: str = "window.BENCHMARK_DATA") -> str:
    return f"{name} = {json.dumps(data, indent=2, ensure_ascii=False)}"


# ============================================================================
# decode Tests
# ============================================================================


class TestDecode:
    """Tests for decode()."""

    def test_decodes_sample(self) -> None:
        """decode() reads the dashboard layout."""
        store = decode(SAMPLE)

        assert store.last_update == 1699792251385
        assert store.repo_url == "https://github.com/acme/lib"
        runs = store.entries["Rust Benchmark"]
        assert len(runs) == 1
        assert runs[0].tool == "cargo"
        assert runs[0].commit.author.username == "dev"
        assert [b.name for b in runs[0].benches] == ["from_string", "canada parse"]
        assert runs[0].benches[1].value == 7384641

    def test_trailing_semicolon_and_whitespace(self) -> None:
        """A trailing semicolon and surrounding whitespace are accepted."""
        store = decode(f"\n  {SAMPLE};\n")

        assert store.last_update == 1699792251385

    def test_custom_global_name(self) -> None:
        """The identifier can be configured."""
        store = decode(_text(_data(), "BENCH"), global_name="BENCH")

        assert "Rust Benchmark" in store.entries

    def test_missing_identifier(self) -> None:
        """Text without the identifier is corrupt."""
        with pytest.raises(CorruptStoreError, match="Root identifier"):
            decode(SAMPLE.split("=", 1)[1])

    def test_wrong_identifier(self) -> None:
        """A different identifier is corrupt."""
        with pytest.raises(CorruptStoreError, match="Root identifier"):
            decode(_text(_data(), "window.OTHER_DATA"))

    def test_invalid_json(self) -> None:
        """Malformed JSON is corrupt."""
        with pytest.raises(CorruptStoreError, match="Invalid JSON"):
            decode(SAMPLE[:-10])

    def test_non_object_root(self) -> None:
        """The root value must be an object."""
        with pytest.raises(CorruptStoreError, match="must be an object"):
            decode("window.BENCHMARK_DATA = [1, 2, 3]")

    @pytest.mark.parametrize("field", ["lastUpdate", "repoUrl", "entries"])
    def test_missing_top_level_field(self, field: str) -> None:
        """Every top-level field is required."""
        data = _data()
        del data[field]

        with pytest.raises(CorruptStoreError, match=field):
            decode(_text(data))

    def test_series_not_a_list(self) -> None:
        """A series must be a list."""
        data = _data()
        data["entries"]["Rust Benchmark"] = {"not": "a list"}

        with pytest.raises(CorruptStoreError, match="must be a list"):
            decode(_text(data))

    @pytest.mark.parametrize("field", ["commit", "date", "tool", "benches"])
    def test_run_missing_field(self, field: str) -> None:
        """Every run field is required."""
        data = _data()
        del data["entries"]["Rust Benchmark"][0][field]

        with pytest.raises(CorruptStoreError, match=field):
            decode(_text(data))

    def test_commit_missing_field(self) -> None:
        """Nested required fields are checked too."""
        data = _data()
        del data["entries"]["Rust Benchmark"][0]["commit"]["id"]

        with pytest.raises(CorruptStoreError, match="Malformed history"):
            decode(_text(data))

    def test_non_finite_literal(self) -> None:
        """NaN and Infinity literals are rejected."""
        text = SAMPLE.replace('"value": 31,', '"value": NaN,')

        with pytest.raises(CorruptStoreError, match="Non-finite"):
            decode(text)

    def test_overflowing_value(self) -> None:
        """A number too large for a float is corrupt, not infinite."""
        text = SAMPLE.replace('"value": 31,', '"value": 1e400,')

        with pytest.raises(CorruptStoreError, match="out of range"):
            decode(text)

    def test_overflowing_unknown_field(self) -> None:
        """Overflowing numbers in unknown fields are rejected too."""
        text = SAMPLE.replace('"value": 31,', '"value": 31,\n            "stddev": -1e999,')

        with pytest.raises(CorruptStoreError, match="out of range"):
            decode(text)

    def test_boolean_value_rejected(self) -> None:
        """Benchmark values must be numbers."""
        text = SAMPLE.replace('"value": 31,', '"value": true,')

        with pytest.raises(CorruptStoreError):
            decode(text)


# ============================================================================
# encode Tests
# ============================================================================


class TestEncode:
    """Tests for encode()."""

    def test_sample_round_trips_exactly(self) -> None:
        """A dashboard artifact is reproduced byte for byte."""
        assert encode(decode(SAMPLE)) == SAMPLE

    def test_empty_store(self) -> None:
        """An empty store renders the three root fields in order."""
        text = encode(BenchmarkStore.empty("https://github.com/acme/lib"))

        assert text == (
            "window.BENCHMARK_DATA = {\n"
            '  "lastUpdate": 0,\n'
            '  "repoUrl": "https://github.com/acme/lib",\n'
            '  "entries": {}\n'
            "}"
        )

    def test_custom_global_name(self) -> None:
        """The identifier can be configured."""
        assert encode(BenchmarkStore.empty(), global_name="BENCH").startswith("BENCH = {")

    def test_round_trip_structural_equality(self) -> None:
        """decode(encode(store)) equals store field for field."""
        store = decode(SAMPLE)

        assert decode(encode(store)) == store

    def test_numeric_precision(self) -> None:
        """Floats and large integers survive a round trip exactly."""
        data = _data()
        benches = data["entries"]["Rust Benchmark"][0]["benches"]
        benches[0]["value"] = 0.1 + 0.2
        benches[1]["value"] = 2**53 + 1
        benches.append({"name": "tiny", "value": 5e-324, "range": "± 0", "unit": "s"})

        store = decode(encode(decode(_text(data))))
        values = [b.value for b in store.entries["Rust Benchmark"][0].benches]

        assert values == [0.30000000000000004, 9007199254740993, 5e-324]
        assert isinstance(values[1], int)

    def test_unknown_fields_preserved(self) -> None:
        """Unknown fields at every level survive decode and encode."""
        data = _data()
        data["schemaVersion"] = 2
        run = data["entries"]["Rust Benchmark"][0]
        run["runner"] = {"os": "ubuntu-22.04", "cpus": 4}
        run["commit"]["added"] = ["benches/bench.rs"]
        run["benches"][0]["biggerIsBetter"] = False

        text = _text(data)
        round_tripped = encode(decode(text))

        assert round_tripped == text
        assert json.loads(round_tripped.split("=", 1)[1])["entries"]["Rust Benchmark"][0]["runner"] == {
            "os": "ubuntu-22.04",
            "cpus": 4,
        }

    def test_optional_fields_not_invented(self) -> None:
        """Fields absent from the input are not added on output."""
        data = _data()
        del data["entries"]["Rust Benchmark"][0]["commit"]["author"]["username"]
        del data["entries"]["Rust Benchmark"][0]["benches"][0]["range"]

        text = _text(data)

        assert encode(decode(text)) == text

    def test_non_ascii_kept(self) -> None:
        """Non-ASCII characters are written verbatim."""
        text = encode(decode(SAMPLE))

        assert "± 62175" in text
        assert "\\u00b1" not in text


# ============================================================================
# Dashboard Artifact Tests
# ============================================================================

DASHBOARD_DATA = Path(__file__).parent / "fixtures" / "dashboard_data.js"


class TestDashboardArtifact:
    """Tests against a multi-run artifact written by the dashboard action."""

    @pytest.fixture
    def text(self) -> str:
        return DASHBOARD_DATA.read_text(encoding="utf-8")

    def test_round_trips_exactly(self, text: str) -> None:
        """The artifact is reproduced byte for byte."""
        assert encode(decode(text)) == text

    def test_runs_and_benches(self, text: str) -> None:
        """Every run and benchmark is decoded in order."""
        runs = series(decode(text), "Rust Benchmark")

        assert [r.date for r in runs] == [1699792250702, 1699878650702]
        assert all(len(r.benches) == 22 for r in runs)
        assert runs[0].benches[0].name == "from_string/jsonbb"
        canada = runs[1].get("canada parse/jsonbb")
        assert canada is not None
        assert canada.value == 7012933

    def test_names_with_separators(self, text: str) -> None:
        """Names with slashes, brackets and arrows are kept verbatim."""
        names = {b.name for b in decode(text).entries["Rust Benchmark"][0].benches}

        assert "json['key']/jsonbb" in names
        assert "[json['key'] for json in array]/jsonbb" in names
        assert "citm_catalog->areaNames->205705994 index/jsonbb" in names

    def test_escaped_newlines_in_message(self, text: str) -> None:
        """Commit messages keep their embedded newlines."""
        commit = decode(text).entries["Rust Benchmark"][1].commit

        assert commit.message.startswith("speed up canada parse\n\nSigned-off-by:")

    def test_second_run_against_first(self, text: str) -> None:
        """The later run classifies against the earlier one."""
        first, second = series(decode(text), "Rust Benchmark")

        result = RegressionDetector().detect(second, [first])

        assert [(a.name, a.classification) for a in result.alerts] == [
            ("canada parse/jsonbb", Classification.IMPROVEMENT),
            ("citm_catalog->topicNames->324846100 index/jsonbb", Classification.REGRESSION),
        ]
        assert sum(c.classification == Classification.WITHIN_TOLERANCE for c in result.comparisons) == 20
