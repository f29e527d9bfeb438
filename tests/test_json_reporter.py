"""Tests for the JSON reporter."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from prodprof.models.instrumentation import InstrumentationType
from prodprof.models.profiling import ProfilingData, ProfilingResult, ProfilingResultByFile
from prodprof.reporters.json_reporter import JSONReporter, serialize_results


@pytest.fixture
def reporter() -> JSONReporter:
    return JSONReporter()


@pytest.fixture
def sample_results() -> list[ProfilingResultByFile]:
    return [
        ProfilingResultByFile(
            file_name="app.js",
            profiling_data_per_function={
                "render": [
                    ProfilingResult(
                        param="r1",
                        type=InstrumentationType.FUNCTION,
                        line_no=10,
                        col_no=0,
                        executed=75.0,
                        data=ProfilingData(frequency=12),
                    ),
                    ProfilingResult(
                        param="r2",
                        type=InstrumentationType.BRANCH_DEFAULT,
                        line_no=14,
                        col_no=6,
                        executed=33.33,
                        data=ProfilingData(frequency=1),
                    ),
                ],
            },
        ),
        ProfilingResultByFile(file_name="unused.js"),
    ]


def test_generate_file(
    reporter: JSONReporter, sample_results: list[ProfilingResultByFile], tmp_path: Path
) -> None:
    output = tmp_path / "finalResult.json"
    result_path = reporter.generate(output, sample_results)
    assert result_path == output
    assert output.exists()

    data = json.loads(output.read_text())
    assert [entry["fileName"] for entry in data] == ["app.js", "unused.js"]


def test_output_shape(reporter: JSONReporter, sample_results: list[ProfilingResultByFile]) -> None:
    data = json.loads(reporter.generate_string(sample_results))

    render = data[0]["profilingDataPerFunction"]["render"]
    assert render[0] == {
        "param": "r1",
        "type": "FUNCTION",
        "lineNo": 10,
        "colNo": 0,
        "executed": 75.0,
        "data": {"frequency": 12},
    }
    assert render[1]["type"] == "BRANCH_DEFAULT"
    assert render[1]["executed"] == 33.33
    assert data[1] == {"fileName": "unused.js", "profilingDataPerFunction": {}}


def test_pretty_printed(reporter: JSONReporter, sample_results: list[ProfilingResultByFile]) -> None:
    text = reporter.generate_string(sample_results)
    assert text.startswith("[\n  {")


def test_empty_results(reporter: JSONReporter) -> None:
    assert json.loads(reporter.generate_string([])) == []
    assert serialize_results([]) == []


def test_overwrites_existing_file(
    reporter: JSONReporter, sample_results: list[ProfilingResultByFile], tmp_path: Path
) -> None:
    output = tmp_path / "finalResult.json"
    output.write_text("stale", encoding="utf-8")
    reporter.generate(output, sample_results)
    assert json.loads(output.read_text())[0]["fileName"] == "app.js"
    assert list(tmp_path.iterdir()) == [output]


def test_creates_parent_dirs(
    reporter: JSONReporter, sample_results: list[ProfilingResultByFile], tmp_path: Path
) -> None:
    output = tmp_path / "deep" / "nested" / "report.json"
    reporter.generate(output, sample_results)
    assert output.exists()
