"""Tests for report aggregation (aggregation.py)."""

from __future__ import annotations

import json

import pytest

from prodprof.aggregation import PointTally, aggregate, divide_half_up
from prodprof.models.instrumentation import InstrumentationType
from prodprof.models.profiling import ProfilingData, ProfilingResult, ProfilingResultByFile
from prodprof.parsing.mapping import MappingTable
from prodprof.parsing.vlq import encode

# ── Helpers ──────────────────────────────────────────────────────


def _mapping(
    files: list[str],
    functions: list[str],
    types: list[str],
    points: list[tuple[str, tuple[int, int, int, int, int]]],
) -> MappingTable:
    lines = [
        f"FileNames:{json.dumps(files)}",
        f"FunctionNames:{json.dumps(functions)}",
        f"Types:{json.dumps(types)}",
    ]
    lines.extend(f"{pid}:{''.join(encode(v) for v in values)}" for pid, values in points)
    return MappingTable.parse("\n".join(lines))


def _report(**frequencies: int) -> dict[str, ProfilingData]:
    return {pid: ProfilingData(frequency=freq) for pid, freq in frequencies.items()}


def _find(results: list[ProfilingResultByFile], param: str) -> ProfilingResult:
    for file_result in results:
        for point_results in file_result.profiling_data_per_function.values():
            for result in point_results:
                if result.param == param:
                    return result
    raise AssertionError(f"{param} not in results")


@pytest.fixture
def mapping() -> MappingTable:
    return _mapping(
        ["main.js", "util.js", "empty.js"],
        ["main", "helper", "format"],
        ["FUNCTION", "BRANCH", "BRANCH_DEFAULT"],
        [
            ("m1", (0, 0, 0, 1, 0)),
            ("m2", (0, 0, 1, 4, 8)),
            ("h1", (0, 1, 0, 12, 0)),
            ("m3", (0, 0, 2, 6, 8)),
            ("u1", (1, 2, 0, 3, 2)),
        ],
    )


# ── PointTally / rounding ────────────────────────────────────────

# 28 frequencies summing to 15162, an exact mean of 541.5
_HALF_MEAN_FREQUENCIES = [215, 793, 554, 455, 869, 350, 96, 754] + [541] * 19 + [797]


def test_tally_empty_is_zero() -> None:
    tally = PointTally()
    assert tally.executed_percent == 0.0
    assert tally.average_frequency == 0


def test_tally_counts_present_and_absent() -> None:
    tally = PointTally()
    for data in (ProfilingData(3), None, ProfilingData(0), None):
        tally.add(data)
    assert tally.reports == 4
    assert tally.present == 2
    assert tally.frequency_total == 3
    assert tally.executed_percent == 50.0
    assert tally.average_frequency == 1


@pytest.mark.parametrize(
    ("numerator", "denominator", "expected"),
    [
        (5, 2, 3),
        (7, 2, 4),
        (4, 3, 1),
        (5, 3, 2),
        (0, 9, 0),
        (15162, 28, 542),
    ],
)
def test_divide_half_up(numerator: int, denominator: int, expected: int) -> None:
    assert divide_half_up(numerator, denominator) == expected


def test_executed_percent_rounds_half_up_at_second_decimal() -> None:
    tally = PointTally()
    tally.add(ProfilingData(1))
    for _ in range(31):
        tally.add(None)
    # 100 / 32 == 3.125
    assert tally.executed_percent == 3.13


# ── Aggregation ──────────────────────────────────────────────────


def test_end_to_end_example() -> None:
    table = _mapping(["f.js"], ["g"], ["FUNCTION"], [("p1", (0, 0, 0, 5, 2))])
    results = aggregate(table, [_report(p1=10), _report()])

    assert len(results) == 1
    assert results[0].file_name == "f.js"
    assert results[0].to_dict() == {
        "fileName": "f.js",
        "profilingDataPerFunction": {
            "g": [
                {
                    "param": "p1",
                    "type": "FUNCTION",
                    "lineNo": 5,
                    "colNo": 2,
                    "executed": 50.0,
                    "data": {"frequency": 5},
                }
            ]
        },
    }


def test_zero_reports(mapping: MappingTable) -> None:
    results = aggregate(mapping, [])
    for pid in mapping:
        result = _find(results, pid)
        assert result.executed == 0
        assert result.data.frequency == 0


@pytest.mark.parametrize(
    ("frequencies", "total"),
    [
        ([4], 1),
        ([4], 3),
        ([1, 2], 3),
        ([10, 20, 30], 4),
        ([7, 7, 7, 7, 7, 7, 7], 8),
        ([1], 7),
    ],
)
def test_k_of_n_statistics(frequencies: list[int], total: int) -> None:
    table = _mapping(["a.js"], ["f"], ["BRANCH"], [("p", (0, 0, 0, 1, 1))])
    reports = [_report(p=f) for f in frequencies]
    reports += [_report(other=99) for _ in range(total - len(frequencies))]

    result = _find(aggregate(table, reports), "p")

    assert result.executed == round(100 * len(frequencies) / total, 2)
    assert result.data.frequency == round(sum(frequencies) / total)


def test_report_order_does_not_matter_for_present_absent(mapping: MappingTable) -> None:
    reports = [_report(m1=2), _report(), _report(m1=5), _report()]
    reordered = [reports[1], reports[3], reports[0], reports[2]]
    assert _find(aggregate(mapping, reports), "m1") == _find(aggregate(mapping, reordered), "m1")


def test_point_present_everywhere(mapping: MappingTable) -> None:
    reports = [_report(u1=3), _report(u1=5), _report(u1=4)]
    result = _find(aggregate(mapping, reports), "u1")
    assert result.executed == 100.0
    assert result.data.frequency == 4


def test_frequency_rounds_half_up() -> None:
    table = _mapping(["a.js"], ["f"], ["FUNCTION"], [("p", (0, 0, 0, 1, 1))])
    result = _find(aggregate(table, [_report(p=5), _report()]), "p")
    # mean 2.5
    assert result.data.frequency == 3


@pytest.mark.parametrize("shift", [0, 1, 7, 20, 27])
def test_exact_half_mean_rounds_up_in_any_order(shift: int) -> None:
    table = _mapping(["a.js"], ["f"], ["FUNCTION"], [("p", (0, 0, 0, 1, 1))])
    frequencies = _HALF_MEAN_FREQUENCIES[shift:] + _HALF_MEAN_FREQUENCIES[:shift]
    reports = [_report(p=f) for f in frequencies]

    forward = _find(aggregate(table, reports), "p")
    backward = _find(aggregate(table, reports[::-1]), "p")

    assert forward.data.frequency == 542
    assert forward == backward


def test_present_with_zero_frequency_counts_as_executed() -> None:
    table = _mapping(["a.js"], ["f"], ["FUNCTION"], [("p", (0, 0, 0, 1, 1))])
    result = _find(aggregate(table, [_report(p=0), _report()]), "p")
    assert result.executed == 50.0
    assert result.data.frequency == 0


def test_unknown_report_points_are_ignored(mapping: MappingTable) -> None:
    results = aggregate(mapping, [_report(ghost=100, m1=1)])
    assert _find(results, "m1").executed == 100.0
    all_params = {
        r.param
        for fr in results
        for point_results in fr.profiling_data_per_function.values()
        for r in point_results
    }
    assert all_params == set(mapping)


def test_mapping_attributes_are_copied(mapping: MappingTable) -> None:
    result = _find(aggregate(mapping, []), "m2")
    assert result.type is InstrumentationType.BRANCH
    assert result.line_no == 4
    assert result.col_no == 8


# ── Grouping ─────────────────────────────────────────────────────


def test_every_file_appears_once_in_mapping_order(mapping: MappingTable) -> None:
    results = aggregate(mapping, [_report(m1=1)])
    assert [r.file_name for r in results] == ["main.js", "util.js", "empty.js"]


def test_file_without_points_has_empty_grouping(mapping: MappingTable) -> None:
    results = aggregate(mapping, [])
    empty = results[2]
    assert empty.file_name == "empty.js"
    assert empty.profiling_data_per_function == {}
    assert empty.to_dict() == {"fileName": "empty.js", "profilingDataPerFunction": {}}


def test_grouped_by_function_in_first_seen_order(mapping: MappingTable) -> None:
    main = aggregate(mapping, [])[0]
    assert list(main.profiling_data_per_function) == ["main", "helper"]
    assert [r.param for r in main.profiling_data_per_function["main"]] == ["m1", "m2", "m3"]
    assert [r.param for r in main.profiling_data_per_function["helper"]] == ["h1"]


def test_grouping_is_deterministic(mapping: MappingTable) -> None:
    reports = [_report(m1=1, u1=2), _report(h1=3)]
    first = [r.to_dict() for r in aggregate(mapping, reports)]
    second = [r.to_dict() for r in aggregate(mapping, reports)]
    assert first == second


def test_point_counts(mapping: MappingTable) -> None:
    results = aggregate(mapping, [_report(m1=1, h1=2)])
    assert results[0].point_count == 4
    assert results[0].executed_point_count == 2
    assert results[2].point_count == 0
