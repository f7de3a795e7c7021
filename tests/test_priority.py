import pytest

from analysis.advisories import Finding
from analysis.priority import (
    PRIORITY_LABELS, aggregate_priority, build_recommendation, is_optimized,
)

ORDER = ["N/A", "INFO", "LOW", "MEDIUM", "HIGH"]


def test_no_findings_is_na():
    assert aggregate_priority([]) == "N/A"


@pytest.mark.parametrize("weights,expected", [
    ([1], "INFO"),
    ([2, 1], "LOW"),
    ([1, 3, 2], "MEDIUM"),
    ([4, 1], "HIGH"),
])
def test_priority_is_max_weight(weights, expected):
    assert aggregate_priority([Finding(w, "x") for w in weights]) == expected


def test_priority_never_decreases():
    findings = []
    previous = "N/A"
    for weight in [1, 2, 1, 3, 2, 4, 1]:
        findings.append(Finding(weight, "x"))
        current = aggregate_priority(findings)
        assert ORDER.index(current) >= ORDER.index(previous)
        previous = current


@pytest.mark.parametrize("label", list(PRIORITY_LABELS.values()))
def test_optimized_iff_na_or_info(label):
    assert is_optimized(label) == (label in ("N/A", "INFO"))


def test_details_joined_in_order(make_vm, make_host):
    rec = build_recommendation(make_vm(), make_host(), None, 1, 4,
                               [Finding(2, "first"), Finding(1, "second")])
    assert rec.details == "first|second"
    assert rec.priority == "LOW"
    assert rec.optimized is False


def test_details_empty_without_findings(make_vm, make_host):
    rec = build_recommendation(make_vm(), make_host(), None, 1, 4, [])
    assert rec.details == ""
    assert rec.optimized is True
