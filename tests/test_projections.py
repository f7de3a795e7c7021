import pytest

from analysis.engine import evaluate_vm
from report.projections import COMPACT_FIELDS, FULL_FIELDS, compact, full, project


@pytest.fixture
def recommendation(scenario_a):
    vm, host = scenario_a
    return evaluate_vm(vm, [host], [])


def test_compact_fields(recommendation):
    row = compact(recommendation)
    assert list(row) == COMPACT_FIELDS
    assert row['name'] == 'app01'
    assert row['vm_sockets'] == 12
    assert row['optimal_sockets'] == 2
    assert row['priority'] == 'HIGH'


def test_full_is_superset_of_compact(recommendation):
    short = compact(recommendation)
    long = full(recommendation)
    assert list(long) == FULL_FIELDS
    for key, value in short.items():
        assert long[key] == value


def test_full_without_cluster(recommendation):
    row = full(recommendation)
    assert row['cluster'] is None
    assert row['drs_enabled'] is None
    assert row['host_power_policy'] == 'Balanced'
    assert row['hw_version'] == 10


def test_full_with_unknown_drs(make_vm, mixed_cluster):
    big, small, cluster = mixed_cluster(drs_enabled=None)
    rec = evaluate_vm(make_vm(host="esx-big"), [big, small], [cluster])
    row = full(rec)
    assert row['cluster'] == 'prod'
    assert row['drs_enabled'] == 'unknown'
    assert row['cluster_min_cores_per_socket'] == 8


def test_project_keeps_order(scenario_a, make_vm, make_host):
    vm, host = scenario_a
    recs = [evaluate_vm(v, [host], []) for v in (vm, make_vm(name="small01"))]
    assert [r['name'] for r in project(recs)] == ['app01', 'small01']


def test_unknown_projection(recommendation):
    with pytest.raises(ValueError):
        project([recommendation], 'wide')
