"""
End-to-end evaluation of single VMs through the full pipeline
"""
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from analysis.engine import evaluate_vm
from analysis.errors import CalculationError, ResolutionError
from inventory.models import HostRecord, PowerPolicy
from report.projections import compact


class TestScenarios:
    """Reference scenarios"""

    def test_scenario_a_wide_cpu_balanced_host(self, scenario_a):
        vm, host = scenario_a
        rec = evaluate_vm(vm, [host], [])

        assert rec.optimal_sockets == 2
        assert rec.optimal_cores_per_socket == 6
        assert rec.priority == "HIGH"
        assert rec.optimized is False
        details = rec.details.split("|")
        assert len(details) == 2
        assert "spans NUMA nodes" in details[0]
        assert "power policy is Balanced" in details[1]

    def test_scenario_b_small_vm_is_optimized(self, make_vm, make_host):
        vm = make_vm(num_cpu=4, cores_per_socket=4, memory_gb=16)
        rec = evaluate_vm(vm, [make_host(power_policy=PowerPolicy.HIGH_PERFORMANCE)], [])

        assert rec.priority == "N/A"
        assert rec.optimized is True
        assert rec.details == ""
        assert (rec.optimal_sockets, rec.optimal_cores_per_socket) == (1, 4)

    def test_scenario_c_vm_larger_than_host(self, make_vm, make_host):
        vm = make_vm(num_cpu=24, cores_per_socket=12, memory_gb=64)
        host = make_host()
        rec = evaluate_vm(vm, [host], [])

        assert rec.optimal_sockets == host.sockets
        assert rec.optimal_cores_per_socket == host.cores_per_socket
        assert rec.priority == "HIGH"
        assert "physical cores" in rec.details

    def test_scenario_d_cluster_minimum_wins(self, make_vm, mixed_cluster):
        big, small, cluster = mixed_cluster(drs_enabled=True)
        vm = make_vm(num_cpu=16, cores_per_socket=1, memory_gb=64, host="esx-big")
        rec = evaluate_vm(vm, [big, small], [cluster])

        assert (rec.optimal_sockets, rec.optimal_cores_per_socket) == (2, 8)
        assert rec.priority == "HIGH"
        assert rec.cluster is cluster
        assert rec.details.split("|")[0].startswith("Cluster prod")

    def test_scenario_d_without_drs_is_medium(self, make_vm, mixed_cluster):
        big, small, cluster = mixed_cluster(drs_enabled=False)
        vm = make_vm(num_cpu=16, cores_per_socket=2, memory_gb=64, host="esx-big")
        rec = evaluate_vm(vm, [big, small], [cluster])

        assert rec.priority == "MEDIUM"
        assert (rec.optimal_sockets, rec.optimal_cores_per_socket) == (2, 8)


class TestVerdicts:

    def test_info_only_is_optimized(self, make_vm, mixed_cluster):
        big, small, cluster = mixed_cluster()
        rec = evaluate_vm(make_vm(host="esx-big"), [big, small], [cluster])
        assert rec.priority == "INFO"
        assert rec.optimized is True

    def test_odd_vcpus_use_rounded_count(self, make_vm, make_host):
        rec = evaluate_vm(make_vm(num_cpu=11, cores_per_socket=1), [make_host()], [])
        assert (rec.optimal_sockets, rec.optimal_cores_per_socket) == (2, 6)
        assert "Odd vCPU count" in rec.details

    def test_uneven_split_reported_not_rounded(self, make_vm, make_host):
        host = make_host(sockets=4, cores_per_socket=4, memory_gb=512)
        rec = evaluate_vm(make_vm(num_cpu=10, cores_per_socket=1), [host], [])
        assert rec.optimal_sockets == 3
        assert rec.optimal_cores_per_socket == 10 / 3
        assert rec.details.split("|")[-1].startswith("10 vCPUs do not divide evenly")

    def test_uneven_layout_printed_readably(self, make_vm, make_host):
        host = make_host(sockets=4, cores_per_socket=4, memory_gb=512)
        rec = evaluate_vm(make_vm(num_cpu=10, cores_per_socket=1), [host], [])
        span = rec.details.split("|")[0]
        assert "3 socket(s) x 3.33333 core(s)" in span
        assert "3.3333333333" not in rec.details

    def test_span_advice_uses_capped_layout(self, make_vm, make_host):
        rec = evaluate_vm(make_vm(num_cpu=24, cores_per_socket=1, memory_gb=64), [make_host()], [])
        span = rec.details.split("|")[0]
        assert "spans NUMA nodes" in span
        assert "configure 2 socket(s) x 10 core(s)" in span
        assert (rec.optimal_sockets, rec.optimal_cores_per_socket) == (2, 10)


class TestFailures:

    def test_unknown_host(self, make_vm, make_host):
        with pytest.raises(ResolutionError):
            evaluate_vm(make_vm(host="missing"), [make_host()], [])

    def test_zero_cores_per_socket(self, make_vm):
        host = HostRecord(name="esx01", vcenter="vc01", memory_gb=256, sockets=2,
                          cores_per_socket=0, total_cores=0, threads=0, hyperthreading=False)
        with pytest.raises(CalculationError) as exc:
            evaluate_vm(make_vm(), [host], [])
        assert exc.value.vm_name == "vm01"


def test_evaluation_is_idempotent(scenario_a):
    vm, host = scenario_a
    first = evaluate_vm(vm, [host], [])
    second = evaluate_vm(vm, [host], [])
    assert first == second
    assert compact(first) == compact(second)
