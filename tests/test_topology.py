import pytest

from analysis.errors import ResolutionError
from analysis.span import classify_span
from analysis.topology import resolve_topology


def test_resolves_standalone_host(make_vm, make_host):
    vm, host = make_vm(), make_host()
    ctx = resolve_topology(vm, [host], [])
    assert ctx.host is host
    assert ctx.cluster is None
    assert ctx.cluster_inconsistent is False


def test_host_must_match_vcenter(make_vm, make_host):
    vm = make_vm(vcenter="vc02")
    with pytest.raises(ResolutionError) as exc:
        resolve_topology(vm, [make_host()], [])
    assert exc.value.vm_name == "vm01"


def test_missing_cluster_is_resolution_error(make_vm, make_host):
    host = make_host(cluster="gone")
    with pytest.raises(ResolutionError, match="cluster 'gone'"):
        resolve_topology(make_vm(), [host], [])


def test_inconsistent_cluster_flagged(make_vm, mixed_cluster):
    big, small, cluster = mixed_cluster()
    ctx = resolve_topology(make_vm(host="esx-big"), [big, small], [cluster])
    assert ctx.cluster is cluster
    assert ctx.cluster_inconsistent is True


def test_smallest_host_is_consistent(make_vm, mixed_cluster):
    big, small, cluster = mixed_cluster()
    ctx = resolve_topology(make_vm(host="esx-small"), [big, small], [cluster])
    assert ctx.cluster_inconsistent is False


class TestSpan:

    def test_cpu_wide(self, scenario_a):
        vm, host = scenario_a
        span = classify_span(vm, host)
        assert span.cpu_wide is True
        assert span.mem_wide is False
        assert span.working_vcpus == 12
        assert span.spanning_resources() == "CPU"

    def test_memory_wide(self, make_vm, make_host):
        span = classify_span(make_vm(memory_gb=500), make_host())
        assert span.mem_wide is True
        assert span.cpu_wide is False

    def test_odd_wide_rounds_up(self, make_vm, make_host):
        span = classify_span(make_vm(num_cpu=11, cores_per_socket=1), make_host())
        assert span.odd_vcpus is True
        assert span.working_vcpus == 12

    def test_odd_narrow_not_rounded(self, make_vm, make_host):
        span = classify_span(make_vm(num_cpu=3, cores_per_socket=1), make_host())
        assert span.wide is False
        assert span.odd_vcpus is False
        assert span.working_vcpus == 3

    def test_both_resources(self, make_vm, make_host):
        span = classify_span(make_vm(num_cpu=12, cores_per_socket=12, memory_gb=500), make_host())
        assert span.spanning_resources() == "memory and CPU"


def test_vm_without_host_is_resolution_error(make_vm, make_host):
    with pytest.raises(ResolutionError, match="no current host") as exc:
        resolve_topology(make_vm(host=""), [make_host()], [])
    assert exc.value.vm_name == "vm01"
