"""
Socket optimizer - the smallest socket count that keeps each virtual socket's
memory and core share inside one physical NUMA node.

Also holds the two adjustments applied on top of the host-based answer:
re-sizing against cluster-minimum hardware and capping to host capacity.
"""
from dataclasses import dataclass
from typing import Union

from analysis.errors import CalculationError
from analysis.span import SpanInfo
from analysis.topology import TopologyContext

Number = Union[int, float]


@dataclass(frozen=True)
class SocketPlan:
    sockets: int
    cores_per_socket: Number
    # "host", "cluster" or "host-capacity"
    basis: str = "host"

    @property
    def integral(self) -> bool:
        return float(self.cores_per_socket).is_integer()


def _fits(sockets: int, memory_gb: float, vcpus: int, mem_per_socket: float,
          total_cores: int, cores_per_socket: int) -> bool:
    mem_share = memory_gb / sockets
    cpu_share = vcpus / sockets
    unsplittable = cpu_share == 1
    memory_ok = mem_share <= mem_per_socket or unsplittable or vcpus == total_cores
    cores_ok = cpu_share <= cores_per_socket or unsplittable
    return memory_ok and cores_ok


def optimal_sockets(vm_name: str, memory_gb: float, vcpus: int, mem_per_socket: float,
                    total_cores: int, cores_per_socket: int) -> int:
    """Scan socket counts from 1 upward, stopping at the first that fits.

    The scan never passes the physical socket count (total_cores / cores_per_socket).

    Raises:
        CalculationError: any input is missing, zero or negative
    """
    params = {
        'memory': memory_gb,
        'vCPUs': vcpus,
        'memory per socket': mem_per_socket,
        'total physical cores': total_cores,
        'cores per socket': cores_per_socket,
    }
    for label, value in params.items():
        if value is None or value <= 0:
            raise CalculationError(vm_name, f"{label} must be positive, got {value!r}")

    max_sockets = max(1, total_cores // cores_per_socket)
    sockets = 1
    while sockets < max_sockets and not _fits(
        sockets, memory_gb, vcpus, mem_per_socket, total_cores, cores_per_socket
    ):
        sockets += 1
    return sockets


def cores_for(vcpus: int, sockets: int) -> Number:
    """Exact quotient; stays an int when the split is even."""
    if vcpus % sockets == 0:
        return vcpus // sockets
    return vcpus / sockets


def plan_for_host(ctx: TopologyContext, span: SpanInfo) -> SocketPlan:
    host = ctx.host
    sockets = optimal_sockets(
        ctx.vm.name,
        ctx.vm.memory_gb,
        span.working_vcpus,
        host.memory_per_socket,
        host.total_cores,
        host.cores_per_socket,
    )
    return SocketPlan(sockets, cores_for(span.working_vcpus, sockets), "host")


def plan_for_cluster(ctx: TopologyContext, span: SpanInfo) -> SocketPlan:
    """Same optimization against the cluster's smallest host."""
    cluster = ctx.cluster
    sockets = optimal_sockets(
        ctx.vm.name,
        ctx.vm.memory_gb,
        span.working_vcpus,
        cluster.min_memory_per_socket,
        cluster.min_total_cores,
        cluster.min_cores_per_socket,
    )
    return SocketPlan(sockets, cores_for(span.working_vcpus, sockets), "cluster")


def adjust_for_cluster(ctx: TopologyContext, span: SpanInfo, host_plan: SocketPlan) -> SocketPlan:
    """Return the cluster-minimum plan when it differs from the host plan.

    Only applies to inconsistent clusters; otherwise host_plan is returned as-is.
    """
    if not ctx.cluster_inconsistent:
        return host_plan
    cluster_plan = plan_for_cluster(ctx, span)
    if cluster_plan.sockets != host_plan.sockets:
        return cluster_plan
    return host_plan


def exceeds_host_cores(ctx: TopologyContext) -> bool:
    return ctx.vm.num_cpu > ctx.host.total_cores


def cap_to_host(ctx: TopologyContext, plan: SocketPlan) -> SocketPlan:
    """Force the host's physical layout on a VM larger than the host."""
    if not exceeds_host_cores(ctx):
        return plan
    return SocketPlan(ctx.host.sockets, ctx.host.cores_per_socket, "host-capacity")
