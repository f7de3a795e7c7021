"""
Per-VM rightsizing pipeline:
resolve -> classify span -> optimize sockets -> cluster adjust -> advisories -> aggregate.

Pure and deterministic; one VM's evaluation shares no state with another's.
"""
from typing import Iterable

from analysis import optimizer
from analysis.advisories import AdvisoryContext, evaluate_advisories
from analysis.priority import Recommendation, build_recommendation
from analysis.span import classify_span
from analysis.topology import resolve_topology
from inventory.models import ClusterRecord, HostRecord, VMRecord


def evaluate_vm(vm: VMRecord, hosts: Iterable[HostRecord],
                clusters: Iterable[ClusterRecord]) -> Recommendation:
    """Raises ResolutionError / CalculationError for this VM only."""
    topology = resolve_topology(vm, hosts, clusters)
    span = classify_span(vm, topology.host)
    host_plan = optimizer.plan_for_host(topology, span)
    plan = optimizer.adjust_for_cluster(topology, span, host_plan)

    findings = evaluate_advisories(AdvisoryContext(
        topology=topology, span=span, host_plan=host_plan, plan=plan,
    ))

    final = optimizer.cap_to_host(topology, plan)
    return build_recommendation(
        vm, topology.host, topology.cluster,
        final.sockets, final.cores_per_socket, findings,
    )
