"""
Advisory rules - independent heuristic checks over one VM's evaluation.

Each rule takes an AdvisoryContext and returns a Finding or None. ADVISORY_RULES
is the evaluation order; findings keep that order in the recommendation details.

Weights: 1 informational, 2 low, 3 medium, 4 high.
"""
from dataclasses import dataclass
from typing import Callable, List, Optional

import config
from analysis.optimizer import SocketPlan, cap_to_host, exceeds_host_cores
from analysis.span import SpanInfo
from analysis.topology import TopologyContext
from inventory.models import PowerPolicy

INFO = 1
LOW = 2
MEDIUM = 3
HIGH = 4


@dataclass(frozen=True)
class Finding:
    weight: int
    message: str


@dataclass(frozen=True)
class AdvisoryContext:
    topology: TopologyContext
    span: SpanInfo
    host_plan: SocketPlan
    # Plan after the cluster-minimum adjustment, before any host-capacity cap
    plan: SocketPlan

    @property
    def cluster_override(self) -> bool:
        return self.plan.basis == "cluster"

    @property
    def recommended(self) -> SocketPlan:
        """The layout the VM is finally told to use, after any host-capacity cap."""
        return cap_to_host(self.topology, self.plan)

    @property
    def optimal(self) -> bool:
        vm = self.topology.vm
        return vm.sockets == self.plan.sockets and vm.cores_per_socket == self.plan.cores_per_socket


def _layout(plan: SocketPlan) -> str:
    return f"{plan.sockets} socket(s) x {plan.cores_per_socket:g} core(s)"


def effective_numa_override(ctx: AdvisoryContext) -> Optional[int]:
    """numa.vcpu.min set on the VM, else on its host."""
    vm = ctx.topology.vm
    if vm.numa_vcpu_min is not None:
        return vm.numa_vcpu_min
    return ctx.topology.host.numa_vcpu_min


def cluster_consistency(ctx: AdvisoryContext) -> Optional[Finding]:
    topo = ctx.topology
    if not topo.cluster_inconsistent:
        return None
    cluster = topo.cluster
    if ctx.cluster_override:
        if cluster.drs_enabled:
            return Finding(HIGH, (
                f"Cluster {cluster.name} has mixed host hardware and DRS is enabled; the VM can be "
                f"moved to a smaller host at any time. Sized for the cluster minimum: {_layout(ctx.plan)}"
            ))
        return Finding(MEDIUM, (
            f"Cluster {cluster.name} has mixed host hardware; on its smallest host this VM "
            f"needs {_layout(ctx.plan)} instead of {_layout(ctx.host_plan)}"
        ))
    return Finding(INFO, (
        f"Cluster {cluster.name} has mixed host hardware; the recommendation also fits its smallest host"
    ))


def alignment(ctx: AdvisoryContext) -> Optional[Finding]:
    if ctx.span.wide or ctx.optimal:
        return None
    return Finding(LOW, (
        f"VM fits in one NUMA node but its topology is not aligned; {_layout(ctx.plan)} recommended"
    ))


def numa_span(ctx: AdvisoryContext) -> Optional[Finding]:
    if not ctx.span.wide or ctx.optimal:
        return None
    return Finding(HIGH, (
        f"VM {ctx.span.spanning_resources()} spans NUMA nodes on host {ctx.topology.host.name}; "
        f"configure {_layout(ctx.recommended)} to distribute evenly across nodes"
    ))


def numa_exposure(ctx: AdvisoryContext) -> Optional[Finding]:
    """Composite check: can the guest OS actually see the NUMA topology?"""
    if not ctx.span.wide:
        return None
    vm = ctx.topology.vm
    notes: List[Finding] = []
    if vm.hw_version < config.NUMA_MIN_HW_VERSION:
        notes.append(Finding(HIGH, (
            f"hardware version {vm.hw_version} is below {config.NUMA_MIN_HW_VERSION}, "
            f"guest cannot see NUMA topology"
        )))
    if vm.cpu_hot_add:
        notes.append(Finding(HIGH, "CPU hot-add is enabled, which hides NUMA topology from the guest"))

    override = effective_numa_override(ctx)
    if override is None:
        if vm.num_cpu < config.NUMA_VCPU_MIN:
            notes.append(Finding(HIGH, (
                f"{vm.num_cpu} vCPUs is below the NUMA exposure threshold of {config.NUMA_VCPU_MIN}; "
                f"set numa.vcpu.min to {vm.num_cpu} or lower"
            )))
    elif override <= vm.num_cpu:
        notes.append(Finding(INFO, f"numa.vcpu.min={override} exposes NUMA for {vm.num_cpu} vCPUs"))
    else:
        notes.append(Finding(HIGH, (
            f"numa.vcpu.min={override} is above the VM's {vm.num_cpu} vCPUs; "
            f"lower it to {vm.num_cpu} or less"
        )))

    if not notes:
        return None
    return Finding(
        max(n.weight for n in notes),
        "NUMA exposure: " + "; ".join(n.message for n in notes),
    )


def odd_vcpus(ctx: AdvisoryContext) -> Optional[Finding]:
    if not ctx.span.odd_vcpus:
        return None
    vm = ctx.topology.vm
    return Finding(HIGH, (
        f"Odd vCPU count ({vm.num_cpu}) cannot be split evenly across NUMA nodes; "
        f"use {ctx.span.working_vcpus}"
    ))


def host_overcommit(ctx: AdvisoryContext) -> Optional[Finding]:
    if not exceeds_host_cores(ctx.topology):
        return None
    host = ctx.topology.host
    return Finding(HIGH, (
        f"VM has {ctx.topology.vm.num_cpu} vCPUs but host {host.name} has only "
        f"{host.total_cores} physical cores; capped to {host.sockets} socket(s) x "
        f"{host.cores_per_socket} core(s)"
    ))


def power_policy(ctx: AdvisoryContext) -> Optional[Finding]:
    vm = ctx.topology.vm
    host = ctx.topology.host
    if vm.num_cpu <= config.POWER_POLICY_VCPU_THRESHOLD:
        return None
    if host.power_policy in (PowerPolicy.UNKNOWN, PowerPolicy.HIGH_PERFORMANCE):
        return None
    return Finding(MEDIUM, (
        f"Host {host.name} power policy is {host.power_policy.value}; "
        f"HighPerformance is recommended for VMs with more than {config.POWER_POLICY_VCPU_THRESHOLD} vCPUs"
    ))


def uneven_cores(ctx: AdvisoryContext) -> Optional[Finding]:
    # The host-capacity cap replaces the plan with whole numbers
    if ctx.plan.integral or exceeds_host_cores(ctx.topology):
        return None
    return Finding(INFO, (
        f"{ctx.span.working_vcpus} vCPUs do not divide evenly into {ctx.plan.sockets} socket(s); "
        f"no whole cores-per-socket value exists for this socket count"
    ))


ADVISORY_RULES: List[Callable[[AdvisoryContext], Optional[Finding]]] = [
    cluster_consistency,
    alignment,
    numa_span,
    numa_exposure,
    odd_vcpus,
    host_overcommit,
    power_policy,
    uneven_cores,
]


def evaluate_advisories(ctx: AdvisoryContext, rules=None) -> List[Finding]:
    findings = []
    for rule in (rules or ADVISORY_RULES):
        finding = rule(ctx)
        if finding is not None:
            findings.append(finding)
    return findings
