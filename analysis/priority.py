"""
Priority aggregation and the final per-VM Recommendation record.
"""
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from analysis.advisories import Finding
from analysis.optimizer import Number
from inventory.models import ClusterRecord, HostRecord, VMRecord

PRIORITY_LABELS = {0: "N/A", 1: "INFO", 2: "LOW", 3: "MEDIUM", 4: "HIGH"}
OPTIMIZED_PRIORITIES = ("N/A", "INFO")
DETAIL_SEPARATOR = "|"


def aggregate_priority(findings: Iterable[Finding]) -> str:
    weight = max((f.weight for f in findings), default=0)
    return PRIORITY_LABELS[weight]


def is_optimized(priority: str) -> bool:
    # Informational findings alone do not make a VM misconfigured
    return priority in OPTIMIZED_PRIORITIES


@dataclass(frozen=True)
class Recommendation:
    vm: VMRecord
    host: HostRecord
    cluster: Optional[ClusterRecord]
    optimal_sockets: int
    optimal_cores_per_socket: Number
    optimized: bool
    priority: str
    findings: Tuple[Finding, ...]

    @property
    def details(self) -> str:
        return DETAIL_SEPARATOR.join(f.message for f in self.findings).strip(DETAIL_SEPARATOR)


def build_recommendation(vm: VMRecord, host: HostRecord, cluster: Optional[ClusterRecord],
                         sockets: int, cores_per_socket: Number,
                         findings: Iterable[Finding]) -> Recommendation:
    findings = tuple(findings)
    priority = aggregate_priority(findings)
    return Recommendation(
        vm=vm,
        host=host,
        cluster=cluster,
        optimal_sockets=sockets,
        optimal_cores_per_socket=cores_per_socket,
        optimized=is_optimized(priority),
        priority=priority,
        findings=findings,
    )
