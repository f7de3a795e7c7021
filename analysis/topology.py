"""
Topology resolution - joins a VM to its current host and (optional) cluster.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from analysis.errors import ResolutionError
from inventory.models import ClusterRecord, HostRecord, VMRecord


@dataclass(frozen=True)
class TopologyContext:
    vm: VMRecord
    host: HostRecord
    cluster: Optional[ClusterRecord]
    # Host hardware differs from the cluster minimum, so a rebalance could
    # land the VM on a smaller host. Always False without a cluster.
    cluster_inconsistent: bool


def is_cluster_inconsistent(host: HostRecord, cluster: ClusterRecord) -> bool:
    return (
        host.memory_gb != cluster.min_memory_gb
        or host.sockets != cluster.min_sockets
        or host.cores_per_socket != cluster.min_cores_per_socket
    )


def resolve_topology(vm: VMRecord, hosts: Iterable[HostRecord],
                     clusters: Iterable[ClusterRecord]) -> TopologyContext:
    if not vm.host:
        raise ResolutionError(vm.name, "VM has no current host (orphaned or disconnected)")
    host = next(
        (h for h in hosts if h.name == vm.host and h.vcenter == vm.vcenter), None
    )
    if host is None:
        raise ResolutionError(vm.name, f"host '{vm.host}' not found in vCenter '{vm.vcenter}'")

    if not host.cluster:
        return TopologyContext(vm=vm, host=host, cluster=None, cluster_inconsistent=False)

    cluster = next(
        (c for c in clusters if c.name == host.cluster and c.vcenter == host.vcenter), None
    )
    if cluster is None:
        raise ResolutionError(vm.name, f"cluster '{host.cluster}' of host '{host.name}' not found")

    return TopologyContext(
        vm=vm,
        host=host,
        cluster=cluster,
        cluster_inconsistent=is_cluster_inconsistent(host, cluster),
    )
