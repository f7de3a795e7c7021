"""
Compact and full row projections of a Recommendation.

Every compact field appears unchanged in the full projection.
"""
from typing import Any, Dict, Iterable, List

from analysis.priority import Recommendation

COMPACT_FIELDS = [
    'name', 'vm_sockets', 'vm_cores_per_socket', 'num_cpu', 'optimized',
    'optimal_sockets', 'optimal_cores_per_socket', 'priority', 'details',
]

FULL_FIELDS = COMPACT_FIELDS + [
    'vcenter', 'cluster', 'cluster_min_memory_gb', 'cluster_min_sockets',
    'cluster_min_cores_per_socket', 'drs_enabled', 'host', 'host_version',
    'host_memory_gb', 'host_sockets', 'host_cores_per_socket', 'host_threads',
    'host_hyperthreading', 'host_power_policy', 'hw_version', 'cpu_hot_add',
]


def compact(rec: Recommendation) -> Dict[str, Any]:
    return {
        'name': rec.vm.name,
        'vm_sockets': rec.vm.sockets,
        'vm_cores_per_socket': rec.vm.cores_per_socket,
        'num_cpu': rec.vm.num_cpu,
        'optimized': rec.optimized,
        'optimal_sockets': rec.optimal_sockets,
        'optimal_cores_per_socket': rec.optimal_cores_per_socket,
        'priority': rec.priority,
        'details': rec.details,
    }


def full(rec: Recommendation) -> Dict[str, Any]:
    row = compact(rec)
    cluster = rec.cluster
    host = rec.host
    drs = "unknown"
    if cluster is not None and cluster.drs_enabled is not None:
        drs = cluster.drs_enabled
    row.update({
        'vcenter': rec.vm.vcenter,
        'cluster': cluster.name if cluster else None,
        'cluster_min_memory_gb': cluster.min_memory_gb if cluster else None,
        'cluster_min_sockets': cluster.min_sockets if cluster else None,
        'cluster_min_cores_per_socket': cluster.min_cores_per_socket if cluster else None,
        'drs_enabled': drs if cluster else None,
        'host': host.name,
        'host_version': host.version,
        'host_memory_gb': host.memory_gb,
        'host_sockets': host.sockets,
        'host_cores_per_socket': host.cores_per_socket,
        'host_threads': host.threads,
        'host_hyperthreading': host.hyperthreading,
        'host_power_policy': host.power_policy.value,
        'hw_version': rec.vm.hw_version,
        'cpu_hot_add': rec.vm.cpu_hot_add,
    })
    return row


PROJECTIONS = {'compact': compact, 'full': full}


def project(recs: Iterable[Recommendation], projection: str = 'compact') -> List[Dict[str, Any]]:
    try:
        fn = PROJECTIONS[projection]
    except KeyError:
        raise ValueError(f"unknown projection '{projection}', expected one of {sorted(PROJECTIONS)}")
    return [fn(r) for r in recs]


def fields_for(projection: str) -> List[str]:
    return FULL_FIELDS if projection == 'full' else COMPACT_FIELDS
