"""
Normalize raw inventory dicts into VMRecord / HostRecord / ClusterRecord.

Both importers (offline snapshot, live vCenter) emit plain dicts with the keys
below and hand them to build_inventory(). Missing or malformed required fields
raise DataImportError naming the record.

VM keys:      name, vcenter, host (optional), memory_gb, num_cpu, cores_per_socket,
              sockets (optional), hw_version, cpu_hot_add, numa_vcpu_min
Host keys:    name, vcenter, memory_gb, sockets, cores_per_socket, total_cores,
              threads, hyperthreading, power_policy, cluster, version, numa_vcpu_min
Cluster keys: name, vcenter, drs_enabled, min_memory_gb, min_sockets,
              min_cores_per_socket (computed from hosts when absent, clamped
              to the member hosts when larger)
"""
import logging
import re
from typing import Any, Dict, List, Optional

from inventory.models import ClusterRecord, HostRecord, Inventory, PowerPolicy, VMRecord

logger = logging.getLogger(__name__)


class DataImportError(Exception):
    """Raised when inventory data is unreadable or malformed"""
    pass


_HW_VERSION_RE = re.compile(r'^(?:vmx[-_])?(?P<num>\d+)$', re.IGNORECASE)


def parse_hw_version(value: Any) -> int:
    """Hardware version ordinal from 10, "10", "vmx-10" or "VMX_19"."""
    if isinstance(value, bool):
        raise ValueError(f"invalid hardware version: {value!r}")
    if isinstance(value, int):
        return value
    m = _HW_VERSION_RE.match(str(value).strip())
    if not m:
        raise ValueError(f"invalid hardware version: {value!r}")
    return int(m.group('num'))


def _parse_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in ("1", "true", "yes", "on", "enabled"):
        return True
    if s in ("0", "false", "no", "off", "disabled"):
        return False
    # "unknown" and anything unrecognized
    return None


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _require(raw: Dict[str, Any], key: str, kind: str, name: str) -> Any:
    value = raw.get(key)
    if value is None or value == "":
        raise DataImportError(f"{kind} '{name}' is missing required field '{key}'")
    return value


def vm_from_dict(raw: Dict[str, Any], default_vcenter: str = "") -> VMRecord:
    name = raw.get('name')
    if not name:
        raise DataImportError(f"VM record without a name: {raw!r}")
    try:
        num_cpu = int(_require(raw, 'num_cpu', 'VM', name))
        cores_per_socket = int(raw.get('cores_per_socket') or 1)
        sockets = raw.get('sockets')
        if sockets is None or sockets == "":
            if cores_per_socket <= 0 or num_cpu % cores_per_socket:
                raise DataImportError(
                    f"VM '{name}': {num_cpu} vCPUs not divisible by {cores_per_socket} cores per socket"
                )
            sockets = num_cpu // cores_per_socket
        sockets = int(sockets)
        if sockets * cores_per_socket != num_cpu:
            raise DataImportError(
                f"VM '{name}': {sockets} sockets x {cores_per_socket} cores != {num_cpu} vCPUs"
            )
        return VMRecord(
            name=str(name),
            vcenter=str(raw.get('vcenter') or default_vcenter),
            # Empty when the VM has no current host; resolution fails for that VM alone
            host=str(raw.get('host') or ""),
            memory_gb=float(_require(raw, 'memory_gb', 'VM', name)),
            num_cpu=num_cpu,
            sockets=sockets,
            cores_per_socket=cores_per_socket,
            hw_version=parse_hw_version(_require(raw, 'hw_version', 'VM', name)),
            cpu_hot_add=bool(_parse_bool(raw.get('cpu_hot_add'))),
            numa_vcpu_min=_optional_int(raw.get('numa_vcpu_min')),
        )
    except (TypeError, ValueError) as e:
        raise DataImportError(f"VM '{name}': {e}")


def host_from_dict(raw: Dict[str, Any], default_vcenter: str = "") -> HostRecord:
    name = raw.get('name')
    if not name:
        raise DataImportError(f"Host record without a name: {raw!r}")
    try:
        sockets = int(_require(raw, 'sockets', 'Host', name))
        cores_per_socket = int(raw.get('cores_per_socket') or 0)
        total_cores = raw.get('total_cores')
        total_cores = int(total_cores) if total_cores not in (None, "") else sockets * cores_per_socket
        if not cores_per_socket and sockets:
            cores_per_socket = total_cores // sockets
        threads = raw.get('threads')
        threads = int(threads) if threads not in (None, "") else total_cores
        hyperthreading = _parse_bool(raw.get('hyperthreading'))
        if hyperthreading is None:
            hyperthreading = threads > total_cores
        return HostRecord(
            name=str(name),
            vcenter=str(raw.get('vcenter') or default_vcenter),
            memory_gb=float(_require(raw, 'memory_gb', 'Host', name)),
            sockets=sockets,
            cores_per_socket=cores_per_socket,
            total_cores=total_cores,
            threads=threads,
            hyperthreading=hyperthreading,
            power_policy=PowerPolicy.parse(raw.get('power_policy')),
            cluster=raw.get('cluster') or None,
            version=str(raw.get('version') or ""),
            numa_vcpu_min=_optional_int(raw.get('numa_vcpu_min')),
        )
    except (TypeError, ValueError) as e:
        raise DataImportError(f"Host '{name}': {e}")


def cluster_minimums(cluster_name: str, vcenter: str, hosts: List[HostRecord]) -> Optional[Dict[str, Any]]:
    """Smallest memory / sockets / cores-per-socket across the cluster's hosts."""
    members = [h for h in hosts if h.cluster == cluster_name and h.vcenter == vcenter]
    if not members:
        return None
    return {
        'min_memory_gb': min(h.memory_gb for h in members),
        'min_sockets': min(h.sockets for h in members),
        'min_cores_per_socket': min(h.cores_per_socket for h in members),
    }


def cluster_from_dict(raw: Dict[str, Any], hosts: List[HostRecord], default_vcenter: str = "") -> ClusterRecord:
    name = raw.get('name')
    if not name:
        raise DataImportError(f"Cluster record without a name: {raw!r}")
    vcenter = str(raw.get('vcenter') or default_vcenter)
    keys = ('min_memory_gb', 'min_sockets', 'min_cores_per_socket')
    values = {k: raw.get(k) for k in keys}
    computed = cluster_minimums(name, vcenter, hosts)
    if any(v is None or v == "" for v in values.values()):
        if computed is None:
            raise DataImportError(
                f"Cluster '{name}' has no minimums and no member hosts to compute them from"
            )
        values = {k: values[k] if values[k] not in (None, "") else computed[k] for k in keys}
    try:
        minimums = {
            'min_memory_gb': float(values['min_memory_gb']),
            'min_sockets': int(values['min_sockets']),
            'min_cores_per_socket': int(values['min_cores_per_socket']),
        }
    except (TypeError, ValueError) as e:
        raise DataImportError(f"Cluster '{name}': {e}")

    # A supplied minimum may never exceed what a member host actually has
    if computed is not None:
        for key in keys:
            if minimums[key] > computed[key]:
                logger.warning(
                    f"Cluster '{name}': {key}={minimums[key]} exceeds the smallest member host "
                    f"({computed[key]}), using {computed[key]}"
                )
                minimums[key] = type(minimums[key])(computed[key])

    return ClusterRecord(
        name=str(name),
        vcenter=vcenter,
        drs_enabled=_parse_bool(raw.get('drs_enabled')),
        **minimums,
    )


def build_inventory(raw: Dict[str, Any]) -> Inventory:
    """Build an Inventory from {'vcenter', 'vms', 'hosts', 'clusters'}."""
    if not isinstance(raw, dict):
        raise DataImportError(f"inventory must be a mapping, got {type(raw).__name__}")
    default_vcenter = str(raw.get('vcenter') or "")
    for section in ('vms', 'hosts', 'clusters'):
        if not isinstance(raw.get(section) or [], list):
            raise DataImportError(f"'{section}' must be a list")

    hosts = [host_from_dict(h, default_vcenter) for h in raw.get('hosts') or []]
    clusters = [cluster_from_dict(c, hosts, default_vcenter) for c in raw.get('clusters') or []]
    vms = [vm_from_dict(v, default_vcenter) for v in raw.get('vms') or []]
    return Inventory(vms=tuple(vms), hosts=tuple(hosts), clusters=tuple(clusters))
