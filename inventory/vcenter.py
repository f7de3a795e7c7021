"""
Live inventory importer - reads VMs, hosts and clusters from vCenter via pyVmomi.

Produces the same raw dict shape as the offline snapshot so both paths share
normalize.records.build_inventory(). Read-only: nothing is reconfigured.
"""
import logging
from typing import Any, Dict, List, Optional

from pyVim import connect
from pyVmomi import vim

from config import (
    VCENTER_HOST, VCENTER_USER, VCENTER_PASSWORD, VCENTER_PORT, VCENTER_VERIFY_TLS
)
from inventory.models import Inventory
from normalize.records import build_inventory

logger = logging.getLogger(__name__)

NUMA_VCPU_MIN_KEY = "numa.vcpu.min"
_BYTES_PER_GB = 1024 ** 3


class VCenterError(Exception):
    pass


def connect_vcenter(host: str, user: str, password: str, port: int = 443, verify_tls: bool = True):
    """Open a vCenter session and return the service instance."""
    try:
        return connect.SmartConnect(
            host=host,
            user=user,
            pwd=password,
            port=port,
            disableSslCertValidation=not verify_tls,
        )
    except Exception as e:
        raise VCenterError(f"Failed to connect to vCenter {host}: {e}")


def disconnect_vcenter(si) -> None:
    if si is not None:
        connect.Disconnect(si)


def _list_objects(si, vim_type) -> List[Any]:
    content = si.RetrieveContent()
    view = content.viewManager.CreateContainerView(content.rootFolder, [vim_type], True)
    try:
        return list(view.view)
    finally:
        view.Destroy()


def _extra_config_int(options, key: str) -> Optional[int]:
    for opt in options or []:
        if getattr(opt, 'key', None) == key:
            try:
                return int(opt.value)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring non-integer {key}={opt.value!r}")
                return None
    return None


def _vm_to_dict(vm, vcenter: str) -> Optional[Dict[str, Any]]:
    """Flatten a vim.VirtualMachine; returns None for templates and VMs without config."""
    config = vm.config
    if config is None:
        logger.warning(f"[{vcenter}] VM {vm.name} has no configuration (inaccessible?), skipping")
        return None
    if getattr(config, 'template', False):
        return None
    host = vm.runtime.host
    hardware = config.hardware
    return {
        'name': vm.name,
        'vcenter': vcenter,
        'host': host.name if host is not None else "",
        'memory_gb': hardware.memoryMB / 1024.0,
        'num_cpu': hardware.numCPU,
        'cores_per_socket': hardware.numCoresPerSocket or 1,
        'hw_version': config.version,
        'cpu_hot_add': bool(config.cpuHotAddEnabled),
        'numa_vcpu_min': _extra_config_int(config.extraConfig, NUMA_VCPU_MIN_KEY),
    }


def _host_to_dict(host, vcenter: str, cluster_by_host: Dict[str, str]) -> Optional[Dict[str, Any]]:
    """Flatten a vim.HostSystem; returns None when its hardware is not reported."""
    hardware = getattr(host, 'hardware', None)
    if hardware is None or hardware.cpuInfo is None:
        logger.warning(f"[{vcenter}] Host {host.name} reports no hardware (disconnected?), skipping")
        return None
    cpu_info = hardware.cpuInfo
    sockets = cpu_info.numCpuPackages
    total_cores = cpu_info.numCpuCores
    host_config = host.config
    power_policy = None
    hyperthreading = None
    version = ""
    if host_config is not None:
        if host_config.powerSystemInfo and host_config.powerSystemInfo.currentPolicy:
            power_policy = host_config.powerSystemInfo.currentPolicy.shortName
        if host_config.hyperThread is not None:
            hyperthreading = bool(host_config.hyperThread.active)
        if host_config.product is not None:
            version = host_config.product.version
    return {
        'name': host.name,
        'vcenter': vcenter,
        'memory_gb': hardware.memorySize / _BYTES_PER_GB,
        'sockets': sockets,
        'cores_per_socket': total_cores // sockets if sockets else 0,
        'total_cores': total_cores,
        'threads': cpu_info.numCpuThreads,
        'hyperthreading': hyperthreading,
        'power_policy': power_policy,
        'cluster': cluster_by_host.get(host.name),
        'version': version,
    }


def _cluster_to_dict(cluster, vcenter: str) -> Dict[str, Any]:
    drs_enabled = None
    config_ex = getattr(cluster, 'configurationEx', None)
    if config_ex is not None and config_ex.drsConfig is not None:
        drs_enabled = bool(config_ex.drsConfig.enabled)
    # Minimums are filled in from member hosts during normalization
    return {'name': cluster.name, 'vcenter': vcenter, 'drs_enabled': drs_enabled}


def collect_inventory(si, vcenter: str) -> Dict[str, Any]:
    """Collect raw VM/host/cluster dicts from a connected service instance."""
    clusters = _list_objects(si, vim.ClusterComputeResource)
    cluster_by_host: Dict[str, str] = {}
    for cluster in clusters:
        for host in cluster.host or []:
            cluster_by_host[host.name] = cluster.name

    hosts = []
    for host in _list_objects(si, vim.HostSystem):
        record = _host_to_dict(host, vcenter, cluster_by_host)
        if record is not None:
            hosts.append(record)
    vms = []
    for vm in _list_objects(si, vim.VirtualMachine):
        record = _vm_to_dict(vm, vcenter)
        if record is not None:
            vms.append(record)

    # Minimums come from member hosts, so a cluster with none collected is dropped
    collected = {h['cluster'] for h in hosts if h['cluster']}
    cluster_dicts = []
    for cluster in clusters:
        if cluster.name not in collected:
            logger.warning(f"[{vcenter}] Cluster {cluster.name} has no reporting hosts, skipping")
            continue
        cluster_dicts.append(_cluster_to_dict(cluster, vcenter))

    logger.info(f"[{vcenter}] Collected {len(vms)} VM(s), {len(hosts)} host(s), {len(cluster_dicts)} cluster(s)")
    return {
        'vcenter': vcenter,
        'vms': vms,
        'hosts': hosts,
        'clusters': cluster_dicts,
    }


def fetch_inventory(host: str = None, user: str = None, password: str = None,
                    port: int = None, verify_tls: bool = None) -> Inventory:
    """Connect, collect and normalize; settings default to config.py values."""
    host = host or VCENTER_HOST
    si = connect_vcenter(
        host,
        user or VCENTER_USER,
        password or VCENTER_PASSWORD,
        port or VCENTER_PORT,
        VCENTER_VERIFY_TLS if verify_tls is None else verify_tls,
    )
    logger.info(f"Connected to vCenter {host}")
    try:
        raw = collect_inventory(si, host)
    finally:
        disconnect_vcenter(si)
    return build_inventory(raw)
