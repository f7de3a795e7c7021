"""
Test fixtures and configuration for pytest
"""
import json
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from inventory.models import ClusterRecord, HostRecord, Inventory, PowerPolicy, VMRecord


@pytest.fixture
def make_vm():
    """Factory for VMRecord; sockets derived from num_cpu / cores_per_socket"""
    def _make(name="vm01", num_cpu=4, cores_per_socket=4, memory_gb=16.0, hw_version=14,
              cpu_hot_add=False, numa_vcpu_min=None, host="esx01", vcenter="vc01"):
        return VMRecord(
            name=name,
            vcenter=vcenter,
            host=host,
            memory_gb=memory_gb,
            num_cpu=num_cpu,
            sockets=num_cpu // cores_per_socket,
            cores_per_socket=cores_per_socket,
            hw_version=hw_version,
            cpu_hot_add=cpu_hot_add,
            numa_vcpu_min=numa_vcpu_min,
        )
    return _make


@pytest.fixture
def make_host():
    """Factory for HostRecord; defaults to 2 x 10 cores, 768 GB, HighPerformance"""
    def _make(name="esx01", sockets=2, cores_per_socket=10, memory_gb=768.0,
              power_policy=PowerPolicy.HIGH_PERFORMANCE, cluster=None, numa_vcpu_min=None,
              hyperthreading=True, vcenter="vc01"):
        total = sockets * cores_per_socket
        return HostRecord(
            name=name,
            vcenter=vcenter,
            memory_gb=memory_gb,
            sockets=sockets,
            cores_per_socket=cores_per_socket,
            total_cores=total,
            threads=total * 2 if hyperthreading else total,
            hyperthreading=hyperthreading,
            power_policy=power_policy,
            cluster=cluster,
            version="7.0.3",
            numa_vcpu_min=numa_vcpu_min,
        )
    return _make


@pytest.fixture
def mixed_cluster(make_host):
    """Cluster with a 4x16/1024GB host and a 2x8/256GB host"""
    def _make(drs_enabled=True):
        big = make_host(name="esx-big", sockets=4, cores_per_socket=16, memory_gb=1024.0,
                        cluster="prod")
        small = make_host(name="esx-small", sockets=2, cores_per_socket=8, memory_gb=256.0,
                          cluster="prod")
        cluster = ClusterRecord(
            name="prod", vcenter="vc01", drs_enabled=drs_enabled,
            min_memory_gb=256.0, min_sockets=2, min_cores_per_socket=8,
        )
        return big, small, cluster
    return _make


@pytest.fixture
def scenario_a(make_vm, make_host):
    """12 vCPU wide VM on a 2x10 Balanced host, no cluster"""
    vm = make_vm(name="app01", num_cpu=12, cores_per_socket=1, memory_gb=40.0, hw_version=10)
    host = make_host(power_policy=PowerPolicy.BALANCED)
    return vm, host


@pytest.fixture
def snapshot_dict():
    """Raw snapshot as written by an inventory export"""
    return {
        "vcenter": "vc01",
        "vms": [
            {"name": "app01", "host": "esx01", "memory_gb": 40, "num_cpu": 12,
             "cores_per_socket": 1, "hw_version": "vmx-10", "cpu_hot_add": False},
            {"name": "web01", "host": "esx01", "memory_gb": 16, "num_cpu": 4,
             "cores_per_socket": 4, "hw_version": 14},
            {"name": "db01", "host": "esx-big", "memory_gb": 64, "num_cpu": 16,
             "cores_per_socket": 1, "hw_version": "vmx-14", "numa_vcpu_min": 8},
        ],
        "hosts": [
            {"name": "esx01", "memory_gb": 768, "sockets": 2, "cores_per_socket": 10,
             "total_cores": 20, "threads": 40, "hyperthreading": True,
             "power_policy": "dynamic", "version": "7.0.3"},
            {"name": "esx-big", "memory_gb": 1024, "sockets": 4, "cores_per_socket": 16,
             "threads": 128, "power_policy": "static", "cluster": "prod"},
            {"name": "esx-small", "memory_gb": 256, "sockets": 2, "cores_per_socket": 8,
             "threads": 16, "power_policy": "static", "cluster": "prod"},
        ],
        "clusters": [
            {"name": "prod", "drs_enabled": True},
        ],
    }


@pytest.fixture
def snapshot_file(tmp_path, snapshot_dict):
    p = tmp_path / "inventory.json"
    p.write_text(json.dumps(snapshot_dict))
    return p


@pytest.fixture
def inventory(make_vm, make_host):
    host = make_host()
    vms = (
        make_vm(name="web01"),
        make_vm(name="app01", num_cpu=12, cores_per_socket=1, memory_gb=40.0),
        make_vm(name="orphan", host="esx-gone"),
        make_vm(name="web02", num_cpu=4, cores_per_socket=1),
    )
    return Inventory(vms=vms, hosts=(host,), clusters=())
