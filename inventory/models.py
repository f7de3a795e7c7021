"""
Normalized inventory records consumed by the rightsizing engine.

Both the offline snapshot importer and the live vCenter importer produce these
same shapes, so nothing downstream cares where the data came from.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PowerPolicy(str, Enum):
    HIGH_PERFORMANCE = "HighPerformance"
    BALANCED = "Balanced"
    LOW_POWER = "LowPower"
    CUSTOM = "Custom"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "PowerPolicy":
        """Accept enum values, vSphere short names (static/dynamic/low/custom)
        and display names ("High performance"); anything else is UNKNOWN."""
        if value is None:
            return cls.UNKNOWN
        if isinstance(value, PowerPolicy):
            return value
        key = str(value).strip().lower().replace(" ", "").replace("_", "")
        return _POWER_POLICY_ALIASES.get(key, cls.UNKNOWN)


_POWER_POLICY_ALIASES = {
    "highperformance": PowerPolicy.HIGH_PERFORMANCE,
    "static": PowerPolicy.HIGH_PERFORMANCE,
    "balanced": PowerPolicy.BALANCED,
    "dynamic": PowerPolicy.BALANCED,
    "lowpower": PowerPolicy.LOW_POWER,
    "low": PowerPolicy.LOW_POWER,
    "custom": PowerPolicy.CUSTOM,
}


@dataclass(frozen=True)
class VMRecord:
    """A VM's CPU/memory topology. num_cpu == sockets * cores_per_socket."""
    name: str
    vcenter: str
    host: str
    memory_gb: float
    num_cpu: int
    sockets: int
    cores_per_socket: int
    hw_version: int
    cpu_hot_add: bool = False
    numa_vcpu_min: Optional[int] = None


@dataclass(frozen=True)
class HostRecord:
    name: str
    vcenter: str
    memory_gb: float
    sockets: int
    cores_per_socket: int
    total_cores: int
    threads: int
    hyperthreading: bool
    power_policy: PowerPolicy = PowerPolicy.UNKNOWN
    cluster: Optional[str] = None
    version: str = ""
    numa_vcpu_min: Optional[int] = None

    @property
    def memory_per_socket(self) -> float:
        # Per-socket memory stands in for one NUMA node's local memory
        if not self.sockets:
            return 0.0
        return self.memory_gb / self.sockets


@dataclass(frozen=True)
class ClusterRecord:
    """Cluster with the smallest memory/socket/core values across its hosts."""
    name: str
    vcenter: str
    drs_enabled: Optional[bool]
    min_memory_gb: float
    min_sockets: int
    min_cores_per_socket: int

    @property
    def min_memory_per_socket(self) -> float:
        if not self.min_sockets:
            return 0.0
        return self.min_memory_gb / self.min_sockets

    @property
    def min_total_cores(self) -> int:
        return self.min_sockets * self.min_cores_per_socket


@dataclass(frozen=True)
class Inventory:
    """Everything one evaluation run needs, in source order."""
    vms: tuple
    hosts: tuple
    clusters: tuple
