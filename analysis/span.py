from dataclasses import dataclass

from inventory.models import HostRecord, VMRecord


@dataclass(frozen=True)
class SpanInfo:
    mem_wide: bool
    cpu_wide: bool
    odd_vcpus: bool
    # vCPU count used for sizing, rounded up to even when a wide VM is odd
    working_vcpus: int

    @property
    def wide(self) -> bool:
        return self.mem_wide or self.cpu_wide

    def spanning_resources(self) -> str:
        parts = []
        if self.mem_wide:
            parts.append("memory")
        if self.cpu_wide:
            parts.append("CPU")
        return " and ".join(parts)


def classify_span(vm: VMRecord, host: HostRecord) -> SpanInfo:
    """Does the VM's memory and/or vCPU demand exceed one NUMA node on its host?"""
    mem_wide = vm.memory_gb > host.memory_per_socket
    cpu_wide = vm.num_cpu > host.cores_per_socket
    odd = (mem_wide or cpu_wide) and vm.num_cpu % 2 == 1
    return SpanInfo(
        mem_wide=mem_wide,
        cpu_wide=cpu_wide,
        odd_vcpus=odd,
        working_vcpus=vm.num_cpu + 1 if odd else vm.num_cpu,
    )
