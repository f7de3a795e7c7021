"""
Batch evaluation across an inventory.

Each VM is evaluated in isolation: a ResolutionError or CalculationError on one
VM becomes a failed VMResult and the batch carries on. Results come back in
inventory order regardless of worker count.
"""
import fnmatch
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence

from analysis.engine import evaluate_vm
from analysis.errors import EvaluationError
from analysis.priority import Recommendation
from inventory.models import Inventory, VMRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VMResult:
    vm_name: str
    recommendation: Optional[Recommendation] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


ProgressCallback = Callable[[int, int, VMResult], None]


@dataclass
class BatchResult:
    results: List[VMResult] = field(default_factory=list)
    cancelled: bool = False

    @property
    def recommendations(self) -> List[Recommendation]:
        return [r.recommendation for r in self.results if r.ok]

    @property
    def failures(self) -> List[VMResult]:
        return [r for r in self.results if not r.ok]

    def summary(self) -> dict:
        recs = self.recommendations
        return {
            'evaluated': len(recs),
            'optimized': sum(1 for r in recs if r.optimized),
            'failed': len(self.failures),
            'cancelled': self.cancelled,
        }


def filter_vms(vms: Iterable[VMRecord], names: Optional[Sequence[str]] = None) -> List[VMRecord]:
    """Keep VMs named by any of `names` (case-insensitive).

    A name equal to some VM's name selects that VM literally, so names holding
    `[`, `?` or `*` still match exactly; any other name is a wildcard pattern.
    """
    vms = list(vms)
    if not names:
        return vms
    known = {vm.name.lower() for vm in vms}
    exact = set()
    patterns = []
    for n in names:
        key = n.lower()
        if key in known:
            exact.add(key)
        else:
            patterns.append(key)
    return [
        vm for vm in vms
        if vm.name.lower() in exact
        or any(fnmatch.fnmatchcase(vm.name.lower(), p) for p in patterns)
    ]


def _is_cancelled(cancel: Optional[threading.Event]) -> bool:
    return cancel is not None and cancel.is_set()


def _evaluate_one(vm: VMRecord, inventory: Inventory) -> VMResult:
    try:
        rec = evaluate_vm(vm, inventory.hosts, inventory.clusters)
    except EvaluationError as e:
        logger.warning(f"[{vm.name}] evaluation failed: {e.reason}")
        return VMResult(vm_name=vm.name, error=e.reason)
    return VMResult(vm_name=vm.name, recommendation=rec)


def evaluate_batch(inventory: Inventory,
                   names: Optional[Sequence[str]] = None,
                   progress: Optional[ProgressCallback] = None,
                   max_workers: int = 1,
                   cancel: Optional[threading.Event] = None) -> BatchResult:
    """Evaluate every (filtered) VM.

    Args:
        progress: called as progress(done, total, result) once per finished VM
        max_workers: >1 evaluates on a bounded thread pool
        cancel: when set, VMs not yet started are skipped
    """
    vms = filter_vms(inventory.vms, names)
    total = len(vms)
    batch = BatchResult()

    if max_workers <= 1:
        for done, vm in enumerate(vms, start=1):
            if _is_cancelled(cancel):
                batch.cancelled = True
                break
            result = _evaluate_one(vm, inventory)
            batch.results.append(result)
            if progress:
                progress(done, total, result)
        return batch

    if _is_cancelled(cancel):
        batch.cancelled = True
        return batch

    slots: List[Optional[VMResult]] = [None] * total
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {}
        for i, vm in enumerate(vms):
            if _is_cancelled(cancel):
                batch.cancelled = True
                break
            futures[pool.submit(_evaluate_one, vm, inventory)] = i
        done = 0
        for future in as_completed(futures):
            if future.cancelled():
                continue
            result = future.result()
            slots[futures[future]] = result
            done += 1
            if progress:
                progress(done, total, result)
            if _is_cancelled(cancel) and not batch.cancelled:
                batch.cancelled = True
                for f in futures:
                    f.cancel()
    batch.results = [r for r in slots if r is not None]
    return batch
