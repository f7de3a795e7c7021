"""Orchestrator: load inventory -> evaluate VMs -> project -> atomic write.
Advisory only: no VM or host configuration is changed. All configuration from config.py,
overridable per run from the command line.
"""
import argparse
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import config
from config import setup_logging, validate_config, ConfigValidationError, get_output_path
from analysis.batch import BatchResult, VMResult, evaluate_batch
from inventory import snapshot as snapshot_mod
from inventory import vcenter as vcenter_mod
from inventory.models import Inventory
from normalize.records import DataImportError
from report.export import write_report
from report.projections import project

# Configure logging
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Recommend NUMA-aligned vCPU topology (sockets x cores) for VMs"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--snapshot', help="offline inventory snapshot (.json/.yaml)")
    source.add_argument('--vcenter', help="vCenter host for a live inventory run")
    parser.add_argument('--vm', action='append', dest='vm_names', default=None,
                        help="VM name or wildcard pattern; repeatable")
    parser.add_argument('--projection', choices=config.OUTPUT_PROJECTIONS,
                        default=config.OUTPUT_PROJECTION)
    parser.add_argument('--format', choices=config.OUTPUT_FORMATS, dest='fmt',
                        default=config.OUTPUT_FORMAT)
    parser.add_argument('--output', help="output file (default: OUTPUT_DIR/<vcenter>_numa_recommendations.<fmt>)")
    parser.add_argument('--workers', type=int, default=config.MAX_WORKERS)
    return parser


def load_inventory(args: argparse.Namespace) -> Inventory:
    if args.snapshot:
        return snapshot_mod.load_snapshot(args.snapshot)
    return vcenter_mod.fetch_inventory(host=args.vcenter)


def _vcenter_label(args: argparse.Namespace, inventory: Inventory) -> str:
    if args.vcenter:
        return args.vcenter
    for vm in inventory.vms:
        if vm.vcenter:
            return vm.vcenter
    return Path(args.snapshot).stem


def _log_progress(done: int, total: int, result: VMResult) -> None:
    if result.ok:
        logger.debug(f"[{done}/{total}] {result.vm_name}: {result.recommendation.priority}")
    if done == total or done % 50 == 0:
        logger.info(f"Evaluated {done}/{total} VM(s)")


def run_once(args: argparse.Namespace) -> Dict[str, Any]:
    """Evaluate one inventory and write the report.

    Raises DataImportError / VCenterError when the inventory is unavailable.
    """
    inventory = load_inventory(args)
    if not inventory.vms:
        raise DataImportError("No VMs found in inventory")
    label = _vcenter_label(args, inventory)

    batch: BatchResult = evaluate_batch(
        inventory,
        names=args.vm_names,
        progress=_log_progress,
        max_workers=args.workers,
    )
    if not batch.results:
        raise DataImportError(f"No VMs matched {args.vm_names}")

    failures: List[Dict[str, str]] = [
        {'name': r.vm_name, 'error': r.error} for r in batch.failures
    ]
    rows = project(batch.recommendations, args.projection)
    output_path = args.output or get_output_path(label, args.fmt)
    write_report(
        output_path, rows, args.fmt, args.projection,
        vcenter=label, failures=failures, summary=batch.summary(),
    )
    logger.info(f"[{label}] Wrote {len(rows)} recommendation(s) to {output_path}")
    return {'output_path': output_path, 'summary': batch.summary(), 'failures': failures}


def main(argv: Optional[List[str]] = None) -> int:
    # Setup logging first
    setup_logging()
    args = build_parser().parse_args(argv)

    # Validate configuration
    try:
        validate_config(require_vcenter=bool(args.vcenter))
        if args.workers <= 0:
            raise ConfigValidationError(f"--workers must be positive, got {args.workers}")
        logger.info("Configuration validated successfully")
    except ConfigValidationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    if not args.output:
        os.makedirs(config.OUTPUT_DIR, exist_ok=True)

    try:
        out = run_once(args)
    except (DataImportError, vcenter_mod.VCenterError) as e:
        logger.error(f"Inventory unavailable: {e}")
        return 1

    summary = out['summary']
    logger.info("=" * 60)
    logger.info(
        f"Rightsizing complete: {summary['evaluated']} evaluated, "
        f"{summary['optimized']} optimized, {summary['failed']} failed"
    )
    for failure in out['failures']:
        logger.warning(f"  {failure['name']}: {failure['error']}")
    logger.info("=" * 60)

    return 0 if summary['failed'] == 0 else 2


if __name__ == '__main__':
    raise SystemExit(main())
