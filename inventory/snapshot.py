"""
Offline inventory importer - loads a JSON or YAML snapshot file.

The file holds {'vcenter': ..., 'vms': [...], 'hosts': [...], 'clusters': [...]}
in the shape documented in normalize.records.
"""
import json
import logging
from pathlib import Path

import yaml

from inventory.models import Inventory
from normalize.records import DataImportError, build_inventory

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = ('.json', '.yaml', '.yml')


def load_snapshot(path: str) -> Inventory:
    """Read and normalize an inventory snapshot.

    Raises:
        DataImportError: file missing, unreadable, wrong type or malformed records
    """
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise DataImportError(f"Unsupported snapshot format '{suffix}' for {path}")
    try:
        with open(p, 'r', encoding='utf-8') as f:
            if suffix == '.json':
                raw = json.load(f)
            else:
                raw = yaml.safe_load(f)
    except FileNotFoundError:
        raise DataImportError(f"Snapshot file not found: {path}")
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise DataImportError(f"Cannot read snapshot {path}: {e}")

    if raw is None:
        raise DataImportError(f"Snapshot {path} is empty")
    inventory = build_inventory(raw)
    logger.info(
        f"Loaded snapshot {path}: {len(inventory.vms)} VM(s), "
        f"{len(inventory.hosts)} host(s), {len(inventory.clusters)} cluster(s)"
    )
    return inventory
