"""Write projected recommendations to disk (JSON or CSV), atomically."""
import csv
import io
import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from report.projections import fields_for


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _atomic_write(path: str, data: str) -> None:
    dirp = os.path.dirname(path) or '.'
    os.makedirs(dirp, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix='.tmp_numa_', dir=dirp)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
            f.write(data)
        # Atomic replace
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)


def render_json(rows: List[Dict[str, Any]], vcenter: str, projection: str,
                failures: Optional[List[Dict[str, str]]] = None,
                summary: Optional[Dict[str, Any]] = None) -> str:
    doc = {
        'generated_at': _now_iso(),
        'vcenter': vcenter,
        'projection': projection,
        'summary': summary or {},
        'recommendations': rows,
        'failures': failures or [],
    }
    return json.dumps(doc, indent=2)


def render_csv(rows: List[Dict[str, Any]], projection: str) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=fields_for(projection), extrasaction='ignore')
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buf.getvalue()


def write_report(path: str, rows: List[Dict[str, Any]], fmt: str, projection: str,
                 vcenter: str = "", failures: Optional[List[Dict[str, str]]] = None,
                 summary: Optional[Dict[str, Any]] = None) -> str:
    if fmt == 'json':
        data = render_json(rows, vcenter, projection, failures, summary)
    elif fmt == 'csv':
        data = render_csv(rows, projection)
    else:
        raise ValueError(f"unknown output format '{fmt}'")
    _atomic_write(path, data)
    return path
