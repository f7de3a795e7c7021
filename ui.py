#!/usr/bin/env python3
"""
Web UI for NUMA rightsizing recommendations
Read-only viewer over the JSON reports written by orchestrator.py

Multi-vCenter support:
- vCenter selector to switch between reports
- Loads {vcenter}_numa_recommendations.json from OUTPUT_DIR
"""
import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from flask import Flask, render_template, jsonify, Response, request

import config
from config import setup_logging, get_output_path

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

# Get the directory where ui.py is located
BASE_DIR = Path(__file__).parent.resolve()

app = Flask(__name__, template_folder=str(BASE_DIR / 'templates'))

REPORT_SUFFIX = '_numa_recommendations.json'

# Metrics for observability
_metrics = {
    'requests_total': 0,
    'requests_by_endpoint': {},
    'errors_total': 0,
    'start_time': time.time()
}


def _record_request(endpoint: str):
    """Record request metrics"""
    _metrics['requests_total'] += 1
    _metrics['requests_by_endpoint'][endpoint] = _metrics['requests_by_endpoint'].get(endpoint, 0) + 1


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def get_available_vcenters():
    """List vCenters that have a JSON report in OUTPUT_DIR"""
    out_dir = Path(config.OUTPUT_DIR)
    if not out_dir.is_dir():
        return []
    return sorted(p.name[:-len(REPORT_SUFFIX)] for p in out_dir.glob(f'*{REPORT_SUFFIX}'))


def load_json(filepath):
    """Load JSON file safely"""
    try:
        filepath = Path(filepath)
        if not filepath.exists():
            return None
        with open(filepath, 'r') as f:
            return json.load(f)
    except Exception as e:
        logger.error(f"Error loading {filepath}: {e}")
        _metrics['errors_total'] += 1
        return None


def load_report(vcenter: str):
    return load_json(get_output_path(vcenter, 'json'))


def _selected_vcenter(available):
    selected = request.args.get('vcenter')
    if selected:
        return selected
    return available[0] if available else None


@app.route('/')
def index():
    """Main dashboard with vCenter selector"""
    _record_request('/')
    available = get_available_vcenters()
    selected = _selected_vcenter(available)

    if not selected:
        return render_template('error.html',
                               message="No recommendation reports found. Run: python orchestrator.py --snapshot <file>",
                               available_vcenters=available)

    report = load_report(selected)
    if not report:
        return render_template('error.html',
                               message=f"No report for vCenter '{selected}'",
                               available_vcenters=available)

    priority = request.args.get('priority')
    rows = report.get('recommendations', [])
    if priority:
        rows = [r for r in rows if r.get('priority') == priority.upper()]

    return render_template('dashboard.html',
                           report=report,
                           rows=rows,
                           selected_vcenter=selected,
                           available_vcenters=available)


@app.route('/api/vcenters')
def get_vcenters():
    """API endpoint to list vCenters with reports"""
    _record_request('/api/vcenters')
    return jsonify({'vcenters': get_available_vcenters()})


@app.route('/api/recommendations')
def get_recommendations():
    """API endpoint for a vCenter's recommendation report"""
    _record_request('/api/recommendations')
    selected = _selected_vcenter(get_available_vcenters())
    if selected:
        data = load_report(selected)
        if data:
            return jsonify(data)
    return jsonify({"error": "Not found"}), 404


@app.route('/health')
def health():
    """Health check endpoint for liveness probes"""
    _record_request('/health')
    return jsonify({
        "status": "healthy",
        "timestamp": _timestamp()
    })


@app.route('/ready')
def ready():
    """Readiness check endpoint - verifies at least one report exists"""
    _record_request('/ready')
    available = get_available_vcenters()
    if available:
        return jsonify({
            "status": "ready",
            "vcenters_available": len(available),
            "vcenters": available,
            "timestamp": _timestamp()
        })
    return jsonify({
        "status": "not_ready",
        "reason": "No recommendation reports found",
        "timestamp": _timestamp()
    }), 503


@app.route('/metrics')
def metrics():
    """Prometheus metrics endpoint for self-monitoring"""
    _record_request('/metrics')
    uptime = time.time() - _metrics['start_time']

    lines = [
        "# HELP numa_ui_requests_total Total number of HTTP requests",
        "# TYPE numa_ui_requests_total counter",
        f"numa_ui_requests_total {_metrics['requests_total']}",
        "",
        "# HELP numa_ui_errors_total Total number of errors",
        "# TYPE numa_ui_errors_total counter",
        f"numa_ui_errors_total {_metrics['errors_total']}",
        "",
        "# HELP numa_ui_uptime_seconds UI uptime in seconds",
        "# TYPE numa_ui_uptime_seconds gauge",
        f"numa_ui_uptime_seconds {uptime:.2f}",
        "",
        "# HELP numa_ui_reports_available Number of vCenter reports on disk",
        "# TYPE numa_ui_reports_available gauge",
        f"numa_ui_reports_available {len(get_available_vcenters())}",
    ]

    lines.append("")
    lines.append("# HELP numa_ui_requests_by_endpoint Requests per endpoint")
    lines.append("# TYPE numa_ui_requests_by_endpoint counter")
    for endpoint, count in _metrics['requests_by_endpoint'].items():
        lines.append(f'numa_ui_requests_by_endpoint{{endpoint="{endpoint}"}} {count}')

    return Response('\n'.join(lines), mimetype='text/plain')


if __name__ == '__main__':
    logger.info("NUMA Rightsizing UI")
    logger.info("Dashboard: http://127.0.0.1:8080")
    logger.info("Health: http://127.0.0.1:8080/health")
    logger.info("Ready: http://127.0.0.1:8080/ready")
    logger.info("Metrics: http://127.0.0.1:8080/metrics")
    logger.info("Stop with: Ctrl+C")
    app.run(debug=False, host='127.0.0.1', port=8080)
