"""
Health check and request counters for the stream source service.
"""
from __future__ import annotations

import threading
import time
from datetime import datetime
from typing import Any, Dict

from flask import Response, jsonify

_lock = threading.Lock()
_metrics: Dict[str, Any] = {
    'start_time': time.time(),
    'requests_total': 0,
    'requests_success': 0,
    'requests_error': 0,
    'last_request_time': None,
}


def increment_request() -> None:
    with _lock:
        _metrics['requests_total'] += 1
        _metrics['last_request_time'] = datetime.now().isoformat()


def increment_success() -> None:
    with _lock:
        _metrics['requests_success'] += 1


def increment_error() -> None:
    with _lock:
        _metrics['requests_error'] += 1


def reset_metrics() -> None:
    with _lock:
        _metrics.update(
            start_time=time.time(),
            requests_total=0,
            requests_success=0,
            requests_error=0,
            last_request_time=None,
        )


def get_metrics() -> Dict[str, Any]:
    """Snapshot of uptime and request counters."""
    with _lock:
        snapshot = dict(_metrics)
    uptime = time.time() - snapshot['start_time']
    total = snapshot['requests_total']

    return {
        'uptime_seconds': int(uptime),
        'uptime_human': format_uptime(uptime),
        'requests': {
            'total': total,
            'success': snapshot['requests_success'],
            'error': snapshot['requests_error'],
            'success_rate': snapshot['requests_success'] / total * 100 if total > 0 else 0,
        },
        'last_request': snapshot['last_request_time'],
    }


def format_uptime(seconds: float) -> str:
    """Format uptime as e.g. ``1d 2h 3m 4s``."""
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    parts.append(f"{secs}s")

    return " ".join(parts)


def create_health_response() -> Response:
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.now().isoformat(),
        'metrics': get_metrics(),
    })
