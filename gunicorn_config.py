"""
Gunicorn configuration for the Sanviplex stream source API.
"""
import multiprocessing
import os

# Server socket
bind = f"{os.getenv('SANVIPLEX_HOST', '0.0.0.0')}:{os.getenv('SANVIPLEX_PORT', '8000')}"
backlog = 2048

# Worker processes
workers = int(os.getenv("SANVIPLEX_WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "gevent"
worker_connections = 1000
max_requests = 10000  # Restart workers after N requests
max_requests_jitter = 1000
timeout = 30  # Responses are computed locally, no upstream calls
graceful_timeout = 30
keepalive = 5

preload_app = False

# Server mechanics
daemon = False
pidfile = None
umask = 0
user = None
group = None
tmp_upload_dir = None

# Logging
accesslog = os.getenv("SANVIPLEX_ACCESS_LOG", "-")
errorlog = os.getenv("SANVIPLEX_ERROR_LOG", "-")
loglevel = os.getenv("SANVIPLEX_LOG_LEVEL", "info")
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

proc_name = "sanviplex"


def on_starting(server):
    """Called just before the master process is initialized."""
    print(f"🚀 Starting Sanviplex stream API with {workers} workers (gevent async)")


def on_reload(server):
    print("♻️  Reloading Sanviplex workers...")


def worker_abort(worker):
    """Called when a worker times out."""
    print(f"⚠️  Worker {worker.pid} timed out - will be restarted")


def post_fork(server, worker):
    print(f"✓ Worker {worker.pid} started")


def when_ready(server):
    print(f"✓ Sanviplex ready on {bind}")


def on_exit(server):
    print("👋 Sanviplex server shutting down")
