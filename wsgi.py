"""
WSGI entry point for production deployment with gunicorn.
Usage: gunicorn -c gunicorn_config.py wsgi:app
"""
import os

from sanviplex.app import create_app

verbose = os.getenv("SANVIPLEX_VERBOSE", "").lower() in ("1", "true", "yes")

app = create_app(verbose=verbose)

if __name__ == "__main__":
    # For development only - use gunicorn for production
    app.run(
        host=os.getenv("SANVIPLEX_HOST", "0.0.0.0"),
        port=int(os.getenv("SANVIPLEX_PORT", "8000")),
        debug=False,
        threaded=True,
    )
