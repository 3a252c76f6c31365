from __future__ import annotations

from flask import Flask

from .health import create_health_response, increment_error, increment_request, increment_success
from .http import build_cors_headers
from .routes_stream import stream_bp


def create_app(verbose: bool = False) -> Flask:
    app = Flask(__name__)

    app.config.update(
        VERBOSE=bool(verbose),
    )

    @app.before_request
    def track_request():
        increment_request()

    @app.after_request
    def track_response(response):
        if response.status_code < 400:
            increment_success()
        else:
            increment_error()
        return response

    @app.get("/")
    @app.get("/health")
    def health():
        return create_health_response()

    @app.after_request
    def _cors(resp):
        for k, v in build_cors_headers().items():
            resp.headers.setdefault(k, v)
        return resp

    app.register_blueprint(stream_bp)

    return app
