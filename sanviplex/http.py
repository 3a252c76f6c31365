from __future__ import annotations

from flask import Response, jsonify, request


def build_cors_headers() -> dict:
    req_headers = request.headers.get("Access-Control-Request-Headers")
    allow_headers = req_headers if req_headers else "Content-Type"
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": allow_headers,
    }


def json_error(message: str, status: int = 400) -> Response:
    response = jsonify({"error": message})
    response.status_code = status
    for k, v in build_cors_headers().items():
        response.headers.setdefault(k, v)
    return response
