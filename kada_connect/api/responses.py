"""Success envelope shared by all JSON endpoints."""
from __future__ import annotations
from typing import Any

from flask import Response, jsonify


def success(message: str, data: Any = None, status: int = 200, **extra) -> tuple[Response, int]:
    """Build ``{success, message, data}``; list payloads also report ``count``."""
    payload = {"success": True, "message": message, "data": data}
    if isinstance(data, list):
        payload["count"] = len(data)
    payload.update(extra)
    return jsonify(payload), status
