"""Health check endpoints."""
import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@bp.route("/health")
def health_check():
    """Basic health check endpoint."""
    cfg = current_app.config["APP_CONFIG"]
    return jsonify({"status": "OK", "environment": cfg.environment, "timestamp": _timestamp()}), 200


@bp.route("/ready")
def readiness_check():
    """Readiness: reference data loaded and the profile store answering."""
    checks = {}
    try:
        service = current_app.extensions["lookup_service"]
        checks["referenceData"] = bool(service.catalog.industries and service.catalog.tech_skills)
        current_app.extensions["profile_repository"].list_companies()
        checks["profileStore"] = True
    except Exception as exc:
        logger.warning(f"Readiness check failed: {exc}")
        checks.setdefault("referenceData", False)
        checks["profileStore"] = False

    ready = all(checks.values())
    status = "ready" if ready else "not_ready"
    return jsonify({"status": status, "checks": checks, "timestamp": _timestamp()}), 200 if ready else 503
