"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with all blueprints, middleware, and configuration.
"""
from __future__ import annotations
import logging
import time
import uuid
from pathlib import Path
from typing import Optional

from flask import Flask, g, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.middleware.proxy_fix import ProxyFix

from kada_connect.config import AppConfig, load_settings
from kada_connect.core.cache import ImageCache
from kada_connect.core.lookup_service import build_lookup_service
from kada_connect.core.profiles import InMemoryProfileRepository

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-Id"
REQUEST_ID_HEADER = "X-Request-Id"
IMAGE_PROXY_RATE_LIMIT = "300 per 15 minutes"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(
    config: Optional[AppConfig] = None,
    profiles: Optional[InMemoryProfileRepository] = None,
) -> Flask:
    """Create and configure Flask application.

    Args:
        config: Explicit configuration; loaded from the environment when omitted
        profiles: Profile repository; built from ``PROFILE_SEED_PATH`` (or empty) when omitted
    """
    # Load configuration
    cfg = config or load_settings()
    _configure_logging(cfg.log_level)

    # Create Flask app
    app = Flask(__name__)
    app.config.setdefault(
        "OPENAPI_SPEC_PATH",
        str(Path(app.root_path).parent / "openapi" / "kada_openapi.yaml"),
    )

    # Store config for easy access in routes
    app.config["APP_CONFIG"] = cfg
    app.config["MAX_CONTENT_LENGTH"] = cfg.max_content_length
    app.json.sort_keys = False

    # Trust X-Forwarded-* headers from proxy (nginx)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    CORS(
        app,
        resources={r"/api/*": {"origins": cfg.allowed_origins}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization", "X-Admin-Key", "X-User-Role", "X-User-Id", CORRELATION_HEADER],
        expose_headers=[REQUEST_ID_HEADER, "X-Proxy-Cache", "ETag", "Retry-After"],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    )

    # Owned collaborators, shared by every request of this app
    if profiles is None:
        profiles = (
            InMemoryProfileRepository.from_seed_file(cfg.profile_seed_path)
            if cfg.profile_seed_path
            else InMemoryProfileRepository()
        )
    lookup_service = build_lookup_service(
        profiles,
        ttl_seconds=cfg.lookup_cache_ttl_seconds,
        search_limit=cfg.search_result_limit,
    )
    from kada_connect.api.proxy import IMAGE_CACHE_TTL_SECONDS

    app.extensions["profile_repository"] = profiles
    app.extensions["lookup_service"] = lookup_service
    app.extensions["image_cache"] = ImageCache(
        ttl_seconds=IMAGE_CACHE_TTL_SECONDS,
        max_entries=cfg.image_cache_max_entries,
        max_bytes=cfg.image_cache_max_bytes,
    )

    # Register blueprints
    from kada_connect.api import health, errors
    from kada_connect.api import lookup, companies, students, proxy
    from kada_connect.api import docs as docs_routes

    app.register_blueprint(health.bp)
    app.register_blueprint(docs_routes.bp, url_prefix="/api")
    app.register_blueprint(lookup.bp, url_prefix="/api")
    app.register_blueprint(companies.bp, url_prefix="/api/companies")
    app.register_blueprint(students.bp, url_prefix="/api/students")
    app.register_blueprint(students.bp, url_prefix="/api/trainees", name="trainees")
    app.register_blueprint(proxy.bp, url_prefix="/api/proxy")

    _configure_rate_limiting(app, cfg, exempt=[health.bp], image_proxy=proxy.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    # Register middleware/after_request handlers
    _register_middleware(app)

    if cfg.lookup_warm_cache:
        if lookup_service.warm_cache():
            print("[flask_app] Lookup cache warmed")
        else:
            print("[flask_app] WARNING: Lookup cache warm-up failed; views will be computed on demand")

    # Log startup info
    print(f"[flask_app] Environment={cfg.environment}")
    print(f"[flask_app] Lookup API registered at /api (cache TTL {cfg.lookup_cache_ttl_seconds}s)")
    if cfg.rate_limit_enabled:
        print(f"[flask_app] Rate limit {cfg.rate_limit_default} per client IP")
    if not cfg.is_production:
        print("[flask_app] WARNING: Development mode - error responses include stack traces")

    return app


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    logging.getLogger().setLevel(level)


def _configure_rate_limiting(app: Flask, cfg: AppConfig, exempt, image_proxy) -> Limiter:
    """Per-IP request limits; one limiter (and storage) per app."""
    limiter = Limiter(
        get_remote_address,
        app=app,
        default_limits=[cfg.rate_limit_default],
        storage_uri=cfg.rate_limit_storage_uri,
        headers_enabled=True,
        enabled=cfg.rate_limit_enabled,
    )
    for blueprint in exempt:
        limiter.exempt(blueprint)
    # Galleries load many images per page
    limiter.limit(IMAGE_PROXY_RATE_LIMIT)(image_proxy)
    return limiter


def _register_middleware(app: Flask):
    """Register request id, request logging and security header hooks."""

    @app.before_request
    def assign_request_id() -> None:
        """Reuse the caller's correlation id or mint one."""
        g.request_id = request.headers.get(CORRELATION_HEADER, "").strip()[:64] or uuid.uuid4().hex
        g.request_started = time.perf_counter()
        logger.info(f"--> {request.method} {request.path} | request_id={g.request_id}")

    @app.after_request
    def finish_request(response):
        """Echo the request id, add security headers and log completion."""
        request_id = g.get("request_id")
        if request_id:
            response.headers[REQUEST_ID_HEADER] = request_id
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)

        started = g.get("request_started")
        duration_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        logger.info(
            f"<-- {request.method} {request.path} {response.status_code} "
            f"({duration_ms:.1f}ms) | request_id={request_id}"
        )
        return response


# ─────────────────────────────────────────────────────────────────────────────
# Application Instance (for Gunicorn)
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=3001, debug=True)
