"""Documentation blueprint exposing the API index, OpenAPI description and ReDoc UI."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from flask import Blueprint, Response, current_app, jsonify, url_for

from kada_connect import __version__
from kada_connect.api.responses import success

bp = Blueprint("docs", __name__)

REDOC_CDN = "https://cdn.redoc.ly/redoc/latest/bundles/redoc.standalone.js"


def _spec_path() -> Path:
    """Resolve the OpenAPI specification path."""
    override = current_app.config.get("OPENAPI_SPEC_PATH")
    if override:
        return Path(override)
    return Path(current_app.root_path).parent / "openapi" / "kada_openapi.yaml"


def _load_spec() -> dict[str, Any]:
    """Load the OpenAPI spec from disk (YAML)."""
    path = _spec_path()
    if not path.exists():
        raise FileNotFoundError(f"OpenAPI spec not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


@bp.route("", methods=["GET"])
def api_index():
    """Entry point listing the endpoint groups."""
    return success(
        "KADA Connect API",
        {
            "version": __version__,
            "documentation": url_for("docs.api_docs"),
            "openapi": url_for("docs.openapi_document"),
            "endpoints": {
                "lookup": [
                    "/api/industries",
                    "/api/tech-roles",
                    "/api/tech-role-categories",
                    "/api/universities",
                    "/api/majors",
                    "/api/tech-skills",
                    "/api/search/<kind>",
                    "/api/suggestions/tech-skills",
                    "/api/validate/tech-skills",
                    "/api/lookup/all",
                    "/api/popular/<kind>",
                ],
                "cache": ["/api/cache/status", "/api/cache/clear"],
                "profiles": ["/api/companies", "/api/students", "/api/trainees"],
                "proxy": ["/api/proxy/image", "/api/proxy/cache/stats", "/api/proxy/cache/clear"],
            },
        },
    )


@bp.route("/openapi.json", methods=["GET"])
def openapi_document() -> Response:
    """Serve the OpenAPI document as JSON."""
    spec = _load_spec()
    return jsonify(spec)


@bp.route("/docs", methods=["GET"])
def api_docs() -> Response:
    """Serve a ReDoc page (read-only) for the API specification."""
    spec_url = url_for("docs.openapi_document", _external=False)
    html = f"""<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8"/>
    <title>KADA Connect API Reference</title>
    <meta name="robots" content="noindex,nofollow"/>
    <meta name="referrer" content="no-referrer"/>
    <style>
      body {{
        margin: 0;
        font-family: "Segoe UI", Roboto, sans-serif;
        background-color: #f8fafc;
        color: #0f172a;
      }}
      .banner {{
        background: #0f172a;
        color: #f8fafc;
        padding: 12px 24px;
        font-size: 14px;
        display: flex;
        justify-content: space-between;
        align-items: center;
      }}
      .banner strong {{
        text-transform: uppercase;
        letter-spacing: 0.08em;
      }}
      a {{
        color: #0f7dd1;
      }}
    </style>
  </head>
  <body>
    <div class="banner">
      <div>
        <strong>KADA Connect</strong> reference data and profile API (read-only reference).
      </div>
      <div>
        <a href="{spec_url}" style="color:#38bdf8;text-decoration:none;">OpenAPI JSON</a>
      </div>
    </div>
    <redoc spec-url="{spec_url}" expand-responses="200"></redoc>
    <script src="{REDOC_CDN}"></script>
  </body>
</html>"""
    return Response(html, status=200, mimetype="text/html")
