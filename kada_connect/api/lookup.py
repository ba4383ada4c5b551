"""Lookup (reference data) endpoints mounted under /api.

Handlers sanitize query parameters, delegate to the app's LookupService and
wrap results in the standard envelope. Validation and upstream failures are
raised as ApiError subclasses and rendered by the central error handlers.
"""
from __future__ import annotations
import logging

from flask import Blueprint, abort, current_app, request

from kada_connect.api.decorators import cache_control, require_admin_key
from kada_connect.api.responses import success
from kada_connect.core.lookup_service import LookupService
from kada_connect.core.validators import sanitize_params, validate_skills_payload

bp = Blueprint("lookup", __name__)

logger = logging.getLogger(__name__)

STATIC_MAX_AGE = 2 * 60 * 60
POPULAR_MAX_AGE = 5 * 60
SEARCH_MAX_AGE = 10 * 60


def _service() -> LookupService:
    return current_app.extensions["lookup_service"]


def _args() -> dict:
    return sanitize_params(request.args.to_dict())


# ─────────────────────────────────────────────────────────────────────────────
# Lists
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/industries", methods=["GET"])
@cache_control(STATIC_MAX_AGE)
def list_industries():
    return success("Industries retrieved successfully", _service().get_industries())


@bp.route("/tech-roles", methods=["GET"])
@cache_control(STATIC_MAX_AGE)
def list_tech_roles():
    return success("Tech roles retrieved successfully", _service().get_tech_roles())


@bp.route("/tech-role-categories", methods=["GET"])
@cache_control(STATIC_MAX_AGE)
def list_tech_role_categories():
    return success("Tech role categories retrieved successfully", _service().get_tech_role_categories())


@bp.route("/tech-roles/category/<path:category>", methods=["GET"])
@cache_control(STATIC_MAX_AGE)
def list_tech_roles_by_category(category):
    roles = _service().get_tech_roles_by_category(category)
    return success(f"Tech roles for category '{category.strip()}' retrieved successfully", roles)


@bp.route("/universities", methods=["GET"])
@cache_control(STATIC_MAX_AGE)
def list_universities():
    return success("Universities retrieved successfully", _service().get_universities())


@bp.route("/majors", methods=["GET"])
@cache_control(STATIC_MAX_AGE)
def list_majors():
    return success("Majors retrieved successfully", _service().get_majors())


@bp.route("/tech-skills", methods=["GET"])
@cache_control(STATIC_MAX_AGE)
def list_tech_skills():
    return success("Tech skills retrieved successfully", _service().get_tech_skills())


# ─────────────────────────────────────────────────────────────────────────────
# Search, suggestions, validation
# ─────────────────────────────────────────────────────────────────────────────

_SEARCHES = {
    "industries": ("search_industries", "Industries"),
    "tech-roles": ("search_tech_roles", "Tech roles"),
    "universities": ("search_universities", "Universities"),
    "majors": ("search_majors", "Majors"),
}


@bp.route("/search/<kind>", methods=["GET"])
@cache_control(SEARCH_MAX_AGE)
def search(kind):
    """Search one reference collection: GET /search/<kind>?q=..."""
    if kind not in _SEARCHES:
        abort(404)
    method_name, label = _SEARCHES[kind]
    query = _args().get("q")
    results = getattr(_service(), method_name)(query)
    return success(f"{label} search completed", results, query=query)


@bp.route("/suggestions/tech-skills", methods=["GET"])
@cache_control(SEARCH_MAX_AGE)
def tech_skill_suggestions():
    args = _args()
    suggestions = _service().get_tech_skill_suggestions(args.get("q"), args.get("limit"))
    return success(
        "Tech skill suggestions retrieved successfully",
        suggestions,
        totalAvailable=len(_service().catalog.tech_skills),
    )


@bp.route("/validate/tech-skills", methods=["POST"])
def validate_tech_skills():
    skills = validate_skills_payload(request.get_json(silent=True))
    verdict = _service().validate_tech_skills(skills)
    message = "All tech skills are valid" if verdict["valid"] else "Some tech skills are not recognized"
    return success(message, verdict)


# ─────────────────────────────────────────────────────────────────────────────
# Aggregate and popularity
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/lookup/all", methods=["GET"])
@cache_control(POPULAR_MAX_AGE)
def all_lookup_data():
    return success("All lookup data retrieved successfully", _service().get_all_lookup_data())


_POPULAR = {
    "industries": ("get_popular_industries", "popular_industries_ranking", "Popular industries"),
    "tech-roles": ("get_popular_tech_roles", "popular_tech_roles_ranking", "Popular tech roles"),
    "tech-skills": ("get_popular_tech_skills", "popular_tech_skills_ranking", "Popular tech skills"),
    "universities": ("get_popular_universities", "popular_universities_ranking", "Popular universities"),
    "majors": ("get_popular_majors", "popular_majors_ranking", "Popular majors"),
    "preferred-industries": (
        "get_popular_preferred_industries",
        "popular_preferred_industries_ranking",
        "Popular preferred industries",
    ),
}


@bp.route("/popular/<kind>", methods=["GET"])
@cache_control(POPULAR_MAX_AGE)
def popular(kind):
    """Top-N reference items by profile references: GET /popular/<kind>?limit=..."""
    if kind not in _POPULAR:
        abort(404)
    method_name, ranking_name, label = _POPULAR[kind]
    service = _service()
    items = getattr(service, method_name)(_args().get("limit"))
    total = len(getattr(service, ranking_name)())
    return success(f"{label} retrieved successfully", items, totalAvailable=total)


# ─────────────────────────────────────────────────────────────────────────────
# Cache management
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/cache/clear", methods=["POST"])
@require_admin_key
def clear_cache():
    result = _service().clear_cache()
    return success("Lookup cache cleared successfully", result)


@bp.route("/cache/status", methods=["GET"])
def cache_status():
    return success("Cache status retrieved successfully", _service().get_cache_status())
