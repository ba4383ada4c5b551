"""Company profile endpoints (/api/companies)."""
from __future__ import annotations
import logging

from flask import Blueprint, request

from kada_connect.api.decorators import authorize
from kada_connect.api.helpers.profile_views import (
    apply_filters,
    contains_ci,
    paginate,
    present,
    present_many,
    repository,
    text_match,
)
from kada_connect.api.responses import success
from kada_connect.core.errors import AuthenticationError, NotFoundError
from kada_connect.core.validators import sanitize_params, validate_company_payload, validate_record_id

bp = Blueprint("companies", __name__)

logger = logging.getLogger(__name__)

RESOURCE = "companies"


def _get_or_404(raw_id) -> dict:
    company = repository().get_company(validate_record_id(raw_id))
    if company is None:
        raise NotFoundError("Company not found")
    return company


@bp.route("", methods=["GET"])
def list_companies():
    """List companies; filters: industry, tech_role, q (name/description)."""
    args = sanitize_params(request.args.to_dict())
    filters = []
    if args.get("industry"):
        filters.append(lambda c: contains_ci(c.get("industry_sector"), args["industry"]))
    if args.get("tech_role"):
        filters.append(lambda c: contains_ci(c.get("tech_roles_interest"), args["tech_role"]))
    if args.get("q"):
        filters.append(lambda c: text_match(c, ("company_name", "description"), args["q"]))

    companies = apply_filters(repository().list_companies(), filters)
    page, pagination = paginate(companies, args)
    return success("Companies retrieved successfully", present_many(page), pagination=pagination)


@bp.route("/<company_id>", methods=["GET"])
def get_company(company_id):
    return success("Company retrieved successfully", present(_get_or_404(company_id)))


@bp.route("", methods=["POST"])
def create_company():
    actor = authorize(RESOURCE, "create")
    # Non-admin companies are always owned by the caller
    if actor.role != "admin" and not actor.user_id:
        raise AuthenticationError("X-User-Id header is required to create a company profile")
    data = validate_company_payload(request.get_json(silent=True))
    owner_id = data.pop("owner_id", None) if actor.role == "admin" else None
    company = repository().create_company(data, owner_id=owner_id or actor.user_id)
    logger.info(f"Company {company['id']} created by role={actor.role} user={actor.user_id}")
    return success("Company created successfully", present(company), status=201)


@bp.route("/<company_id>", methods=["PUT"])
def update_company(company_id):
    existing = _get_or_404(company_id)
    actor = authorize(RESOURCE, "update", resource_user_id=existing.get("owner_id"))
    data = validate_company_payload(request.get_json(silent=True), partial=True)
    company = repository().update_company(existing["id"], data)
    if company is None:
        raise NotFoundError("Company not found")
    logger.info(f"Company {company['id']} updated by role={actor.role} user={actor.user_id}")
    return success("Company updated successfully", present(company))


@bp.route("/<company_id>", methods=["DELETE"])
def delete_company(company_id):
    existing = _get_or_404(company_id)
    actor = authorize(RESOURCE, "delete", resource_user_id=existing.get("owner_id"))
    if not repository().delete_company(existing["id"]):
        raise NotFoundError("Company not found")
    logger.info(f"Company {existing['id']} deleted by role={actor.role} user={actor.user_id}")
    return success("Company deleted successfully", None)
