"""Student profile endpoints (/api/students, also served as /api/trainees)."""
from __future__ import annotations
import logging

from flask import Blueprint, request

from kada_connect.api.decorators import authorize, current_actor
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
from kada_connect.core.errors import NotFoundError, ValidationError
from kada_connect.core.profiles import EMPLOYMENT_STATUSES
from kada_connect.core.validators import sanitize_params, validate_record_id, validate_student_payload

bp = Blueprint("students", __name__)

logger = logging.getLogger(__name__)

RESOURCE = "students"


def _get_or_404(raw_id) -> dict:
    student = repository().get_student(validate_record_id(raw_id))
    if student is None:
        raise NotFoundError("Student not found")
    return student


@bp.route("", methods=["GET"])
def list_students():
    """List students.

    Filters: ``university``, ``major``, ``skill``, ``employment_status`` and
    ``q`` (substring of name or email).
    """
    args = sanitize_params(request.args.to_dict())
    filters = []
    if args.get("university"):
        filters.append(lambda s: contains_ci(s.get("university_institution"), args["university"]))
    if args.get("major"):
        filters.append(lambda s: contains_ci(s.get("program_major"), args["major"]))
    if args.get("skill"):
        filters.append(lambda s: contains_ci(s.get("tech_stack_skills"), args["skill"]))
    if args.get("employment_status"):
        if args["employment_status"] not in EMPLOYMENT_STATUSES:
            raise ValidationError(f"employment_status must be one of: {', '.join(EMPLOYMENT_STATUSES)}")
        filters.append(lambda s: s.get("employment_status") == args["employment_status"])
    if args.get("q"):
        filters.append(lambda s: text_match(s, ("full_name", "email"), args["q"]))

    students = apply_filters(repository().list_students(), filters)
    page, pagination = paginate(students, args)
    return success("Students retrieved successfully", present_many(page), pagination=pagination)


@bp.route("/<student_id>", methods=["GET"])
def get_student(student_id):
    return success("Student retrieved successfully", present(_get_or_404(student_id)))


@bp.route("", methods=["POST"])
def create_student():
    # Students may only create a profile owned by themselves
    requester = current_actor()
    actor = authorize(RESOURCE, "create", resource_user_id=requester.user_id if requester else None)
    data = validate_student_payload(request.get_json(silent=True))
    owner_id = data.pop("owner_id", None) if actor.role == "admin" else None
    student = repository().create_student(data, owner_id=owner_id or actor.user_id)
    logger.info(f"Student {student['id']} created by role={actor.role} user={actor.user_id}")
    return success("Student created successfully", present(student), status=201)


@bp.route("/<student_id>", methods=["PUT"])
def update_student(student_id):
    existing = _get_or_404(student_id)
    actor = authorize(RESOURCE, "update", resource_user_id=existing.get("owner_id"))
    data = validate_student_payload(request.get_json(silent=True), partial=True)
    student = repository().update_student(existing["id"], data)
    if student is None:
        raise NotFoundError("Student not found")
    logger.info(f"Student {student['id']} updated by role={actor.role} user={actor.user_id}")
    return success("Student updated successfully", present(student))


@bp.route("/<student_id>", methods=["DELETE"])
def delete_student(student_id):
    existing = _get_or_404(student_id)
    actor = authorize(RESOURCE, "delete", resource_user_id=existing.get("owner_id"))
    if not repository().delete_student(existing["id"]):
        raise NotFoundError("Student not found")
    logger.info(f"Student {existing['id']} deleted by role={actor.role} user={actor.user_id}")
    return success("Student deleted successfully", None)
