"""Input validation helpers for query parameters and profile payloads.

All helpers raise ValidationError (HTTP 400) with a client-facing message.
"""
from __future__ import annotations
from typing import Optional

from kada_connect.core.errors import ValidationError
from kada_connect.core.profiles import EMPLOYMENT_STATUSES

MAX_QUERY_LENGTH = 100
MAX_LIMIT = 100
MAX_SKILLS_PER_REQUEST = 100


def sanitize_params(params) -> dict:
    """Trim every string value of a query/body mapping."""
    return {
        key: value.strip() if isinstance(value, str) else value
        for key, value in (params or {}).items()
    }


def validate_search_query(raw) -> str:
    """Validate a search query.

    Args:
        raw: Raw ``q`` parameter

    Returns:
        Trimmed query

    Raises:
        ValidationError: If query is missing, blank, or too long
    """
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("Search query is required and must be a non-empty string")
    query = raw.strip()
    if len(query) > MAX_QUERY_LENGTH:
        raise ValidationError(f"Search query must be {MAX_QUERY_LENGTH} characters or less")
    return query


def validate_optional_query(raw) -> Optional[str]:
    """Like validate_search_query, but blank/missing means no query."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    return validate_search_query(raw)


def validate_limit(raw, default: int, maximum: int = MAX_LIMIT) -> int:
    """Parse a positive ``limit`` parameter bounded by ``maximum``."""
    if raw is None or raw == "":
        return default
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Limit must be a positive integer between 1 and {maximum}")
    if limit < 1 or limit > maximum:
        raise ValidationError(f"Limit must be a positive integer between 1 and {maximum}")
    return limit


def validate_page(raw) -> int:
    if raw is None or raw == "":
        return 1
    try:
        page = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Page must be a positive integer")
    if page < 1:
        raise ValidationError("Page must be a positive integer")
    return page


def validate_category(raw) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("Category parameter is required")
    return raw.strip()


def validate_skills_payload(payload) -> list:
    """Validate the body of POST /validate/tech-skills.

    Only the container is checked here; individual entries are judged by the
    lookup service and never fail the request.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object with a 'skills' array")
    skills = payload.get("skills")
    if not isinstance(skills, list):
        raise ValidationError("'skills' must be an array of strings")
    if len(skills) > MAX_SKILLS_PER_REQUEST:
        raise ValidationError(f"'skills' must contain at most {MAX_SKILLS_PER_REQUEST} entries")
    return skills


def validate_email(email: str) -> str:
    """Validate email address.

    Args:
        email: Email address to validate

    Returns:
        Normalized email address

    Raises:
        ValidationError: If email is invalid
    """
    if not isinstance(email, str):
        raise ValidationError("Invalid email format")
    email = email.strip().lower()
    if not email or "@" not in email:
        raise ValidationError("Invalid email format")

    local, domain = email.rsplit("@", 1)
    if not local or not domain or "." not in domain:
        raise ValidationError("Invalid email format")
    if len(email) > 254:
        raise ValidationError("Email exceeds maximum length")

    return email


def validate_name(name, field: str) -> str:
    """Validate display-name fields (company name, student name).

    Args:
        name: Name to validate
        field: Field name for error messages (e.g., "Company name")

    Returns:
        Trimmed name

    Raises:
        ValidationError: If name is invalid
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"{field} is required")
    name = name.strip()
    if len(name) > 128:
        raise ValidationError(f"{field} exceeds maximum length")

    # Prevent markup/script injection in rendered profiles
    if any(char in name for char in "<>\"`;&|$"):
        raise ValidationError(f"{field} contains invalid characters")

    return name


def validate_record_id(raw) -> int:
    try:
        record_id = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Valid ID is required")
    if record_id < 1:
        raise ValidationError("Valid ID is required")
    return record_id


def _validate_multi_value(payload: dict, field: str) -> None:
    value = payload.get(field)
    if value is None or isinstance(value, str):
        return
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError(f"'{field}' must be a string or an array of strings")


def validate_company_payload(payload, partial: bool = False) -> dict:
    """Validate a company create (or partial update) body."""
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    data = {key: value for key, value in payload.items() if key != "id"}
    if not partial or "company_name" in data:
        data["company_name"] = validate_name(data.get("company_name"), "Company name")
    if data.get("contact_email"):
        data["contact_email"] = validate_email(data["contact_email"])
    for field in ("industry_sector", "tech_roles_interest"):
        _validate_multi_value(data, field)
    return data


def validate_student_payload(payload, partial: bool = False) -> dict:
    """Validate a student create (or partial update) body."""
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    data = {key: value for key, value in payload.items() if key != "id"}
    if not partial or "full_name" in data:
        data["full_name"] = validate_name(data.get("full_name"), "Full name")
    if data.get("email"):
        data["email"] = validate_email(data["email"])
    if "employment_status" in data and data["employment_status"] not in EMPLOYMENT_STATUSES:
        raise ValidationError(
            f"employment_status must be one of: {', '.join(EMPLOYMENT_STATUSES)}"
        )
    _validate_multi_value(data, "tech_stack_skills")
    _validate_multi_value(data, "preferred_industry")
    return data
