"""Helpers shared by the company and student endpoints."""
from __future__ import annotations
from typing import Callable, Iterable, Optional

from flask import current_app

from kada_connect.core.matching import split_multi_value
from kada_connect.core.profiles import InMemoryProfileRepository
from kada_connect.core.url_helper import convert_image_urls_in_array, convert_image_urls_to_proxy
from kada_connect.core.validators import validate_limit, validate_page

DEFAULT_PAGE_SIZE = 20


def repository() -> InMemoryProfileRepository:
    return current_app.extensions["profile_repository"]


def _proxy_options() -> dict:
    cfg = current_app.config["APP_CONFIG"]
    return {
        "environment": cfg.environment,
        "base_urls": cfg.api_base_urls,
        "allowed_domains": cfg.proxy_allowed_domains,
    }


def present(record: Optional[dict]) -> Optional[dict]:
    """Record as returned to clients: image URLs routed through the proxy."""
    return convert_image_urls_to_proxy(record, **_proxy_options())


def present_many(records: list[dict]) -> list[dict]:
    return convert_image_urls_in_array(records, **_proxy_options())


def contains_ci(field_value, needle: str) -> bool:
    """Case-insensitive membership for scalar or multi-value fields."""
    needle = needle.lower()
    if isinstance(field_value, (list, tuple)):
        return any(value.lower() == needle for value in split_multi_value(field_value))
    return isinstance(field_value, str) and field_value.lower() == needle


def text_match(record: dict, fields: Iterable[str], query: str) -> bool:
    query = query.lower()
    return any(isinstance(record.get(name), str) and query in record[name].lower() for name in fields)


def apply_filters(records: list[dict], filters: list[Callable[[dict], bool]]) -> list[dict]:
    return [record for record in records if all(check(record) for check in filters)]


def paginate(records: list[dict], args: dict) -> tuple[list[dict], dict]:
    """Slice ``records`` by ``page``/``limit`` query parameters."""
    page = validate_page(args.get("page"))
    limit = validate_limit(args.get("limit"), DEFAULT_PAGE_SIZE)
    total = len(records)
    start = (page - 1) * limit
    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": (total + limit - 1) // limit,
    }
    return records[start:start + limit], pagination
