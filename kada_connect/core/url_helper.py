"""Image URL helpers that route external images through the API's proxy endpoint.

Browsers refuse some cross-origin image hosts (Google Drive in particular), so
profile image URLs on allow-listed hosts are rewritten to
``<base>/api/proxy/image?url=<encoded original>``.
"""
from __future__ import annotations
import logging
from typing import Iterable, Optional, Sequence
from urllib.parse import quote, urlsplit

logger = logging.getLogger(__name__)

PROXY_PATH = "/api/proxy/image"

DEFAULT_PROXY_DOMAINS = (
    "drive.google.com",
    "lh3.googleusercontent.com",
    "cdn.pixabay.com",
    "images.unsplash.com",
    "images.pexels.com",
)

DEFAULT_IMAGE_FIELDS = ("logo", "profile_photo")

LOOPBACK_HOSTS = {"localhost", "127.0.0.1", "::1"}


def is_allowed_host(hostname: Optional[str], allowed_domains: Iterable[str] = DEFAULT_PROXY_DOMAINS) -> bool:
    """A host matches an allow-list entry exactly or as a subdomain of it."""
    if not hostname:
        return False
    host = hostname.lower().rstrip(".")
    return any(host == domain or host.endswith("." + domain) for domain in allowed_domains)


def _is_loopback(url: str) -> bool:
    try:
        return (urlsplit(url).hostname or "").lower() in LOOPBACK_HOSTS
    except ValueError:
        return False


def select_base_url(environment: str, base_urls: Sequence[str]) -> str:
    """Pick the API base URL for proxy links.

    Development prefers a loopback URL (falling back to the first candidate);
    production prefers a public URL (falling back to the last candidate).
    """
    candidates = [url.rstrip("/") for url in base_urls if url and url.strip()]
    if not candidates:
        return ""
    if environment == "production":
        return next((url for url in candidates if not _is_loopback(url)), candidates[-1])
    return next((url for url in candidates if _is_loopback(url)), candidates[0])


def convert_to_proxy_url(
    image_url,
    base_url: Optional[str] = None,
    *,
    environment: str = "development",
    base_urls: Sequence[str] = (),
    allowed_domains: Iterable[str] = DEFAULT_PROXY_DOMAINS,
):
    """Rewrite an allow-listed external image URL to a proxy URL.

    Empty, relative, non-HTTP, already-proxied, non-allow-listed and
    unparsable URLs are returned unchanged.
    """
    if not isinstance(image_url, str) or not image_url.strip():
        return image_url

    if PROXY_PATH in image_url:
        return image_url

    if image_url.startswith("/") or not image_url.lower().startswith(("http://", "https://")):
        return image_url

    try:
        hostname = urlsplit(image_url).hostname
    except ValueError as exc:
        logger.warning("Could not parse image URL %r: %s", image_url, exc)
        return image_url

    if not is_allowed_host(hostname, allowed_domains):
        return image_url

    if base_url is None:
        base_url = select_base_url(environment, base_urls)

    return f"{base_url.rstrip('/')}{PROXY_PATH}?url={quote(image_url, safe='')}"


def convert_image_urls_to_proxy(record, fields: Sequence[str] = DEFAULT_IMAGE_FIELDS, **options):
    """Return a copy of ``record`` with its image fields rewritten."""
    if not isinstance(record, dict):
        return record
    converted = dict(record)
    for field in fields:
        if isinstance(converted.get(field), str):
            converted[field] = convert_to_proxy_url(converted[field], **options)
    return converted


def convert_image_urls_in_array(records, fields: Sequence[str] = DEFAULT_IMAGE_FIELDS, **options):
    if not isinstance(records, list):
        return records
    return [convert_image_urls_to_proxy(record, fields, **options) for record in records]
