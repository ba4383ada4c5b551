"""Image proxy endpoint (/api/proxy/image).

Fetches images from allow-listed hosts on behalf of browsers that cannot load
them cross-origin, and keeps successful fetches in an in-memory cache keyed by
the source URL. The cache is bounded in entries and bytes (see ImageCache);
its counters are exposed at /api/proxy/cache/stats.
"""
from __future__ import annotations
import hashlib
import logging
from datetime import datetime, timezone
from urllib.parse import urlsplit

import requests
from flask import Blueprint, Response, current_app, g, request

from kada_connect.api.decorators import require_admin_key
from kada_connect.api.responses import success
from kada_connect.core.cache import ImageCache
from kada_connect.core.errors import (
    ForbiddenError,
    NotFoundError,
    UnsupportedMediaError,
    UpstreamError,
    ValidationError,
)
from kada_connect.core.url_helper import is_allowed_host

bp = Blueprint("proxy", __name__)

logger = logging.getLogger(__name__)

IMAGE_CACHE_TTL_SECONDS = 60 * 60
MAX_IMAGE_BYTES = 10 * 1024 * 1024
MAX_URL_LENGTH = 2048
REQUEST_TIMEOUT = 10
CHUNK_SIZE = 64 * 1024

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
}

UPSTREAM_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; KadaConnectImageProxy/1.0)",
    "Accept": "image/*,*/*;q=0.8",
}


def _image_cache() -> ImageCache:
    return current_app.extensions["image_cache"]


def _validate_image_url(raw) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("URL parameter is required and must be a valid string")
    url = raw.strip()
    if len(url) > MAX_URL_LENGTH:
        raise ValidationError(f"URL length exceeds maximum allowed size of {MAX_URL_LENGTH} characters")
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        raise ValidationError("Invalid URL format")
    if parts.scheme not in ("http", "https") or not hostname:
        raise ValidationError("Only HTTP and HTTPS URLs are allowed")

    allowed = current_app.config["APP_CONFIG"].proxy_allowed_domains
    if not is_allowed_host(hostname, allowed):
        logger.info(f"Proxy refused host {hostname} | request_id={g.get('request_id', 'none')}")
        raise ForbiddenError(
            f"Domain {hostname.lower()} not allowed for proxying. Allowed domains: {', '.join(allowed)}"
        )
    return url


def _fetch_image(url: str) -> dict:
    """Download ``url`` and return ``{data, content_type, etag}``."""
    try:
        response = requests.get(url, headers=UPSTREAM_HEADERS, timeout=REQUEST_TIMEOUT, stream=True)
    except requests.RequestException as exc:
        logger.warning(f"Image fetch failed for {url}: {exc}")
        raise UpstreamError("Unable to reach the external image server", status=502) from exc

    try:
        if response.status_code == 404:
            raise NotFoundError("Image not found at the specified URL")
        if response.status_code >= 400:
            logger.warning(f"Image host answered {response.status_code} for {url}")
            raise UpstreamError(f"External server responded with status {response.status_code}", status=502)

        content_type = (response.headers.get("Content-Type") or "").split(";")[0].strip().lower()
        if content_type not in ALLOWED_MIME_TYPES:
            raise UnsupportedMediaError(
                f"URL does not point to a valid image. Allowed types: {', '.join(sorted(ALLOWED_MIME_TYPES))}"
            )

        declared = response.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > MAX_IMAGE_BYTES:
            raise ValidationError(f"File size exceeds maximum allowed size of {MAX_IMAGE_BYTES // (1024 * 1024)}MB")

        body = bytearray()
        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                body.extend(chunk)
                if len(body) > MAX_IMAGE_BYTES:
                    raise ValidationError(
                        f"File size exceeds maximum allowed size of {MAX_IMAGE_BYTES // (1024 * 1024)}MB"
                    )
        except requests.RequestException as exc:
            logger.warning(f"Image download interrupted for {url}: {exc}")
            raise UpstreamError("Unable to reach the external image server", status=502) from exc
    finally:
        response.close()

    data = bytes(body)
    return {
        "data": data,
        "content_type": content_type,
        "etag": f'"{hashlib.sha256(data).hexdigest()[:32]}"',
    }


def _image_response(image: dict, cache_state: str) -> Response:
    response = Response(image["data"], status=200, mimetype=image["content_type"])
    response.headers["Cache-Control"] = f"public, max-age={IMAGE_CACHE_TTL_SECONDS}"
    response.headers["ETag"] = image["etag"]
    response.headers["X-Proxy-Cache"] = cache_state
    response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"
    return response


@bp.route("/image", methods=["GET"])
def proxy_image():
    """GET /api/proxy/image?url=<encoded image URL>"""
    url = _validate_image_url(request.args.get("url"))
    cache = _image_cache()

    image = cache.get(url)
    if image is not None:
        if request.headers.get("If-None-Match") == image["etag"]:
            return Response(status=304, headers={"ETag": image["etag"]})
        logger.debug("Image cache hit: %s", url)
        return _image_response(image, "HIT")

    logger.info(f"Proxying image {url} | request_id={g.get('request_id', 'none')} | client_ip={request.remote_addr}")
    image = _fetch_image(url)
    cache.set(url, image)
    return _image_response(image, "MISS")


@bp.route("/cache/stats", methods=["GET"])
def cache_stats():
    """Hit rate and utilization of the image cache."""
    stats = _image_cache().stats()
    return success(
        "Image cache statistics retrieved successfully",
        {"image": stats, "timestamp": datetime.now(timezone.utc).isoformat()},
    )


@bp.route("/cache/clear", methods=["POST"])
@require_admin_key
def clear_cache():
    cache = _image_cache()
    before = {"keys": len(cache), "size": cache.bytes_held}
    dropped = cache.clear()
    logger.info(f"Image cache cleared ({dropped} entries) | request_id={g.get('request_id', 'none')}")
    return success(
        "Image cache cleared successfully",
        {"cleared": dropped, "before": before, "after": {"keys": len(cache), "size": cache.bytes_held}},
    )
