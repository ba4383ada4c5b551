"""Settings loader with environment variable, .env and Docker secrets integration."""
from __future__ import annotations
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from kada_connect.core.url_helper import DEFAULT_PROXY_DOMAINS


VALID_ENVIRONMENTS = {"development", "production"}


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read /run/secrets/{secret_name}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def _get_int(var_name: str, default: int, minimum: int = 1) -> int:
    """Read a positive integer from the environment."""
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {var_name} must be an integer (got {raw!r}).")
    if value < minimum:
        raise RuntimeError(f"Environment variable {var_name} must be >= {minimum}.")
    return value


def _get_bool(var_name: str, default: bool = False) -> bool:
    return os.environ.get(var_name, str(default)).strip().lower() in {"1", "true", "yes"}


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    environment: str

    # Admin
    admin_api_key: str

    # HTTP
    allowed_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])
    max_content_length_mb: int = 10

    # Image proxy
    api_base_urls: list[str] = field(default_factory=lambda: ["http://localhost:3001"])
    proxy_allowed_domains: list[str] = field(default_factory=lambda: list(DEFAULT_PROXY_DOMAINS))
    image_cache_max_entries: int = 1000
    image_cache_max_mb: int = 500

    # Rate limiting (per client IP)
    rate_limit_enabled: bool = True
    rate_limit_default: str = "100 per 15 minutes"
    rate_limit_storage_uri: str = "memory://"

    # Lookup
    lookup_cache_ttl_seconds: int = 300
    search_result_limit: int = 10
    lookup_warm_cache: bool = False

    # Profiles
    profile_seed_path: str = ""

    # Logging
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def max_content_length(self) -> int:
        """Request body limit in bytes."""
        return self.max_content_length_mb * 1024 * 1024

    @property
    def image_cache_max_bytes(self) -> int:
        return self.image_cache_max_mb * 1024 * 1024


def _resolve_environment() -> str:
    environment = os.environ.get("APP_ENV", "development").strip().lower() or "development"
    if environment not in VALID_ENVIRONMENTS:
        print(f"[settings] WARNING: Unknown APP_ENV={environment!r}; falling back to development")
        environment = "development"
    return environment


def _resolve_admin_key(environment: str) -> str:
    """Admin key from /run/secrets or ADMIN_API_KEY; generated in development."""
    admin_api_key = _load_secret_from_file("admin_api_key", "ADMIN_API_KEY")
    if admin_api_key:
        return admin_api_key

    if environment == "production":
        raise RuntimeError("ADMIN_API_KEY is required in production mode.")

    admin_api_key = secrets.token_urlsafe(32)
    os.environ["ADMIN_API_KEY"] = admin_api_key
    print("[settings] Generated temporary ADMIN_API_KEY for development")
    return admin_api_key


def load_settings(dotenv_path: Optional[str] = None) -> AppConfig:
    """Load application settings from .env, environment and /run/secrets."""
    load_dotenv(dotenv_path, override=False)

    environment = _resolve_environment()
    admin_api_key = _resolve_admin_key(environment)

    allowed_origins = _split_csv(os.environ.get("ALLOWED_ORIGINS", "http://localhost:3000"))

    # API_BASE_URLS takes precedence; API_BASE_URL is kept for single-host deployments
    api_base_urls = _split_csv(os.environ.get("API_BASE_URLS", ""))
    if not api_base_urls:
        api_base_urls = _split_csv(os.environ.get("API_BASE_URL", "http://localhost:3001"))

    proxy_allowed_domains = [
        domain.lower()
        for domain in _split_csv(os.environ.get("PROXY_ALLOWED_DOMAINS", ",".join(DEFAULT_PROXY_DOMAINS)))
    ] or list(DEFAULT_PROXY_DOMAINS)

    config = AppConfig(
        environment=environment,
        admin_api_key=admin_api_key,
        allowed_origins=allowed_origins,
        max_content_length_mb=_get_int("MAX_CONTENT_LENGTH_MB", 10),
        api_base_urls=api_base_urls,
        proxy_allowed_domains=proxy_allowed_domains,
        image_cache_max_entries=_get_int("IMAGE_CACHE_MAX_ENTRIES", 1000),
        image_cache_max_mb=_get_int("IMAGE_CACHE_MAX_MB", 500),
        rate_limit_enabled=_get_bool("RATE_LIMIT_ENABLED", True),
        rate_limit_default=os.environ.get("RATE_LIMIT_DEFAULT", "100 per 15 minutes").strip() or "100 per 15 minutes",
        rate_limit_storage_uri=os.environ.get("RATE_LIMIT_STORAGE_URI", "memory://").strip() or "memory://",
        lookup_cache_ttl_seconds=_get_int("LOOKUP_CACHE_TTL_SECONDS", 300),
        search_result_limit=_get_int("SEARCH_RESULT_LIMIT", 10),
        lookup_warm_cache=_get_bool("LOOKUP_WARM_CACHE"),
        profile_seed_path=os.environ.get("PROFILE_SEED_PATH", "").strip(),
        log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )

    print(
        f"[settings] Mode={environment.upper()}; origins={','.join(allowed_origins)}; "
        f"cache_ttl={config.lookup_cache_ttl_seconds}s"
    )
    return config
