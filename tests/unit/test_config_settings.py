import pytest

from kada_connect.config import settings
from kada_connect.core.url_helper import DEFAULT_PROXY_DOMAINS


@pytest.fixture()
def clean_env(monkeypatch, tmp_path):
    """Environment without any KADA variables and an empty /run/secrets."""
    for name in (
        "APP_ENV",
        "ADMIN_API_KEY",
        "ALLOWED_ORIGINS",
        "API_BASE_URLS",
        "API_BASE_URL",
        "PROXY_ALLOWED_DOMAINS",
        "LOOKUP_CACHE_TTL_SECONDS",
        "SEARCH_RESULT_LIMIT",
        "LOOKUP_WARM_CACHE",
        "PROFILE_SEED_PATH",
        "LOG_LEVEL",
        "MAX_CONTENT_LENGTH_MB",
        "IMAGE_CACHE_MAX_ENTRIES",
        "IMAGE_CACHE_MAX_MB",
        "RATE_LIMIT_ENABLED",
        "RATE_LIMIT_DEFAULT",
        "RATE_LIMIT_STORAGE_URI",
    ):
        monkeypatch.delenv(name, raising=False)

    real_path = settings.Path

    def fake_path(target):
        if str(target) == "/run/secrets":
            return tmp_path
        return real_path(target)

    monkeypatch.setattr(settings, "Path", fake_path)
    monkeypatch.setattr(settings, "load_dotenv", lambda *args, **kwargs: False)
    return tmp_path


def test_defaults(clean_env):
    cfg = settings.load_settings()

    assert cfg.environment == "development"
    assert cfg.admin_api_key  # generated
    assert cfg.allowed_origins == ["http://localhost:3000"]
    assert cfg.api_base_urls == ["http://localhost:3001"]
    assert cfg.proxy_allowed_domains == list(DEFAULT_PROXY_DOMAINS)
    assert cfg.lookup_cache_ttl_seconds == 300
    assert cfg.search_result_limit == 10
    assert cfg.lookup_warm_cache is False
    assert cfg.max_content_length == 10 * 1024 * 1024
    assert cfg.image_cache_max_entries == 1000
    assert cfg.image_cache_max_bytes == 500 * 1024 * 1024
    assert cfg.rate_limit_enabled is True
    assert cfg.rate_limit_default == "100 per 15 minutes"
    assert cfg.rate_limit_storage_uri == "memory://"


def test_environment_overrides(clean_env, monkeypatch):
    monkeypatch.setenv("ADMIN_API_KEY", "from-env")
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("API_BASE_URLS", "http://localhost:3001,https://api.kada.example")
    monkeypatch.setenv("PROXY_ALLOWED_DOMAINS", "CDN.Example.com")
    monkeypatch.setenv("LOOKUP_CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("LOOKUP_WARM_CACHE", "true")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    cfg = settings.load_settings()

    assert cfg.admin_api_key == "from-env"
    assert cfg.allowed_origins == ["https://a.example", "https://b.example"]
    assert cfg.api_base_urls == ["http://localhost:3001", "https://api.kada.example"]
    assert cfg.proxy_allowed_domains == ["cdn.example.com"]
    assert cfg.lookup_cache_ttl_seconds == 60
    assert cfg.lookup_warm_cache is True
    assert cfg.log_level == "DEBUG"


def test_single_api_base_url_fallback(clean_env, monkeypatch):
    monkeypatch.setenv("API_BASE_URL", "https://api.kada.example")
    assert settings.load_settings().api_base_urls == ["https://api.kada.example"]


def test_admin_key_reads_from_run_secrets(clean_env, monkeypatch):
    (clean_env / "admin_api_key").write_text("file-secret\n")
    monkeypatch.setenv("ADMIN_API_KEY", "env-secret")

    assert settings.load_settings().admin_api_key == "file-secret"


def test_production_requires_admin_key(clean_env, monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    with pytest.raises(RuntimeError, match="ADMIN_API_KEY is required"):
        settings.load_settings()


def test_unknown_environment_falls_back_to_development(clean_env, monkeypatch):
    monkeypatch.setenv("APP_ENV", "staging")
    assert settings.load_settings().environment == "development"


@pytest.mark.parametrize("value", ["abc", "0", "-5"])
def test_invalid_integers_fail_startup(clean_env, monkeypatch, value):
    monkeypatch.setenv("LOOKUP_CACHE_TTL_SECONDS", value)
    with pytest.raises(RuntimeError, match="LOOKUP_CACHE_TTL_SECONDS"):
        settings.load_settings()


def test_image_cache_and_rate_limit_overrides(clean_env, monkeypatch):
    monkeypatch.setenv("IMAGE_CACHE_MAX_ENTRIES", "50")
    monkeypatch.setenv("IMAGE_CACHE_MAX_MB", "64")
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
    monkeypatch.setenv("RATE_LIMIT_DEFAULT", "20 per minute")

    cfg = settings.load_settings()

    assert cfg.image_cache_max_entries == 50
    assert cfg.image_cache_max_bytes == 64 * 1024 * 1024
    assert cfg.rate_limit_enabled is False
    assert cfg.rate_limit_default == "20 per minute"
