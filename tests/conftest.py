"""Pytest shared fixtures for the KADA Connect API."""
import os
import pathlib
import sys

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ["APP_ENV"] = "development"
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.pop("PROFILE_SEED_PATH", None)
os.environ.pop("LOOKUP_WARM_CACHE", None)

import pytest
import requests

from kada_connect.config.settings import AppConfig
from kada_connect.core.profiles import InMemoryProfileRepository
from kada_connect.flask_app import create_app

ADMIN_KEY = "test-admin-key"


def make_config(**overrides) -> AppConfig:
    base = dict(
        environment="development",
        admin_api_key=ADMIN_KEY,
        allowed_origins=["http://localhost:3000"],
        api_base_urls=["http://localhost:3001", "https://api.kada.example"],
        lookup_cache_ttl_seconds=300,
        search_result_limit=10,
    )
    base.update(overrides)
    return AppConfig(**base)


SEED_COMPANIES = [
    {
        "id": 1,
        "company_name": "Acme Finance",
        "industry_sector": ["Fintech", "Banking"],
        "tech_roles_interest": ["Backend Developer", "Data Engineer"],
        "contact_email": "hr@acme.example",
        "logo": "https://drive.google.com/uc?id=acme-logo",
        "owner_id": "company-1",
    },
    {
        "id": 2,
        "company_name": "Beta Pay",
        "industry_sector": "Fintech",
        "tech_roles_interest": ["backend developer"],
        "logo": "https://example.com/beta.png",
        "owner_id": "company-2",
    },
    {
        "id": 3,
        "company_name": "Gamma Learn",
        "industry_sector": ["Education"],
        "tech_roles_interest": ["Frontend Developer"],
        "owner_id": "company-3",
    },
]

SEED_STUDENTS = [
    {
        "id": 1,
        "full_name": "Ana Putri",
        "email": "ana@example.com",
        "university_institution": "Universitas Indonesia",
        "program_major": "Computer Science",
        "tech_stack_skills": ["Python", "React"],
        "preferred_industry": ["Education", "Fintech"],
        "employment_status": "Open to work",
        "profile_photo": "https://lh3.googleusercontent.com/ana",
        "owner_id": "student-1",
    },
    {
        "id": 2,
        "full_name": "Budi Santoso",
        "email": "budi@example.com",
        "university_institution": "universitas indonesia",
        "program_major": "Informatics",
        "tech_stack_skills": "python, Docker",
        "preferred_industry": "fintech, Banking",
        "employment_status": "Open to work",
        "owner_id": "student-2",
    },
    {
        "id": 3,
        "full_name": "Citra Lestari",
        "email": "citra@example.com",
        "university_institution": "Institut Teknologi Bandung",
        "program_major": "Computer Science",
        "tech_stack_skills": ["Python", "Go"],
        "preferred_industry": ["Gaming"],
        "employment_status": "Employed",
        "owner_id": "student-3",
    },
]


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_outbound_http(monkeypatch):
    """Tests must stub requests.get explicitly; nothing reaches the network."""

    def _stub_get(url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP GET in unit test: {url}")

    monkeypatch.setattr(requests, "get", _stub_get)


# ─────────────────────────────────────────────────────────────────────────────
# Application fixtures
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def profiles():
    return InMemoryProfileRepository(SEED_COMPANIES, SEED_STUDENTS)


@pytest.fixture()
def config():
    return make_config()


@pytest.fixture()
def flask_app(config, profiles):
    app = create_app(config=config, profiles=profiles)
    app.config.update(TESTING=True)
    return app


@pytest.fixture()
def client(flask_app):
    with flask_app.test_client() as client:
        yield client


@pytest.fixture()
def admin_headers():
    return {"X-Admin-Key": ADMIN_KEY}


@pytest.fixture()
def actor_headers():
    """Build the gateway identity headers for a role (and optional user id)."""

    def _build(role: str, user_id: str = None) -> dict:
        headers = {"X-User-Role": role}
        if user_id:
            headers["X-User-Id"] = user_id
        return headers

    return _build


@pytest.fixture()
def app_factory(profiles):
    """Build an app from config overrides; the seeded repository unless ``profiles=None`` is passed."""

    def _build(profiles_override=profiles, **overrides):
        return create_app(config=make_config(**overrides), profiles=profiles_override)

    return _build
