"""HTTP tests for the lookup endpoints under /api."""
import pytest


@pytest.mark.parametrize(
    "path, first_item",
    [
        ("/api/industries", "Information Technology"),
        ("/api/universities", "Universitas Indonesia"),
        ("/api/majors", "Computer Science"),
        ("/api/tech-skills", "JavaScript"),
        ("/api/tech-role-categories", "Frontend"),
    ],
)
def test_list_endpoints_use_envelope(client, path, first_item):
    response = client.get(path)
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["data"][0] == first_item
    assert payload["count"] == len(payload["data"])
    assert "max-age=7200" in response.headers["Cache-Control"]


def test_tech_roles_list(client):
    payload = client.get("/api/tech-roles").get_json()
    assert payload["data"][0] == {"name": "Frontend Developer", "category": "Frontend"}


def test_tech_roles_by_category_accepts_slash(client):
    payload = client.get("/api/tech-roles/category/ai/ml").get_json()
    assert [role["name"] for role in payload["data"]] == ["Machine Learning Engineer", "AI Engineer"]


def test_search_endpoint(client):
    response = client.get("/api/search/industries?q=fin")
    payload = response.get_json()
    assert response.status_code == 200
    assert payload["data"] == ["Financial Services", "Fintech"]
    assert payload["query"] == "fin"
    assert "max-age=600" in response.headers["Cache-Control"]


def test_search_tech_roles(client):
    payload = client.get("/api/search/tech-roles?q=Data%20Engineer").get_json()
    assert payload["data"][0] == {"name": "Data Engineer", "category": "Data"}


def test_search_without_query_is_400(client):
    response = client.get("/api/search/majors?q=%20%20")
    assert response.status_code == 400
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["message"] == "Search query is required and must be a non-empty string"
    assert payload["data"] is None
    assert "ValidationError" in payload["stack"]
    assert "Cache-Control" not in response.headers


def test_search_unknown_kind_is_404(client):
    response = client.get("/api/search/planets?q=mars")
    assert response.status_code == 404
    assert response.get_json()["message"] == "Not Found - /api/search/planets"


def test_suggestions(client):
    payload = client.get("/api/suggestions/tech-skills?q=java").get_json()
    assert payload["data"] == ["Java", "JavaScript"]
    assert payload["totalAvailable"] > 50


def test_suggestions_default_to_seed_list(client):
    payload = client.get("/api/suggestions/tech-skills?limit=2").get_json()
    assert payload["data"] == ["JavaScript", "Python"]


def test_suggestions_bad_limit(client):
    assert client.get("/api/suggestions/tech-skills?limit=abc").status_code == 400


def test_validate_tech_skills(client):
    response = client.post("/api/validate/tech-skills", json={"skills": ["react", "Klingon"]})
    payload = response.get_json()
    assert response.status_code == 200
    assert payload["message"] == "Some tech skills are not recognized"
    assert payload["data"]["recognized"] == ["React"]
    assert payload["data"]["unrecognized"] == ["Klingon"]


def test_validate_tech_skills_all_valid(client):
    payload = client.post("/api/validate/tech-skills", json={"skills": ["Python"]}).get_json()
    assert payload["message"] == "All tech skills are valid"
    assert payload["data"]["valid"] is True


@pytest.mark.parametrize("body", [{"skills": "Python"}, {"other": []}, ["Python"]])
def test_validate_tech_skills_rejects_bad_body(client, body):
    assert client.post("/api/validate/tech-skills", json=body).status_code == 400


def test_popular_industries(client):
    response = client.get("/api/popular/industries?limit=2")
    payload = response.get_json()
    assert payload["data"] == [{"name": "Fintech", "count": 2}, {"name": "Banking", "count": 1}]
    assert payload["totalAvailable"] == 3
    assert "max-age=300" in response.headers["Cache-Control"]


def test_popular_tech_skills_default_limit(client):
    payload = client.get("/api/popular/tech-skills").get_json()
    assert payload["data"][0] == {"name": "Python", "count": 2}


def test_popular_preferred_industries(client):
    response = client.get("/api/popular/preferred-industries")
    payload = response.get_json()
    assert response.status_code == 200
    assert payload["message"] == "Popular preferred industries retrieved successfully"
    # Employed students are not counted
    assert payload["data"] == [
        {"name": "Fintech", "count": 2},
        {"name": "Banking", "count": 1},
        {"name": "Education", "count": 1},
    ]
    assert payload["totalAvailable"] == 3


def test_popular_preferred_industries_limit(client):
    payload = client.get("/api/popular/preferred-industries?limit=1").get_json()
    assert payload["data"] == [{"name": "Fintech", "count": 2}]
    assert payload["totalAvailable"] == 3


def test_popular_unknown_kind_is_404(client):
    assert client.get("/api/popular/planets").status_code == 404


def test_popular_invalid_limit(client):
    assert client.get("/api/popular/majors?limit=0").status_code == 400


def test_lookup_all(client):
    payload = client.get("/api/lookup/all").get_json()
    data = payload["data"]
    assert payload["success"] is True
    assert data["popular"]["universities"] == [{"name": "Universitas Indonesia", "count": 2}]
    assert data["popular"]["preferredIndustries"][0] == {"name": "Fintech", "count": 2}
    assert "Fintech" in data["industries"]


def test_profile_store_failure_is_500_envelope(client, flask_app):
    def broken():
        raise ConnectionError("database offline")

    flask_app.extensions["lookup_service"].profiles.list_companies = broken
    response = client.get("/api/popular/industries")
    payload = response.get_json()

    assert response.status_code == 500
    assert payload["success"] is False
    assert payload["message"] == "Failed to retrieve profile data for popular industries"
    assert "stack" in payload


# ─────────────────────────────────────────────────────────────────────────────
# Cache management
# ─────────────────────────────────────────────────────────────────────────────
def test_cache_status(client):
    client.get("/api/popular/industries")
    payload = client.get("/api/cache/status").get_json()
    assert payload["data"]["totalKeys"] == 1
    assert payload["data"]["keys"]["popular-industries"]["isValid"] is True


def test_cache_clear_requires_admin_key(client, flask_app):
    client.get("/api/popular/industries")

    response = client.post("/api/cache/clear")
    assert response.status_code == 401
    assert response.get_json()["message"] == "Admin access required"
    assert len(flask_app.extensions["lookup_service"].cache) == 1


def test_cache_clear_rejects_wrong_key(client, flask_app):
    client.get("/api/popular/industries")

    response = client.post("/api/cache/clear", headers={"X-Admin-Key": "wrong"})
    assert response.status_code == 403
    assert len(flask_app.extensions["lookup_service"].cache) == 1


def test_cache_clear_with_admin_key(client, flask_app, admin_headers):
    client.get("/api/popular/industries")
    client.get("/api/popular/majors")

    response = client.post("/api/cache/clear", headers=admin_headers)
    payload = response.get_json()
    assert response.status_code == 200
    assert payload["message"] == "Lookup cache cleared successfully"
    assert payload["data"] == {"cleared": 2}
    assert len(flask_app.extensions["lookup_service"].cache) == 0


def test_popular_reflects_new_profiles_only_after_clear(client, profiles, admin_headers):
    client.get("/api/popular/industries")
    profiles.create_company({"company_name": "Delta", "industry_sector": ["Gaming"]})

    stale = client.get("/api/popular/industries").get_json()["data"]
    assert {"name": "Gaming", "count": 1} not in stale

    client.post("/api/cache/clear", headers=admin_headers)
    fresh = client.get("/api/popular/industries").get_json()["data"]
    assert {"name": "Gaming", "count": 1} in fresh


def test_cache_status_empty_after_clear_then_repopulates(client, admin_headers):
    client.get("/api/popular/industries")
    client.get("/api/popular/preferred-industries")
    assert client.get("/api/cache/status").get_json()["data"]["totalKeys"] == 2

    client.post("/api/cache/clear", headers=admin_headers)
    status = client.get("/api/cache/status").get_json()["data"]
    assert status["totalKeys"] == 0
    assert status["keys"] == {}

    client.get("/api/popular/industries")
    status = client.get("/api/cache/status").get_json()["data"]
    assert status["totalKeys"] == 1
    assert status["keys"]["popular-industries"]["isValid"] is True
