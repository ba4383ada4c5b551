import json


def test_request_id_echoed_from_correlation_header(client):
    response = client.get("/health", headers={"X-Correlation-Id": "abc-123"})
    assert response.headers["X-Request-Id"] == "abc-123"


def test_request_id_generated_when_absent(client):
    request_id = client.get("/health").headers["X-Request-Id"]
    assert len(request_id) == 32


def test_security_headers_present(client):
    response = client.get("/api/industries")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_cors_allows_configured_origin(client):
    response = client.get("/api/industries", headers={"Origin": "http://localhost:3000"})
    assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"


def test_cors_ignores_unknown_origin(client):
    response = client.get("/api/industries", headers={"Origin": "https://evil.example"})
    assert "Access-Control-Allow-Origin" not in response.headers


def test_cors_preflight_allows_identity_headers(client):
    response = client.options(
        "/api/companies",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-User-Role, X-User-Id",
        },
    )
    allowed = response.headers["Access-Control-Allow-Headers"].lower()
    assert "x-user-role" in allowed
    assert "x-user-id" in allowed


def test_body_size_limit(app_factory):
    app = app_factory(max_content_length_mb=1)
    with app.test_client() as client:
        response = client.post(
            "/api/validate/tech-skills",
            data=b"x" * (2 * 1024 * 1024),
            content_type="application/json",
        )
    assert response.status_code == 413


def test_seed_file_loaded_when_configured(app_factory, tmp_path):
    seed = tmp_path / "seed.json"
    seed.write_text(json.dumps({"companies": [{"company_name": "Seeded Co", "industry_sector": ["Retail"]}]}))

    app = app_factory(profiles_override=None, profile_seed_path=str(seed))
    with app.test_client() as client:
        payload = client.get("/api/popular/industries").get_json()
    assert payload["data"] == [{"name": "Retail", "count": 1}]


def test_warm_cache_at_startup(app_factory):
    app = app_factory(lookup_warm_cache=True)
    with app.test_client() as client:
        status = client.get("/api/cache/status").get_json()["data"]
    assert status["warmed"] is True
    assert status["totalKeys"] == 7


def test_configured_search_limit(app_factory):
    app = app_factory(search_result_limit=3)
    with app.test_client() as client:
        payload = client.get("/api/search/universities?q=universitas").get_json()
    assert payload["count"] == 3


def test_rate_limit_returns_429_envelope(app_factory):
    app = app_factory(rate_limit_default="2 per minute")
    with app.test_client() as client:
        assert client.get("/api/industries").status_code == 200
        assert client.get("/api/industries").status_code == 200
        response = client.get("/api/industries")
        # Counters are kept per route
        assert client.get("/api/majors").status_code == 200

    payload = response.get_json()
    assert response.status_code == 429
    assert payload["success"] is False
    assert payload["message"] == "Too many requests from this IP, please try again later."
    assert payload["data"] is None
    assert "Retry-After" in response.headers


def test_rate_limit_is_per_client_ip(app_factory):
    app = app_factory(rate_limit_default="1 per minute")
    with app.test_client() as client:
        assert client.get("/api/industries", environ_base={"REMOTE_ADDR": "10.0.0.1"}).status_code == 200
        assert client.get("/api/industries", environ_base={"REMOTE_ADDR": "10.0.0.2"}).status_code == 200
        assert client.get("/api/industries", environ_base={"REMOTE_ADDR": "10.0.0.1"}).status_code == 429


def test_health_is_exempt_from_rate_limit(app_factory):
    app = app_factory(rate_limit_default="1 per minute")
    with app.test_client() as client:
        statuses = [client.get("/health").status_code for _ in range(3)]
    assert statuses == [200, 200, 200]


def test_rate_limit_can_be_disabled(app_factory):
    app = app_factory(rate_limit_default="1 per minute", rate_limit_enabled=False)
    with app.test_client() as client:
        statuses = [client.get("/api/industries").status_code for _ in range(3)]
    assert statuses == [200, 200, 200]
