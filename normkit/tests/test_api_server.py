from __future__ import annotations

from fastapi.testclient import TestClient

from normkit.api.server import ServiceConfig, create_app
from normkit.core.normalization import NormalizationConfig


def _client(**kwargs) -> TestClient:
    return TestClient(create_app(config=ServiceConfig(**kwargs)))


def test_health_reports_active_config():
    client = _client()

    r = client.get("/health")

    assert r.status_code == 200
    assert r.headers.get("x-request-id")
    body = r.json()
    assert body["ok"] is True
    assert body["config"]["na_match_mode"] == "compressed"
    assert "n/a" in body["config"]["na_values"]


def test_request_id_is_echoed():
    r = _client().get("/health", headers={"X-Request-ID": "abc123"})
    assert r.headers["x-request-id"] == "abc123"


def test_normalize_endpoint():
    client = _client()

    r = client.post("/normalize", json={"data": {"a": "  ", "b": {"c": "n/a", "d": " x "}, "l": ["-", 1]}})

    assert r.status_code == 200
    assert r.json() == {"data": {"a": None, "b": {"c": None, "d": "x"}, "l": [None, 1]}}


def test_normalize_scalar_payload():
    r = _client().post("/normalize", json={"data": "  hi "})
    assert r.json() == {"data": "hi"}


def test_normalize_with_request_overrides():
    client = _client()

    r = client.post(
        "/normalize",
        json={"data": ["n a", "N/A", ""], "config": {"na_match_mode": "exact", "na_values": ["N/A"]}},
    )

    assert r.status_code == 200
    assert r.json() == {"data": ["n a", None, None]}


def test_service_config_is_the_base_for_requests():
    client = _client(normalization=NormalizationConfig(treat_empty_string_as_null=False, na_values=["n/a"]))

    r = client.post("/normalize", json={"data": {"a": ""}})
    assert r.json() == {"data": {"a": ""}}

    r2 = client.post("/normalize", json={"data": {"a": ""}, "config": {"treat_empty_string_as_null": True}})
    assert r2.json() == {"data": {"a": None}}


def test_resolve_endpoint_prefers_exact_keys():
    client = _client()
    data = {"date.upload": "2024-01-01", "date": {"upload": "X"}, "nested": {"x": "none", "y": " v "}}

    r = client.post("/resolve", json={"data": data, "path": "date.upload"})
    assert r.json() == {"path": "date.upload", "found": True, "value": "2024-01-01"}

    r2 = client.post("/resolve", json={"data": data, "path": "nested"})
    assert r2.json()["value"] == {"x": None, "y": "v"}

    r3 = client.post("/resolve", json={"data": data, "path": "nested.z"})
    assert r3.json() == {"path": "nested.z", "found": False, "value": None}


def test_too_deep_payload_is_rejected():
    deep = "leaf"
    for _ in range(200):
        deep = {"a": deep}

    r = _client().post("/normalize", json={"data": deep})

    assert r.status_code == 422
    assert r.json()["error"] == "StructureTooDeepError"


def test_oversized_body_is_rejected():
    r = _client(max_body_bytes=16).post("/normalize", json={"data": "x" * 100})

    assert r.status_code == 413
    assert r.json()["error"] == "payload_too_large"


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("NORMKIT_NA_VALUES", "missing,unknown")
    monkeypatch.setenv("NORMKIT_NA_MATCH_MODE", "exact")

    client = TestClient(create_app())

    assert client.get("/health").json()["config"]["na_values"] == ["missing", "unknown"]
    r = client.post("/normalize", json={"data": ["Missing", "n/a"]})
    assert r.json() == {"data": [None, "n/a"]}


def test_digit_keyed_objects_stay_objects():
    r = _client().post("/normalize", json={"data": {"0": " a ", "1": "n/a", "2024": "x"}})

    assert r.json() == {"data": {"0": "a", "1": None, "2024": "x"}}
