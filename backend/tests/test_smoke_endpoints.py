# tests/test_smoke_endpoints.py
# Smoke test against a running API (uvicorn app.main:app). Skipped when the
# server is not reachable. Needs STEWARD_API_KEY / STEWARD_CHURCH_ID from
# scripts/seed_church.py for the authenticated checks.

import os

import pytest
import requests

BASE = os.getenv("STEWARD_API", "http://127.0.0.1:8000")
API_KEY = os.getenv("STEWARD_API_KEY")
CHURCH_ID = os.getenv("STEWARD_CHURCH_ID")


def _service_up() -> bool:
    try:
        r = requests.get(f"{BASE}/openapi.json", timeout=3)
        return r.status_code == 200
    except requests.RequestException:
        return False


skip_if_down = pytest.mark.skipif(not _service_up(), reason="API not reachable")


@skip_if_down
def test_health():
    r = requests.get(f"{BASE}/health", timeout=10)
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["db"]["status"] == "ok"


@skip_if_down
def test_generate_requires_auth():
    r = requests.post(f"{BASE}/giving-statements/generate", json={"year": 2024}, timeout=10)
    assert r.status_code == 401


@skip_if_down
@pytest.mark.skipif(not (API_KEY and CHURCH_ID), reason="STEWARD_API_KEY / STEWARD_CHURCH_ID not set")
def test_preview_and_list():
    headers = {"X-API-Key": API_KEY, "X-Church-Id": CHURCH_ID}

    r = requests.post(
        f"{BASE}/giving-statements/generate",
        json={"year": 2024, "preview": True, "skipValidation": True},
        headers=headers,
        timeout=60,
    )
    # 404 when the seeded church has no 2024 giving yet
    assert r.status_code in (200, 404), r.text
    if r.status_code == 200 and r.headers["content-type"].startswith("application/json"):
        assert r.json()["preview"] is True

    r = requests.get(f"{BASE}/giving-statements", params={"year": 2024}, headers=headers, timeout=10)
    assert r.status_code == 200
    assert isinstance(r.json(), list)
