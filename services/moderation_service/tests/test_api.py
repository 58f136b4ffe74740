from __future__ import annotations

import httpx
import pytest

from moderation_service.domain.models import MAX_CONTENT_LENGTH, MAX_SKILL_LENGTH
from moderation_service.domain.services import KeyValueViolationAuditLog
from moderation_service.domain.validator import ContentValidator
from moderation_service.main import app


@pytest.fixture()
def client_app(memory_store):
    audit_log = KeyValueViolationAuditLog(memory_store)
    app.state.store = memory_store
    app.state.audit_log = audit_log
    app.state.validator = ContentValidator(audit_log=audit_log)
    return app


@pytest.fixture()
async def client(client_app):
    transport = httpx.ASGITransport(app=client_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def test_health_endpoint(client):
    resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["service"] == "moderation_service"
    assert resp.json()["checks"] == {"store": "ok"}


async def test_health_reports_degraded_store(client, client_app, failing_store):
    client_app.state.store = failing_store

    resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "degraded"
    assert resp.json()["checks"] == {"store": "unavailable"}


async def test_clean_content_returns_200(client):
    resp = await client.post(
        "/validate/content",
        json={"content": "Need a tiler for a bathroom floor", "context": "job_description"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["is_valid"] is True
    assert body["violations"] == []
    assert body["message"] == "Content is appropriate"


async def test_rejected_content_returns_400_with_details(client):
    resp = await client.post(
        "/validate/content",
        json={"content": "Call me at 9876543210", "context": "comment"},
    )

    assert resp.status_code == 400
    body = resp.json()
    assert body["is_valid"] is False
    assert body["score"] == 10
    assert body["violations"][0]["type"] == "phone_number"
    assert body["violations"][0]["severity"] == 4
    assert body["suggestions"]
    assert "9876543210" not in body["cleaned_content"]


async def test_context_defaults_to_comment(client):
    resp = await client.post("/validate/content", json={"content": "contact me please"})

    assert resp.json()["violations"][0]["type"] == "social_media"


async def test_empty_content_is_rejected_by_schema(client):
    resp = await client.post("/validate/content", json={"content": "", "context": "comment"})

    assert resp.status_code == 422


async def test_user_violations_are_recorded_and_listed(client, memory_store):
    await client.post(
        "/validate/content",
        json={"content": "you bastard", "context": "review", "user_id": "u7"},
    )

    resp = await client.get("/moderation/users/u7/violations")

    assert resp.status_code == 200
    records = resp.json()["records"]
    assert len(records) == 1
    assert records[0]["content"] == "you bastard"
    assert records[0]["violations"][0]["type"] == "abuse"


async def test_history_store_failure_returns_503(client, client_app, failing_store):
    client_app.state.audit_log = KeyValueViolationAuditLog(failing_store)

    resp = await client.get(
        "/moderation/users/u7/violations", headers={"X-Correlation-ID": "req-9"}
    )

    assert resp.status_code == 503
    body = resp.json()
    assert body["error_code"] == "AUDIT_STORE_ERROR"
    assert body["correlation_id"] == "req-9"


async def test_username_and_bio_routes(client):
    ok = await client.post("/validate/username", json={"value": "raj_tiles"})
    bad = await client.post(
        "/validate/bio", json={"value": "fuck whatsapp 9876543210 for work"}
    )

    assert ok.status_code == 200
    assert bad.status_code == 400
    assert bad.json()["is_valid"] is False


async def test_skills_route_lists_only_failures(client):
    resp = await client.post(
        "/validate/skills",
        json={"skills": ["Plumbing", "fuck whatsapp 9876543210", "Tiling"]},
    )

    assert resp.status_code == 400
    body = resp.json()
    assert body["is_valid"] is False
    assert [f["skill"] for f in body["failures"]] == ["fuck whatsapp 9876543210"]


async def test_skills_route_accepts_clean_list(client):
    resp = await client.post("/validate/skills", json={"skills": ["Plumbing", "Tiling"]})

    assert resp.status_code == 200
    assert resp.json() == {"is_valid": True, "failures": []}


async def test_correlation_id_is_echoed(client):
    resp = await client.get("/health", headers={"X-Correlation-ID": "abc-123"})

    assert resp.headers["X-Correlation-ID"] == "abc-123"


async def test_oversized_content_is_rejected_by_schema(client):
    resp = await client.post(
        "/validate/content", json={"content": "a" * (MAX_CONTENT_LENGTH + 1)}
    )

    assert resp.status_code == 422


async def test_oversized_skill_name_is_rejected_by_schema(client):
    resp = await client.post(
        "/validate/skills", json={"skills": ["Plumbing", "x" * (MAX_SKILL_LENGTH + 1)]}
    )

    assert resp.status_code == 422
