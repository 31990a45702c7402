from unittest.mock import AsyncMock, patch

import pytest

from conftest import feedback_form, register_and_activate


@pytest.mark.asyncio
async def test_dashboard_requires_token(client):
    resp = await client.get("/api/dashboard")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_citizen_dashboard_counts_own_feedback(client, sent_emails):
    email, token = await register_and_activate(client, sent_emails)
    headers = {"Authorization": f"Bearer {token}"}
    await client.post("/api/feedback", data=feedback_form(email=email, rating="2"), headers=headers)
    await client.post("/api/feedback", data=feedback_form(email=email, rating="4"), headers=headers)
    # someone else's feedback must not show up
    await client.post("/api/feedback", data=feedback_form())

    resp = await client.get("/api/dashboard", headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["scope"] == "own"
    assert body["total"] == 2
    assert body["by_status"]["pending"] == 2
    assert body["by_status"]["resolved"] == 0
    assert body["average_rating"] == 3.0
    assert {item["email"] for item in body["recent"]} == {email}


@pytest.mark.asyncio
async def test_admin_dashboard_sees_everything(client, admin_token):
    await client.post("/api/feedback", data=feedback_form())
    resp = await client.get("/api/dashboard", headers={"Authorization": f"Bearer {admin_token}"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["scope"] == "all"
    assert body["total"] >= 1
    assert set(body["by_status"]) == {"pending", "under_review", "in_progress", "resolved", "rejected"}
    assert len(body["recent"]) <= 5


@pytest.mark.asyncio
async def test_contact_message_accepted(client):
    with patch("utils.email_service.EmailService.send_contact_message", new=AsyncMock(return_value=True)) as send:
        resp = await client.post(
            "/api/contact",
            json={
                "name": "Meron",
                "email": "meron@civicvoice.et",
                "subject": "Road repair",
                "message": "The road near the market has been broken for months.",
            },
        )
    assert resp.status_code == 202
    send.assert_awaited_once()


@pytest.mark.asyncio
async def test_contact_message_validation(client):
    resp = await client.post(
        "/api/contact",
        json={"name": "M", "email": "meron@civicvoice.et", "subject": "Hi", "message": "short"},
    )
    assert resp.status_code == 422
    fields = {err["loc"][-1] for err in resp.json()["detail"]}
    assert fields == {"name", "subject", "message"}


@pytest.mark.asyncio
async def test_health_and_root(client):
    health = await client.get("/health")
    assert health.status_code == 200
    assert health.json()["database"] == "connected"

    root = await client.get("/")
    assert root.status_code == 200
    assert "CivicVoice" in root.json()["message"]


@pytest.mark.asyncio
async def test_unhandled_errors_return_generic_500(app, client):
    with patch("routers.feedback_router.FeedbackService.list_feedback", new=AsyncMock(side_effect=RuntimeError("boom"))):
        resp = await client.get("/api/feedback")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}
