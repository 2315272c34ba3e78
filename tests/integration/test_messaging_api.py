"""
Integration tests for outreach message drafting.
"""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_email_draft_is_split_into_subject_and_body(client: AsyncClient, auth_headers, seed_profile, fake_llm):
    await seed_profile()
    fake_llm.chat_reply = "Ready for the trails?\n\nHi Alice,\nOur new shoes are here.\n"
    resp = await client.post(
        "/api/generate-message",
        json={
            "customer": {"name": "Alice", "likes": "hiking", "preferences": "email"},
            "product": {"name": "Trail Shoes", "description": "Light"},
        },
        headers=auth_headers(),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == {"subject": "Ready for the trails?", "content": "Hi Alice,\nOur new shoes are here."}
    assert body["style"] == {"tone": "casual", "verbosity": "concise"}
    assert body["profile"] == {"profession": "outdoor retailer"}
    assert body["context"]["messages"][0]["content"] == "hey there!"

    system, user = fake_llm.chats[0]
    assert system["role"] == "system"
    assert "The person selling the product is Sam Seller." in user["content"]
    assert fake_llm.max_tokens[-1] == 500


@pytest.mark.asyncio
async def test_non_email_draft_is_plain_text(client: AsyncClient, auth_headers, seed_profile, fake_llm):
    await seed_profile()
    fake_llm.chat_reply = "Hey Bob! New shoes in stock."
    resp = await client.post(
        "/api/generate-message",
        json={"customer": {"name": "Bob", "preferences": "whatsapp"}, "product": {"name": "Trail Shoes"}},
        headers=auth_headers(),
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Hey Bob! New shoes in stock."


@pytest.mark.asyncio
async def test_missing_profile_is_404(client: AsyncClient, auth_headers):
    resp = await client.post(
        "/api/generate-message",
        json={"customer": {"name": "Bob"}, "product": {"name": "Trail Shoes"}},
        headers=auth_headers(),
    )
    assert resp.status_code == 404
    assert resp.json() == {"error": "User profile not found"}


@pytest.mark.asyncio
async def test_provider_failure_is_500(client: AsyncClient, auth_headers, seed_profile, fake_llm):
    await seed_profile()
    fake_llm.fail_on = ["Trail Shoes"]
    resp = await client.post(
        "/api/generate-message",
        json={"customer": {"name": "Bob"}, "product": {"name": "Trail Shoes"}},
        headers=auth_headers(),
    )
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to generate message"}


@pytest.mark.asyncio
async def test_missing_customer_is_400(client: AsyncClient, auth_headers):
    resp = await client.post("/api/generate-message", json={"product": {"name": "X"}}, headers=auth_headers())
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_batch_drafts_isolate_failures(client: AsyncClient, auth_headers, seed_profile, seed_customers, seed_product, fake_llm):
    await seed_profile()
    alice, bob = await seed_customers()
    product = await seed_product()
    fake_llm.chat_reply = "Subject\nBody"
    fake_llm.fail_on = ["- Name: Bob"]

    resp = await client.post(
        "/api/generate-messages",
        json={"customerIds": [alice.id, bob.id, "unknown"], "productId": product.id},
        headers=auth_headers(),
    )
    assert resp.status_code == 200
    first, second = resp.json()
    assert first["customerId"] == alice.id
    assert first["message"] == {"subject": "Subject", "content": "Body"}
    assert second["customerId"] == bob.id
    assert second["message"] is None
    assert second["error"] == "Error generating message"


@pytest.mark.asyncio
async def test_batch_unknown_product_is_404(client: AsyncClient, auth_headers, seed_profile, seed_customers):
    await seed_profile()
    alice, _ = await seed_customers()
    resp = await client.post(
        "/api/generate-messages", json={"customerIds": [alice.id], "productId": "nope"}, headers=auth_headers()
    )
    assert resp.status_code == 404
