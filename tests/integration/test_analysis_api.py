"""
Integration tests for the customer-interest analysis endpoints.
"""
import pytest
from httpx import AsyncClient

from backend.app.models.campaign_orm import CampaignORM
from backend.app.models.product_orm import ProductORM


@pytest.mark.asyncio
async def test_analyze_product_returns_one_result_per_customer(client: AsyncClient, auth_headers, seed_customers):
    customers = await seed_customers()
    resp = await client.post(
        "/api/analyze-customer-interest",
        json={"product": {"name": "Trail Shoes", "category": "Outdoor"}, "userId": "tenant-a-user"},
        headers=auth_headers(),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert [r["customerId"] for r in data] == [c.id for c in customers]
    assert data[0] == {
        "customerId": customers[0].id,
        "customerName": "Alice",
        "likelihood": 72.0,
        "reason": "The customer enjoys this kind of product.",
    }


@pytest.mark.asyncio
async def test_one_failing_call_does_not_fail_the_batch(client: AsyncClient, auth_headers, seed_customers, fake_llm):
    await seed_customers()
    fake_llm.fail_on = ["Customer name: Alice"]
    resp = await client.post(
        "/api/analyze-customer-interest", json={"product": {"name": "Trail Shoes"}}, headers=auth_headers()
    )
    assert resp.status_code == 200
    alice, bob = resp.json()
    assert alice["likelihood"] == 0
    assert alice["reason"] == "Error occurred during analysis"
    assert bob["likelihood"] == 72.0


@pytest.mark.asyncio
async def test_missing_product_is_400(client: AsyncClient, auth_headers):
    resp = await client.post("/api/analyze-customer-interest", json={"userId": "x"}, headers=auth_headers())
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required data"
    assert "product" in resp.json()["fields"]


@pytest.mark.asyncio
async def test_no_customers_is_404(client: AsyncClient, auth_headers):
    resp = await client.post(
        "/api/analyze-customer-interest", json={"product": {"name": "Trail Shoes"}}, headers=auth_headers()
    )
    assert resp.status_code == 404
    assert resp.json() == {"error": "No customers found"}


@pytest.mark.asyncio
async def test_unauthenticated_is_401(client: AsyncClient):
    resp = await client.post("/api/analyze-customer-interest", json={"product": {"name": "Trail Shoes"}})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Unauthorized: User not authenticated"


@pytest.mark.asyncio
async def test_mismatched_user_id_is_403(client: AsyncClient, auth_headers, seed_customers):
    await seed_customers()
    resp = await client.post(
        "/api/analyze-customer-interest",
        json={"product": {"name": "Trail Shoes"}, "userId": "someone-else"},
        headers=auth_headers(),
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_viewer_cannot_run_analysis(client: AsyncClient, auth_headers, seed_customers):
    await seed_customers()
    resp = await client.post(
        "/api/analyze-customer-interest",
        json={"product": {"name": "Trail Shoes"}},
        headers=auth_headers(role="viewer"),
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_analyze_product_can_persist_estimate(client: AsyncClient, auth_headers, seed_customers, seed_product, db_session):
    await seed_customers()
    product = await seed_product()
    resp = await client.post(
        "/api/analyze-customer-interest",
        json={"product": {"id": product.id, "name": product.name}, "persistEstimate": True},
        headers=auth_headers(),
    )
    assert resp.status_code == 200
    stored = await db_session.get(ProductORM, product.id, populate_existing=True)
    assert stored.likeestimate == 72


@pytest.mark.asyncio
async def test_analyze_campaign(client: AsyncClient, auth_headers, seed_customers, fake_llm):
    await seed_customers()
    resp = await client.post(
        "/api/analyze-customer-interest-cam",
        json={
            "campaign": {"name": "Spring Sale", "description": "Outdoor week", "campaign_date": "2025-04-01"},
            "product": {"name": "Trail Shoes"},
        },
        headers=auth_headers(),
    )
    assert resp.status_code == 200
    assert len(resp.json()) == 2
    assert "Related Product:" in fake_llm.prompts[0]
    assert "- Campaign Date: 2025-04-01" in fake_llm.prompts[0]


@pytest.mark.asyncio
async def test_analyze_campaign_missing_campaign_is_400(client: AsyncClient, auth_headers):
    resp = await client.post("/api/analyze-customer-interest-cam", json={"product": {"name": "X"}}, headers=auth_headers())
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_stored_product_pipeline_merges_and_persists(client: AsyncClient, auth_headers, seed_customers, seed_product, fake_llm, db_session):
    await seed_customers()
    product = await seed_product()
    fake_llm.completion_reply = lambda prompt: "90% Loves hiking." if "Alice" in prompt else "20 Not a gamer product."

    resp = await client.post(f"/api/products/{product.id}/analysis", headers=auth_headers())
    assert resp.status_code == 200
    body = resp.json()
    assert body["likeestimate"] == 55
    alice, bob = body["customers"]
    assert (alice["bucket"], alice["selected"]) == ("green", True)
    assert (bob["bucket"], bob["selected"]) == ("red", False)
    assert bob["preferences"] == "whatsapp"

    stored = await db_session.get(ProductORM, product.id, populate_existing=True)
    assert stored.likeestimate == 55


@pytest.mark.asyncio
async def test_stored_product_pipeline_unknown_product(client: AsyncClient, auth_headers):
    resp = await client.post("/api/products/nope/analysis", headers=auth_headers())
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_stored_campaign_pipeline_includes_linked_product(client: AsyncClient, auth_headers, seed_customers, seed_product, fake_llm, db_session):
    await seed_customers()
    product = await seed_product()
    campaign = CampaignORM(tenant_id="tenant-a", name="Trail Week", product_id=product.id)
    db_session.add(campaign)
    await db_session.flush()

    resp = await client.post(f"/api/campaigns/{campaign.uid}/analysis", headers=auth_headers())
    assert resp.status_code == 200
    assert resp.json()["likeestimate"] == 72
    assert "- Name: Trail Shoes" in fake_llm.prompts[0]


@pytest.mark.asyncio
async def test_put_likeestimate(client: AsyncClient, auth_headers, seed_product):
    product = await seed_product()
    resp = await client.put(
        f"/api/products/{product.id}/likeestimate",
        json={"results": [{"customerId": "1", "likelihood": 62}, {"customerId": "2", "likelihood": 63}]},
        headers=auth_headers(),
    )
    assert resp.status_code == 200
    assert resp.json() == {"id": product.id, "likeestimate": 63}


@pytest.mark.asyncio
async def test_put_likeestimate_empty_results_is_400(client: AsyncClient, auth_headers, seed_product):
    product = await seed_product()
    resp = await client.put(f"/api/products/{product.id}/likeestimate", json={"results": []}, headers=auth_headers())
    assert resp.status_code == 400
    assert resp.json() == {"error": "cannot aggregate empty result set"}


@pytest.mark.asyncio
async def test_put_campaign_likeestimate_unknown_is_404(client: AsyncClient, auth_headers):
    resp = await client.put(
        "/api/campaigns/missing/likeestimate", json={"results": [{"likelihood": 10}]}, headers=auth_headers()
    )
    assert resp.status_code == 404
