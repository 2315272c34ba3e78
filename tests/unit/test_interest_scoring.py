"""
Unit tests for the fan-out scorer and the merge step.
"""
import asyncio

import pytest

from backend.app.core.config import get_settings
from backend.app.schemas.analysis import AnalysisResult, ProductPayload
from backend.app.services.interest_scoring import (
    ERROR_REASON,
    InterestScoringService,
    NoCustomersFoundError,
    likelihood_bucket,
    merge_analysis,
)


@pytest.mark.asyncio
async def test_one_result_per_customer_in_order(db_session, fake_llm, seed_customers):
    customers = await seed_customers()
    results = await InterestScoringService(db_session, fake_llm).score_product(
        "tenant-a", ProductPayload(name="Trail Shoes")
    )
    assert [r.customer_id for r in results] == [c.id for c in customers]
    assert all(r.likelihood == 72 for r in results)
    assert results[0].reason == "The customer enjoys this kind of product."
    assert fake_llm.max_tokens == [100, 100]


@pytest.mark.asyncio
async def test_failing_customer_gets_error_sentinel(db_session, fake_llm, seed_customers):
    await seed_customers()
    fake_llm.fail_on = ["Customer name: Bob"]
    results = await InterestScoringService(db_session, fake_llm).score_product(
        "tenant-a", ProductPayload(name="Trail Shoes")
    )
    by_name = {r.customer_name: r for r in results}
    assert by_name["Bob"].likelihood == 0
    assert by_name["Bob"].reason == ERROR_REASON
    assert by_name["Alice"].likelihood == 72


@pytest.mark.asyncio
async def test_no_customers_raises(db_session, fake_llm):
    with pytest.raises(NoCustomersFoundError, match="No customers found"):
        await InterestScoringService(db_session, fake_llm).score_product("tenant-a", ProductPayload(name="X"))


@pytest.mark.asyncio
async def test_campaign_scoring_uses_campaign_budget(db_session, fake_llm, seed_customers):
    await seed_customers()
    campaign = type("Campaign", (), {"name": "Spring", "description": None, "keywords": None, "campaign_date": None})()
    await InterestScoringService(db_session, fake_llm).score_campaign("tenant-a", campaign)
    assert fake_llm.max_tokens == [200, 200]
    assert "Campaign Details:" in fake_llm.prompts[0]


@pytest.mark.asyncio
async def test_random_fallback_when_lenient(db_session, fake_llm, seed_customers):
    await seed_customers()
    fake_llm.completion_reply = "Hard to say."
    results = await InterestScoringService(db_session, fake_llm).score_product("tenant-a", ProductPayload(name="X"))
    assert all(0 <= r.likelihood < 100 for r in results)
    assert all(r.reason == "Hard to say." for r in results)


@pytest.mark.asyncio
async def test_strict_parsing_turns_fallback_into_error(db_session, fake_llm, seed_customers):
    await seed_customers()
    fake_llm.completion_reply = "Hard to say."
    settings = get_settings().model_copy(update={"scoring_strict_parsing": True})
    results = await InterestScoringService(db_session, fake_llm, settings).score_product(
        "tenant-a", ProductPayload(name="X")
    )
    assert all(r.likelihood == 0 and r.reason == ERROR_REASON for r in results)


@pytest.mark.asyncio
async def test_batch_deadline_yields_sentinels(db_session, seed_customers, fake_llm):
    await seed_customers()

    async def slow_complete(prompt, *, max_tokens=None, temperature=None):
        await asyncio.sleep(5)

    fake_llm.complete = slow_complete
    settings = get_settings().model_copy(update={"scoring_batch_timeout_seconds": 0.05})
    results = await InterestScoringService(db_session, fake_llm, settings).score_product(
        "tenant-a", ProductPayload(name="X")
    )
    assert len(results) == 2
    assert all(r.reason == ERROR_REASON for r in results)


@pytest.mark.parametrize("value,bucket", [(100, "green"), (75, "green"), (74.9, "yellow"), (50, "yellow"), (49, "red"), (0, "red")])
def test_likelihood_bucket(value, bucket):
    assert likelihood_bucket(value) == bucket


def test_merge_attaches_scores_and_selects():
    customers = [
        type("C", (), dict(id="1", name="A", email=None, phone=None, likes=None, dislikes=None, preferences="email"))(),
        type("C", (), dict(id="2", name="B", email=None, phone=None, likes=None, dislikes=None, preferences="sms"))(),
        type("C", (), dict(id="3", name="C", email=None, phone=None, likes=None, dislikes=None, preferences=None))(),
    ]
    results = [
        AnalysisResult(customer_id="1", customer_name="A", likelihood=80, reason="fits"),
        AnalysisResult(customer_id="2", customer_name="B", likelihood=30, reason="meh"),
    ]
    merged = merge_analysis(customers, results)

    assert [m.bucket for m in merged] == ["green", "red", "red"]
    assert [m.selected for m in merged] == [True, False, False]
    assert merged[0].preferences.value == "mail"
    assert merged[2].likelihood == 0
    assert merged[2].reason == "Analysis not available"
