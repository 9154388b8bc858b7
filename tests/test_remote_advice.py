import asyncio
from decimal import Decimal

import pytest

from core.advice import AdviceResult, advise
from core.aggregate import AggregationResult
from core.domain import Budget, Category
from core.i18n import render
from core.remote_advice import (
    AdviceCoordinator,
    AdviceRequest,
    advise_with_fallback,
    local_advice,
    request_from,
)


def make_request(limit="1000", **amounts):
    spend = {Category[k.upper()]: Decimal(v) for k, v in amounts.items()}
    return AdviceRequest(
        budget_limit=Decimal(limit) if limit is not None else None,
        total_spent=sum(spend.values(), Decimal(0)),
        spend_by_category=spend,
    )


def test_request_from_aggregation():
    agg = AggregationResult(total_spent=Decimal(70), by_category={Category.FOOD: Decimal(70)})
    req = request_from(agg, Budget("u1", "2024-06", 100), "es")
    assert req.budget_limit == Decimal(100)
    assert req.total_spent == Decimal(70)
    assert req.spend_by_category == {Category.FOOD: Decimal(70)}
    assert req.locale == "es"
    assert request_from(agg, None).budget_limit is None


def test_local_advice_matches_engine():
    req = make_request(food=400, transport=300)
    agg = AggregationResult(total_spent=req.total_spent, by_category=dict(req.spend_by_category))
    assert local_advice(req) == advise(agg, Budget("u1", "2024-06", 1000))


@pytest.mark.asyncio
async def test_remote_result_is_used():
    async def remote(request):
        return AdviceResult(alerts=("remote alert",), recommendations=("a", "b", "c"))

    result = await advise_with_fallback(make_request(food=100), remote)
    assert result.alerts == ("remote alert",)
    assert result.recommendations == ("a", "b")


@pytest.mark.asyncio
async def test_remote_dict_answer_is_accepted():
    async def remote(request):
        return {"alerts": [], "recommendations": ["save more"]}

    result = await advise_with_fallback(make_request(food=100), remote)
    assert result == AdviceResult(alerts=(), recommendations=("save more",))


@pytest.mark.asyncio
async def test_remote_failure_falls_back_to_local_rules():
    async def remote(request):
        raise ConnectionError("model unavailable")

    req = make_request(food=700)
    assert await advise_with_fallback(req, remote) == local_advice(req)


@pytest.mark.asyncio
async def test_remote_timeout_falls_back_to_local_rules():
    async def remote(request):
        await asyncio.sleep(1)
        return AdviceResult(alerts=("late",))

    req = make_request(food=700)
    assert await advise_with_fallback(req, remote, timeout=0.01) == local_advice(req)


@pytest.mark.asyncio
async def test_malformed_remote_answer_falls_back():
    async def remote(request):
        return {"alerts": [1, 2]}

    req = make_request(food=700)
    assert await advise_with_fallback(req, remote) == local_advice(req)


@pytest.mark.asyncio
async def test_no_budget_or_no_spending_skips_remote():
    calls = []

    async def remote(request):
        calls.append(request)
        return AdviceResult()

    no_budget = await advise_with_fallback(make_request(limit=None, food=10), remote)
    assert no_budget.recommendations == (render("en", "set_budget_first"),)

    empty = await advise_with_fallback(make_request(), remote)
    assert empty.recommendations == (render("en", "add_more_expenses"),)
    assert calls == []


@pytest.mark.asyncio
async def test_coordinator_keeps_only_latest_result():
    release = asyncio.Event()

    async def remote(request):
        if request.total_spent == Decimal(1):
            await release.wait()
        return AdviceResult(recommendations=(str(request.total_spent),))

    coordinator = AdviceCoordinator(remote=remote)
    first = asyncio.create_task(coordinator.request(make_request(food=1)))
    await asyncio.sleep(0)
    second = await coordinator.request(make_request(food=2))
    release.set()

    assert second.recommendations == ("2",)
    assert await first is None


@pytest.mark.asyncio
async def test_coordinator_debounce_skips_superseded_calls():
    calls = []

    async def remote(request):
        calls.append(request.total_spent)
        return AdviceResult(recommendations=("ok",))

    coordinator = AdviceCoordinator(remote=remote, debounce=0.01)
    results = await asyncio.gather(
        coordinator.request(make_request(food=1)),
        coordinator.request(make_request(food=2)),
        coordinator.request(make_request(food=3)),
    )
    assert results[:2] == [None, None]
    assert results[2].recommendations == ("ok",)
    assert calls == [Decimal(3)]
