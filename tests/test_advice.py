from decimal import Decimal

import pytest

from core.advice import MAX_RECOMMENDATIONS, AdviceResult, advise, round_half_up
from core.aggregate import AggregationResult
from core.domain import Budget, Category
from core.functional import Nothing, Some
from core.i18n import render


def make_agg(**amounts):
    by_category = {Category[name.upper()]: Decimal(v) for name, v in amounts.items()}
    return AggregationResult(
        total_spent=sum(by_category.values(), Decimal(0)),
        by_category=by_category,
    )


def make_budget(limit="1000"):
    return Some(Budget(owner_id="u1", period_key="2024-06", limit=limit))


@pytest.mark.parametrize("locale", ["en", "es"])
@pytest.mark.parametrize("budget", [Nothing(), None])
def test_no_budget_short_circuits(locale, budget):
    result = advise(make_agg(food=900, clothing=500), budget, locale)
    assert result.alerts == ()
    assert result.recommendations == (render(locale, "set_budget_first"),)


def test_scenario_near_limit_only():
    result = advise(make_agg(food=300, transport=300, home=300), make_budget())
    assert result.alerts == ("You have spent more than 85% of your budget.",)


def test_scenario_over_budget_only():
    result = advise(make_agg(home=400, other=400, clothing=300), make_budget())
    assert result.alerts == ("You are over your budget by 10%.",)


def test_over_budget_rounds_half_up():
    result = advise(make_agg(home=500, other=525), make_budget())
    assert result.alerts[0] == "You are over your budget by 3%."


def test_scenario_single_category_concentration():
    result = advise(make_agg(food=700), make_budget())
    assert result.alerts == (
        'Your top spending in "Food" is 100% of the total. Consider diversifying.',
    )
    assert result.recommendations == (
        render("en", "food_tip", percent=100),
        render("en", "subscriptions_tip"),
    )


def test_scenario_empty_month():
    result = advise(make_agg(), make_budget())
    assert result.alerts == ()
    assert result.recommendations == (render("en", "low_spending_tip", amount=500),)


def test_scenario_category_tips_take_priority_over_generic():
    result = advise(make_agg(food=400, transport=300), make_budget())
    assert result.recommendations == (
        render("en", "food_tip", percent=57),
        render("en", "transport_tip", percent=43),
    )
    assert len(result.recommendations) == MAX_RECOMMENDATIONS


def test_category_tips_follow_spend_order():
    result = advise(make_agg(food=310, clothing=390, home=300), make_budget("5000"))
    assert result.recommendations == (
        render("en", "clothing_tip", percent=39),
        render("en", "food_tip", percent=31),
    )


def test_concentration_needs_a_strict_majority():
    result = advise(make_agg(home=300, other=300), make_budget("700"))
    # tied at 50% each, so no concentration alert
    assert result.alerts == ("You have spent more than 85% of your budget.",)

    result = advise(make_agg(transport=600, food=600), make_budget("10000"))
    assert result.alerts == ()


def test_tied_category_tips_follow_first_seen_order():
    result = advise(make_agg(food=300, transport=300), make_budget())
    assert result.recommendations == (
        render("en", "food_tip", percent=50),
        render("en", "transport_tip", percent=50),
    )

    result = advise(make_agg(transport=300, food=300), make_budget())
    assert result.recommendations == (
        render("en", "transport_tip", percent=50),
        render("en", "food_tip", percent=50),
    )


def test_low_spending_tip_amount():
    result = advise(make_agg(home=100), make_budget("1000"))
    assert result.recommendations == (render("en", "low_spending_tip", amount=400),)


def test_spanish_templates_and_category_names():
    result = advise(make_agg(food=700), make_budget(), "es")
    assert result.alerts == (
        'Tu gasto principal en "Comida" representa un 100% del total. Considera diversificar.',
    )
    assert result.recommendations[0].startswith("Has gastado un 100% en comida.")


def test_advise_is_idempotent():
    agg = make_agg(food=400, transport=300, clothing=250)
    budget = make_budget()
    first = advise(agg, budget, "es")
    second = advise(agg, budget, "es")
    assert first == second
    assert isinstance(first, AdviceResult)


def test_round_half_up():
    assert round_half_up(Decimal("2.5")) == 3
    assert round_half_up(Decimal("2.4999")) == 2
    assert round_half_up(Decimal("-0.5")) == -1
