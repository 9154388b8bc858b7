import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Tuple

from core.aggregate import AggregationResult, ranked_categories, share_percent
from core.budget import BudgetArg
from core.domain import Category
from core.functional import Maybe
from core.i18n import DEFAULT_LOCALE, category_label, render

logger = logging.getLogger(__name__)

NEAR_LIMIT_PERCENT = 85
CONCENTRATION_PERCENT = 50
LOW_SPENDING_PERCENT = 50
MAX_RECOMMENDATIONS = 2

# category -> (share threshold in percent, message key)
CATEGORY_TIPS = {
    Category.FOOD: (30, "food_tip"),
    Category.TRANSPORT: (25, "transport_tip"),
    Category.CLOTHING: (20, "clothing_tip"),
}


@dataclass(frozen=True)
class AdviceResult:
    alerts: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()


def round_half_up(value: Decimal) -> int:
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def placeholder(key: str, locale: str = DEFAULT_LOCALE) -> AdviceResult:
    return AdviceResult(alerts=(), recommendations=(render(locale, key),))


def advise(aggregation: AggregationResult, budget: BudgetArg, locale: str = DEFAULT_LOCALE) -> AdviceResult:
    """Rule-based savings alerts and recommendations for one period.

    Without a budget (or with a non-positive limit) the only output is the
    "set a budget" hint. Otherwise alerts come out budget ratio first, then
    category concentration; recommendations are category tips by descending
    spend followed by one general tip, capped at ``MAX_RECOMMENDATIONS``.
    When two categories tie for largest, the one met first wins.
    """
    b = Maybe.of(budget).to_optional()
    if b is None or b.limit <= 0:
        return placeholder("set_budget_first", locale)

    total = aggregation.total_spent
    limit = b.limit
    ratio = total / limit * 100
    ranked = ranked_categories(aggregation)

    alerts: List[str] = []
    recommendations: List[str] = []

    if ratio > 100:
        alerts.append(render(locale, "over_budget_alert", percent=round_half_up(ratio - 100)))
    elif ratio > NEAR_LIMIT_PERCENT:
        alerts.append(render(locale, "near_limit_alert", percent=NEAR_LIMIT_PERCENT))

    if ranked and total > 0:
        top_category, top_amount = ranked[0]
        top_share = share_percent(top_amount, total)
        if top_share > CONCENTRATION_PERCENT:
            alerts.append(render(
                locale, "concentration_alert",
                category=category_label(locale, top_category),
                percent=round_half_up(top_share),
            ))

    if total > 0:
        for category, amount in ranked:
            if category not in CATEGORY_TIPS:
                continue
            threshold, key = CATEGORY_TIPS[category]
            share = share_percent(amount, total)
            if share > threshold:
                recommendations.append(render(locale, key, percent=round_half_up(share)))

    if ratio < LOW_SPENDING_PERCENT:
        recommendations.append(render(
            locale, "low_spending_tip", amount=round_half_up(limit / 2 - total)
        ))
    else:
        recommendations.append(render(locale, "subscriptions_tip"))

    if not alerts and not recommendations:
        recommendations.append(render(locale, "good_job"))

    logger.debug(
        "advice for ratio %.1f%%: %d alert(s), %d recommendation(s) before cap",
        ratio, len(alerts), len(recommendations),
    )
    return AdviceResult(
        alerts=tuple(alerts),
        recommendations=tuple(recommendations[:MAX_RECOMMENDATIONS]),
    )
