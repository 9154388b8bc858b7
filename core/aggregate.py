from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from core.domain import Category, ExpenseRecord, Period
from core.filters import by_period, iter_expenses

ZERO = Decimal(0)


@dataclass(frozen=True)
class AggregationResult:
    total_spent: Decimal = ZERO
    by_category: Dict[Category, Decimal] = field(default_factory=dict)
    average_daily_spend: Decimal = ZERO
    count: int = 0
    days_in_period: int = 1


def aggregate(records: Iterable[ExpenseRecord], period: Period) -> AggregationResult:
    """Sum the expenses that fall inside ``period`` (both ends included).

    ``by_category`` keeps categories in the order they are first met and
    leaves out categories with no expenses; use :func:`category_total` to
    read it with an implicit zero.
    """
    total = ZERO
    count = 0
    by_category: Dict[Category, Decimal] = {}

    for e in iter_expenses(records, by_period(period)):
        total += e.amount
        count += 1
        by_category[e.category] = by_category.get(e.category, ZERO) + e.amount

    days = max(period.days, 1)
    return AggregationResult(
        total_spent=total,
        by_category=by_category,
        average_daily_spend=total / days,
        count=count,
        days_in_period=days,
    )


def category_total(result: AggregationResult, category: Category) -> Decimal:
    return result.by_category.get(category, ZERO)


def ranked_categories(result: AggregationResult) -> List[Tuple[Category, Decimal]]:
    # sorted() is stable, so equal totals keep first-encountered order
    return sorted(result.by_category.items(), key=lambda item: item[1], reverse=True)


def share_percent(amount: Decimal, total: Decimal) -> Decimal:
    if total == 0:
        return ZERO
    return amount / total * 100


def previous_period(period: Period) -> Period:
    """The period of the same length that ends the day before ``period``."""
    end = period.start - timedelta(days=1)
    return Period(end - timedelta(days=period.days - 1), end)
