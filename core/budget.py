from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from core.aggregate import AggregationResult
from core.domain import Budget
from core.functional import Maybe, Nothing, Some

BudgetArg = Union[Maybe[Budget], Budget, None]

NO_BUDGET = "no_budget"
WITHIN_BUDGET = "within_budget"
OVER_BUDGET = "over_budget"


@dataclass(frozen=True)
class BudgetStatus:
    remaining: Maybe[Decimal]
    ratio: float


@dataclass(frozen=True)
class PeriodComparison:
    current_total: Decimal
    previous_total: Decimal
    total_change: float
    average_daily_change: float
    count_change: float


def evaluate(aggregation: AggregationResult, budget: BudgetArg) -> BudgetStatus:
    """Remaining budget and spend ratio for a period.

    ``remaining`` is ``Nothing()`` when no budget is set, which callers must
    not confuse with ``Some(Decimal(0))``. Overspend gives a negative value.
    """
    b = Maybe.of(budget)
    if b.is_none():
        return BudgetStatus(remaining=Nothing(), ratio=0.0)

    limit = b.get_or_else(None).limit
    remaining = limit - aggregation.total_spent
    ratio = float(aggregation.total_spent / limit) if limit > 0 else 0.0
    return BudgetStatus(remaining=Some(remaining), ratio=ratio)


def percent_change(current, previous) -> float:
    if previous != 0:
        return float((current - previous) / previous * 100)
    return 100.0 if current > 0 else 0.0


def compare(current: AggregationResult, previous: AggregationResult) -> PeriodComparison:
    return PeriodComparison(
        current_total=current.total_spent,
        previous_total=previous.total_spent,
        total_change=percent_change(current.total_spent, previous.total_spent),
        average_daily_change=percent_change(
            current.average_daily_spend, previous.average_daily_spend
        ),
        count_change=percent_change(current.count, previous.count),
    )


def status_key(status: BudgetStatus) -> str:
    remaining: Optional[Decimal] = status.remaining.to_optional()
    if remaining is None:
        return NO_BUDGET
    return WITHIN_BUDGET if remaining >= 0 else OVER_BUDGET
