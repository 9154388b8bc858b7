from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from core import config
from core.aggregate import ZERO, AggregationResult, category_total, share_percent
from core.domain import Category, ExpenseRecord, parse_period_key, period_key_of
from core.i18n import DEFAULT_LOCALE, category_label, month_label

TREND_MONTHS = config.TREND_MONTHS


@dataclass(frozen=True)
class CategoryPoint:
    category: Category
    label: str
    current: Decimal
    comparison: Decimal
    share: float


@dataclass(frozen=True)
class TrendPoint:
    period_key: str
    label: str
    total: Decimal


def category_series(
    current: AggregationResult,
    comparison: Optional[AggregationResult] = None,
    locale: str = DEFAULT_LOCALE,
) -> List[CategoryPoint]:
    """One point per category, in enumeration order, zeros included."""
    points = []
    for category in Category:
        amount = category_total(current, category)
        points.append(CategoryPoint(
            category=category,
            label=category_label(locale, category),
            current=amount,
            comparison=category_total(comparison, category) if comparison is not None else ZERO,
            share=float(share_percent(amount, current.total_spent)),
        ))
    return points


def trailing_months(end_month: str, months: int = TREND_MONTHS) -> List[str]:
    year, month = parse_period_key(end_month)
    keys = []
    for _ in range(max(months, 1)):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


def monthly_trend(
    records: Iterable[ExpenseRecord],
    end_month: str,
    months: int = TREND_MONTHS,
    locale: str = DEFAULT_LOCALE,
) -> List[TrendPoint]:
    """Monthly totals for the trailing window ending at ``end_month``.

    Months without expenses get a zero total so the axis stays continuous.
    Records outside the window are ignored.
    """
    keys = trailing_months(end_month, months)
    totals = {k: ZERO for k in keys}
    for e in records:
        key = period_key_of(e.occurred_on)
        if key in totals:
            totals[key] += e.amount

    points = []
    for key in keys:
        year, month = parse_period_key(key)
        points.append(TrendPoint(period_key=key, label=month_label(locale, year, month), total=totals[key]))
    return points


def to_frame(points: Sequence) -> pd.DataFrame:
    rows = []
    for p in points:
        row = asdict(p)
        for k, v in row.items():
            if isinstance(v, Decimal):
                row[k] = float(v)
            elif isinstance(v, Category):
                row[k] = v.value
        rows.append(row)
    return pd.DataFrame(rows)
