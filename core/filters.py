from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Iterator

from core.domain import Category, ExpenseRecord, Period, normalize_date, period_key_of

Predicate = Callable[[ExpenseRecord], bool]


def by_category(*categories: Category) -> Predicate:
    wanted = {Category.parse(c) for c in categories}

    def _filter(e: ExpenseRecord) -> bool:
        return e.category in wanted

    return _filter


def by_date_range(start: date, end: date) -> Predicate:
    start, end = normalize_date(start), normalize_date(end)

    def _filter(e: ExpenseRecord) -> bool:
        return start <= e.occurred_on <= end

    return _filter


def by_period(period: Period) -> Predicate:
    return by_date_range(period.start, period.end)


def by_month(period_key: str) -> Predicate:
    def _filter(e: ExpenseRecord) -> bool:
        return period_key_of(e.occurred_on) == period_key

    return _filter


def by_amount_range(low: Decimal, high: Decimal) -> Predicate:
    def _filter(e: ExpenseRecord) -> bool:
        return low <= e.amount <= high

    return _filter


def by_owner(owner_id: str) -> Predicate:
    def _filter(e: ExpenseRecord) -> bool:
        return e.owner_id == owner_id

    return _filter


def all_of(*preds: Predicate) -> Predicate:
    def _filter(e: ExpenseRecord) -> bool:
        return all(p(e) for p in preds)

    return _filter


def iter_expenses(expenses: Iterable[ExpenseRecord], pred: Predicate) -> Iterator[ExpenseRecord]:
    for e in expenses:
        if pred(e):
            yield e
