import json
import logging
from dataclasses import replace
from typing import Tuple
from uuid import uuid4

from core.domain import Budget, ExpenseRecord, InvalidInput, NotFound, NotOwner
from core.functional import Maybe, Nothing, Some

logger = logging.getLogger(__name__)

Expenses = Tuple[ExpenseRecord, ...]
Budgets = Tuple[Budget, ...]


def load_seed(path: str) -> Tuple[Expenses, Budgets]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    expenses = tuple(ExpenseRecord(**e) for e in data.get("expenses", []))
    budgets: Budgets = ()
    for b in data.get("budgets", []):
        budgets = upsert_budget(budgets, b["owner_id"], b["period_key"], b["limit"])

    logger.info("loaded %d expense(s) and %d budget(s) from %s", len(expenses), len(budgets), path)
    return expenses, budgets


def add_expense(expenses: Expenses, record: ExpenseRecord) -> Tuple[Expenses, ExpenseRecord]:
    if record.id is None:
        record = replace(record, id=str(uuid4()))
    elif any(e.id == record.id for e in expenses):
        raise InvalidInput(f"Expense {record.id} already exists")
    return expenses + (record,), record


def _owned(expenses: Expenses, owner_id: str, expense_id: str) -> ExpenseRecord:
    found = next((e for e in expenses if e.id == expense_id), None)
    if found is None:
        raise NotFound(f"Expense {expense_id} does not exist")
    if found.owner_id != owner_id:
        raise NotOwner(f"Expense {expense_id} belongs to another user")
    return found


def update_expense(expenses: Expenses, owner_id: str, expense_id: str, /, **changes) -> Expenses:
    """Replace fields of one of the owner's expenses.

    ``id`` and ``owner_id`` cannot be changed. The updated record goes through
    the same validation as a new one.
    """
    if {"id", "owner_id"} & set(changes):
        raise InvalidInput("Expense id and owner cannot be changed")
    current = _owned(expenses, owner_id, expense_id)
    updated = replace(current, **changes)
    return tuple(updated if e.id == expense_id else e for e in expenses)


def delete_expense(expenses: Expenses, owner_id: str, expense_id: str) -> Expenses:
    _owned(expenses, owner_id, expense_id)
    return tuple(e for e in expenses if e.id != expense_id)


def expenses_for_owner(expenses: Expenses, owner_id: str) -> Expenses:
    return tuple(filter(lambda e: e.owner_id == owner_id, expenses))


def upsert_budget(budgets: Budgets, owner_id: str, period_key: str, limit) -> Budgets:
    """Create or replace the single budget of ``owner_id`` for ``period_key``."""
    new = Budget(owner_id=owner_id, period_key=period_key, limit=limit)
    kept = tuple(
        b for b in budgets
        if not (b.owner_id == owner_id and b.period_key == period_key)
    )
    return kept + (new,)


def find_budget(budgets: Budgets, owner_id: str, period_key: str) -> Maybe[Budget]:
    for b in budgets:
        if b.owner_id == owner_id and b.period_key == period_key:
            return Some(b)
    return Nothing()
