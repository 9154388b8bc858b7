from decimal import Decimal
from typing import Sequence

import pandas as pd

from core.domain import ExpenseRecord
from core.i18n import DEFAULT_LOCALE, format_date

EXPORT_FIELDS = ("date", "category", "amount", "note")


def format_amount(amount: Decimal) -> str:
    """Plain decimal text: no exponent, no trailing zeros (12.50 -> "12.5")."""
    return format(amount.normalize(), "f")


def export_rows(records: Sequence[ExpenseRecord], locale: str = DEFAULT_LOCALE) -> list:
    return [
        {
            "date": format_date(locale, e.occurred_on),
            "category": e.category.value,
            "amount": format_amount(e.amount),
            "note": e.note,
        }
        for e in records
    ]


def export_csv(records: Sequence[ExpenseRecord], locale: str = DEFAULT_LOCALE) -> str:
    """Comma separated export, header first, one row per expense.

    Fields with a comma, quote or newline are quoted and inner quotes are
    doubled. Returns an empty string when there is nothing to export.
    """
    if not records:
        return ""
    df = pd.DataFrame(export_rows(records, locale), columns=list(EXPORT_FIELDS))
    csv = df.to_csv(index=False, lineterminator="\n")
    # to_csv always terminates the last row
    return csv[:-1] if csv.endswith("\n") else csv


def export_filename(period_key: str) -> str:
    return f"smart-expense-{period_key}.csv"
