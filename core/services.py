import logging
from datetime import timedelta
from typing import Any, Callable, Dict, Iterable, List, Sequence

from core.advice import advise
from core.aggregate import aggregate
from core.budget import compare, evaluate, status_key
from core.charts import TREND_MONTHS, category_series, monthly_trend
from core.domain import Budget, ExpenseRecord, Period, parse_period_key, period_key_of
from core.filters import by_owner
from core.i18n import DEFAULT_LOCALE, SUPPORTED_LOCALES
from core.transforms import find_budget

logger = logging.getLogger(__name__)

Validator = Callable[[Dict[str, Any]], Sequence[str]]
Calculator = Callable[[Dict[str, Any], Dict[str, Any]], Dict[str, Any]]


class DashboardService:
    """Facade that runs the monthly analysis pipeline for one owner.

    validators: functions taking the request context -> sequence of messages
    calculators: functions taking (context, accumulated results) -> dict of
    partial results, run in order so later steps can read earlier ones
    """

    def __init__(self, validators: Sequence[Validator], calculators: Sequence[Calculator]):
        self.validators = validators
        self.calculators = calculators

    def monthly_report(
        self,
        owner_id: str,
        period_key: str,
        expenses: Iterable[ExpenseRecord],
        budgets: Iterable[Budget],
        locale: str = DEFAULT_LOCALE,
        trend_months: int = TREND_MONTHS,
    ) -> Dict[str, Any]:
        """Run validators and calculators and return the report with intermediate steps."""
        owned = tuple(filter(by_owner(owner_id), expenses))
        ctx = {
            "owner_id": owner_id,
            "period_key": period_key,
            "expenses": owned,
            "budgets": tuple(budgets),
            "locale": locale,
            "trend_months": trend_months,
        }
        report = {
            "period_key": period_key,
            "validation": [],
            "steps": [],
            "result": {},
        }

        messages: List[str] = []
        for v in self.validators:
            try:
                msgs = list(v(ctx))
            except Exception as e:
                logger.warning("validator %s failed", getattr(v, "__name__", v), exc_info=True)
                msgs = [f"validator_error: {e}"]
            messages.extend(msgs)
            report["validation"].append({"validator": getattr(v, "__name__", str(v)), "messages": msgs})

        if messages:
            # analysis needs a valid period and locale, so stop here
            return report

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            out = calc(ctx, acc)
            logger.debug("step %s -> %s", getattr(calc, "__name__", calc), sorted(out))
            report["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
            acc.update(out)

        report["result"] = acc
        return report


def validate_period_key(ctx: Dict[str, Any]) -> List[str]:
    try:
        parse_period_key(ctx["period_key"])
    except ValueError as e:
        return [str(e)]
    return []


def validate_locale(ctx: Dict[str, Any]) -> List[str]:
    if ctx["locale"] not in SUPPORTED_LOCALES:
        return [f"Unsupported locale: {ctx['locale']!r}"]
    return []


def calc_budget(ctx, acc):
    return {"budget": find_budget(ctx["budgets"], ctx["owner_id"], ctx["period_key"])}


def calc_aggregation(ctx, acc):
    period = Period.for_month(ctx["period_key"])
    prev = previous_month(ctx["period_key"])
    return {
        "period": period,
        "aggregation": aggregate(ctx["expenses"], period),
        "previous_aggregation": aggregate(ctx["expenses"], prev),
    }


def calc_budget_status(ctx, acc):
    status = evaluate(acc["aggregation"], acc["budget"])
    return {"budget_status": status, "budget_state": status_key(status)}


def calc_comparison(ctx, acc):
    return {"comparison": compare(acc["aggregation"], acc["previous_aggregation"])}


def calc_advice(ctx, acc):
    return {"advice": advise(acc["aggregation"], acc["budget"], ctx["locale"])}


def calc_charts(ctx, acc):
    return {
        "category_series": category_series(
            acc["aggregation"], acc["previous_aggregation"], ctx["locale"]
        ),
        "trend": monthly_trend(
            ctx["expenses"], ctx["period_key"], ctx["trend_months"], ctx["locale"]
        ),
    }


def previous_month(period_key: str) -> Period:
    """The calendar month before ``period_key`` (not just the same day count)."""
    start = Period.for_month(period_key).start
    return Period.for_month(period_key_of(start - timedelta(days=1)))


def default_validators() -> List[Validator]:
    return [validate_period_key, validate_locale]


def default_calculators() -> List[Calculator]:
    return [calc_budget, calc_aggregation, calc_budget_status, calc_comparison, calc_advice, calc_charts]


def default_service() -> DashboardService:
    return DashboardService(validators=default_validators(), calculators=default_calculators())

