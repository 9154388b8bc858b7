import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Awaitable, Callable, Dict, Mapping, Optional

from core.advice import MAX_RECOMMENDATIONS, AdviceResult, advise, placeholder
from core.aggregate import AggregationResult
from core.budget import BudgetArg
from core.config import ADVICE_TIMEOUT
from core.domain import Budget, Category
from core.functional import Maybe
from core.i18n import DEFAULT_LOCALE

logger = logging.getLogger(__name__)

LOCAL_OWNER = "local"


@dataclass(frozen=True)
class AdviceRequest:
    """What a remote advisor gets to see: totals only, never raw records."""
    budget_limit: Optional[Decimal]
    total_spent: Decimal
    spend_by_category: Dict[Category, Decimal] = field(default_factory=dict)
    locale: str = DEFAULT_LOCALE


RemoteAdvisor = Callable[[AdviceRequest], Awaitable[AdviceResult]]


def request_from(aggregation: AggregationResult, budget: BudgetArg, locale: str = DEFAULT_LOCALE) -> AdviceRequest:
    b = Maybe.of(budget).to_optional()
    return AdviceRequest(
        budget_limit=b.limit if b is not None else None,
        total_spent=aggregation.total_spent,
        spend_by_category=dict(aggregation.by_category),
        locale=locale,
    )


def local_advice(request: AdviceRequest) -> AdviceResult:
    aggregation = AggregationResult(
        total_spent=request.total_spent,
        by_category=dict(request.spend_by_category),
    )
    budget = None
    if request.budget_limit is not None and request.budget_limit > 0:
        # period is irrelevant to the rules, any valid key will do
        budget = Budget(owner_id=LOCAL_OWNER, period_key="2000-01", limit=request.budget_limit)
    return advise(aggregation, budget, request.locale)


def _coerce(result) -> AdviceResult:
    # remotes may answer with the parsed JSON object instead of an AdviceResult
    if isinstance(result, Mapping):
        alerts = tuple(result["alerts"])
        recommendations = tuple(result["recommendations"])
    else:
        alerts = tuple(result.alerts)
        recommendations = tuple(result.recommendations)
    if not all(isinstance(s, str) for s in alerts + recommendations):
        raise TypeError("advice entries must be strings")
    return AdviceResult(alerts=alerts, recommendations=recommendations[:MAX_RECOMMENDATIONS])


async def advise_with_fallback(
    request: AdviceRequest,
    remote: Optional[RemoteAdvisor] = None,
    timeout: float = ADVICE_TIMEOUT,
) -> AdviceResult:
    """Ask ``remote`` for advice, degrading to the local rule engine.

    No budget or no remote means local rules straight away. A month with no
    expenses gets the "add more expenses" hint without a remote call. A
    timeout, an exception or a malformed answer from the remote is logged
    and answered by the local engine.
    """
    if remote is None or request.budget_limit is None or request.budget_limit <= 0:
        return local_advice(request)
    if not request.spend_by_category:
        return placeholder("add_more_expenses", request.locale)

    try:
        result = await asyncio.wait_for(remote(request), timeout)
        return _coerce(result)
    except asyncio.TimeoutError:
        logger.warning("remote advice timed out after %.1fs, using local rules", timeout)
    except Exception:
        logger.warning("remote advice failed, using local rules", exc_info=True)
    return local_advice(request)


class AdviceCoordinator:
    """Keeps only the newest advice request's answer.

    Each call to :meth:`request` supersedes earlier ones. A superseded call
    returns ``None`` instead of its result, so at most one answer wins per
    burst of requests. With ``debounce`` > 0 a request waits that long first
    and skips the remote entirely if it was superseded meanwhile.
    """

    def __init__(self, remote: Optional[RemoteAdvisor] = None, timeout: float = ADVICE_TIMEOUT, debounce: float = 0.0):
        self.remote = remote
        self.timeout = timeout
        self.debounce = debounce
        self._latest = 0

    def is_current(self, token: int) -> bool:
        return token == self._latest

    async def request(self, request: AdviceRequest) -> Optional[AdviceResult]:
        self._latest += 1
        token = self._latest

        if self.debounce > 0:
            await asyncio.sleep(self.debounce)
            if not self.is_current(token):
                logger.debug("advice request %d superseded while waiting", token)
                return None

        result = await advise_with_fallback(request, self.remote, self.timeout)
        if not self.is_current(token):
            logger.debug("discarding advice for superseded request %d", token)
            return None
        return result
