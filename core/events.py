import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, NamedTuple

from core.advice import advise
from core.aggregate import aggregate
from core.budget import evaluate, status_key
from core.domain import Period
from core.i18n import DEFAULT_LOCALE

__all__ = [
    'event_bus', 'EXPENSE_ADDED', 'EXPENSE_UPDATED', 'EXPENSE_DELETED', 'BUDGET_SET',
    'CHANGE_EVENTS', 'Event', 'EventBus', 'budget_alert_handler', 'register_default_handlers',
]

logger = logging.getLogger(__name__)

EXPENSE_ADDED = "EXPENSE_ADDED"
EXPENSE_UPDATED = "EXPENSE_UPDATED"
EXPENSE_DELETED = "EXPENSE_DELETED"
BUDGET_SET = "BUDGET_SET"
CHANGE_EVENTS = (EXPENSE_ADDED, EXPENSE_UPDATED, EXPENSE_DELETED, BUDGET_SET)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.setdefault(name, [])
        if handler not in handlers:
            handlers.append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now(timezone.utc).isoformat(), payload=payload)
        logger.debug("publishing %s to %d handler(s)", name, len(handlers))
        return [handler(event, payload) for handler in list(handlers)]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


def budget_alert_handler(event: Event, payload: dict) -> dict:
    """Recompute the period's budget status and alerts from a fresh snapshot.

    payload keys: ``expenses`` (owner's records), ``budget`` (Maybe, Budget or
    None), ``period_key`` and optionally ``locale``.
    """
    period_key = payload.get("period_key")
    if not period_key:
        return {}
    result = aggregate(payload.get("expenses", ()), Period.for_month(period_key))
    budget = payload.get("budget")
    status = evaluate(result, budget)
    advice = advise(result, budget, payload.get("locale", DEFAULT_LOCALE))
    return {
        "event": event.name,
        "period_key": period_key,
        "status": status_key(status),
        "ratio": status.ratio,
        "alerts": list(advice.alerts),
    }


event_bus = EventBus()


def register_default_handlers(bus: EventBus = event_bus) -> None:
    for name in CHANGE_EVENTS:
        bus.subscribe(name, budget_alert_handler)


register_default_handlers()
