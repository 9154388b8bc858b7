from datetime import date

from core.domain import Budget, Category, ExpenseRecord
from core.events import (
    BUDGET_SET,
    EXPENSE_ADDED,
    EXPENSE_DELETED,
    Event,
    EventBus,
    budget_alert_handler,
    event_bus,
)


def make_payload(limit=None, amounts=(100,)):
    expenses = tuple(
        ExpenseRecord(owner_id="u1", amount=a, category=Category.FOOD, occurred_on=date(2024, 6, 3))
        for a in amounts
    )
    budget = Budget("u1", "2024-06", limit) if limit is not None else None
    return {"expenses": expenses, "budget": budget, "period_key": "2024-06", "locale": "en"}


def test_event_bus_subscribe_and_publish():
    bus = EventBus()
    seen = []

    def handler(event: Event, payload: dict) -> dict:
        seen.append(event.name)
        return {"ok": True}

    bus.subscribe(EXPENSE_ADDED, handler)
    assert bus.publish(EXPENSE_ADDED, {}) == [{"ok": True}]
    assert bus.publish(EXPENSE_DELETED, {}) == []
    assert seen == [EXPENSE_ADDED]


def test_subscribe_twice_runs_handler_once():
    bus = EventBus()

    def handler(event, payload):
        return {}

    bus.subscribe(BUDGET_SET, handler)
    bus.subscribe(BUDGET_SET, handler)
    assert len(bus.publish(BUDGET_SET, {})) == 1


def test_unsubscribe():
    bus = EventBus()
    calls = []

    def handler(event, payload):
        calls.append(payload)
        return {}

    bus.subscribe(EXPENSE_ADDED, handler)
    bus.publish(EXPENSE_ADDED, {"n": 1})
    bus.unsubscribe(EXPENSE_ADDED, handler)
    bus.publish(EXPENSE_ADDED, {"n": 2})
    assert calls == [{"n": 1}]


def test_budget_alert_handler_reports_overspend():
    event = Event(name=EXPENSE_ADDED, ts="2024-06-03T10:00:00+00:00", payload={})
    result = budget_alert_handler(event, make_payload(limit=100, amounts=(80, 40)))
    assert result["status"] == "over_budget"
    assert "You are over your budget by 20%." in result["alerts"]


def test_budget_alert_handler_without_budget():
    event = Event(name=EXPENSE_ADDED, ts="", payload={})
    result = budget_alert_handler(event, make_payload())
    assert result["status"] == "no_budget"
    assert result["alerts"] == []


def test_budget_alert_handler_is_pure():
    event = Event(name=BUDGET_SET, ts="", payload={})
    payload = make_payload(limit=1000)
    assert budget_alert_handler(event, payload) == budget_alert_handler(event, payload)


def test_default_bus_recomputes_on_every_change_event():
    for name in (EXPENSE_ADDED, EXPENSE_DELETED, BUDGET_SET):
        results = event_bus.publish(name, make_payload(limit=110, amounts=(100,)))
        assert any(r.get("alerts") == ["You have spent more than 85% of your budget.",
                                       'Your top spending in "Food" is 100% of the total. Consider diversifying.']
                   for r in results)
