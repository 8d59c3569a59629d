"""Durable store tests against SQLite."""
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from market_alerts.db import (Alert, AlertCondition, Budget, BudgetPeriod,
                              InstrumentKind, StockPriceRecord)
from market_alerts.errors import AlertAlreadyTriggered
from market_alerts.utils import utcnow


def _alert(owner: str = "alice", **overrides) -> Alert:
    fields = {
        "owner_id": owner,
        "kind": InstrumentKind.STOCK,
        "target": "AAPL",
        "condition": AlertCondition.ABOVE,
        "threshold": Decimal("150.00"),
        "notify_address": f"{owner}@example.com",
    }
    fields.update(overrides)
    return Alert(**fields)


def test_rate_history_is_newest_first_and_windowed(rate_store):
    now = utcnow()
    rate_store.append_rates("USD", {"EUR": Decimal("0.90")}, "a", observed_at=now - timedelta(days=40))
    rate_store.append_rates("USD", {"EUR": Decimal("0.91")}, "a", observed_at=now - timedelta(days=2))
    rate_store.append_rates("USD", {"EUR": Decimal("0.92")}, "b", observed_at=now)

    history = rate_store.history("USD", "EUR", now - timedelta(days=30))

    assert [r.rate for r in history] == [Decimal("0.92"), Decimal("0.91")]
    assert history[0].source == "b"


def test_rate_snapshot_is_written_in_one_call(rate_store):
    written = rate_store.append_rates(
        "USD", {"EUR": Decimal("0.92"), "GBP": Decimal("0.79")}, "a"
    )
    recent = rate_store.recent_rates("USD", utcnow() - timedelta(hours=1))

    assert written == 2
    assert {r.target_currency for r in recent} == {"EUR", "GBP"}
    assert rate_store.targets_seen_since(utcnow() - timedelta(hours=1)) == ["EUR", "GBP"]


def test_rate_reaper_deletes_only_old_records(rate_store):
    now = utcnow()
    rate_store.append_rates("USD", {"EUR": Decimal("0.9")}, "a", observed_at=now - timedelta(days=31))
    rate_store.append_rates("USD", {"EUR": Decimal("0.9")}, "a", observed_at=now)

    assert rate_store.delete_older_than(now - timedelta(days=30)) == 1
    assert rate_store.delete_older_than(now - timedelta(days=30)) == 0
    assert rate_store.last_observed_at() == now


def test_empty_stores_return_empty_results(rate_store, price_store):
    since = utcnow() - timedelta(days=1)
    assert rate_store.history("USD", "EUR", since) == []
    assert rate_store.last_observed_at() is None
    assert price_store.latest("AAPL", since) is None
    assert price_store.history("AAPL", 10) == []


def test_price_history_is_limited_by_count(price_store):
    now = utcnow()
    for minutes, price in [(30, "150"), (20, "151"), (10, "152")]:
        price_store.append(
            StockPriceRecord(
                symbol="AAPL",
                price=Decimal(price),
                open=Decimal(price),
                high=Decimal(price),
                low=Decimal(price),
                observed_at=now - timedelta(minutes=minutes),
            )
        )

    history = price_store.history("AAPL", 2)

    assert [r.price for r in history] == [Decimal("152"), Decimal("151")]
    assert price_store.latest("AAPL", now - timedelta(hours=1)).price == Decimal("152")
    assert price_store.latest("AAPL", now) is None


def test_alerts_are_scoped_by_owner(alert_store):
    mine = alert_store.add(_alert("alice"))
    alert_store.add(_alert("bob"))

    assert [a.id for a in alert_store.list_for_owner("alice")] == [mine.id]
    assert alert_store.get_for_owner(mine.id, "bob") is None
    assert alert_store.delete_for_owner(mine.id, "bob") is False
    assert alert_store.delete_for_owner(mine.id, "alice") is True
    assert alert_store.get(mine.id) is None


def test_mark_triggered_claims_only_once(alert_store):
    alert = alert_store.add(_alert())
    now = utcnow()

    first = alert_store.mark_triggered(alert.id, Decimal("153.00"), now)
    second = alert_store.mark_triggered(alert.id, Decimal("154.00"), now)

    assert first is not None
    assert first.active is False
    assert first.triggered_value == Decimal("153.00")
    assert second is None
    assert alert_store.get(alert.id).triggered_value == Decimal("153.00")
    assert alert_store.list_active() == []


def test_timestamps_round_trip_as_aware_utc(alert_store, rate_store):
    alert = alert_store.add(_alert())
    local = datetime(2026, 3, 1, 14, 30, tzinfo=timezone(timedelta(hours=5)))

    alert_store.mark_triggered(alert.id, Decimal("153.00"), local)
    rate_store.append_rates("USD", {"EUR": Decimal("0.92")}, "a", observed_at=local)

    stored = alert_store.get(alert.id)
    assert stored.triggered_at == datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
    assert stored.triggered_at.utcoffset() == timedelta(0)
    assert stored.created_at.tzinfo is not None
    since = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    assert [r.observed_at for r in rate_store.history("USD", "EUR", since)] == [
        datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
    ]


def test_mark_triggered_skips_paused_alert(alert_store):
    alert = alert_store.add(_alert(active=False))
    assert alert_store.mark_triggered(alert.id, Decimal("1"), utcnow()) is None
    assert alert_store.mark_triggered(uuid.uuid4(), Decimal("1"), utcnow()) is None


def test_toggle_rejects_triggered_alert(alert_store):
    alert = alert_store.add(_alert())
    paused = alert_store.toggle_for_owner(alert.id, "alice")
    assert paused.active is False
    resumed = alert_store.toggle_for_owner(alert.id, "alice")
    assert resumed.active is True

    alert_store.mark_triggered(alert.id, Decimal("160"), utcnow())
    with pytest.raises(AlertAlreadyTriggered):
        alert_store.toggle_for_owner(alert.id, "alice")
    assert alert_store.count_active_for_owner("alice") == 0
    assert [a.id for a in alert_store.list_triggered_for_owner("alice")] == [alert.id]


def test_budget_filters(budget_store):
    now = utcnow()
    current = budget_store.add(
        Budget(
            owner_id="alice",
            name="Rent",
            amount=Decimal("1200.00"),
            currency="EUR",
            categories=["housing"],
            start_date=now - timedelta(days=1),
            end_date=now + timedelta(days=30),
        )
    )
    expired = budget_store.add(
        Budget(
            owner_id="alice",
            name="Trip",
            amount=Decimal("800.00"),
            currency="JPY",
            period=BudgetPeriod.YEARLY,
            end_date=now - timedelta(days=1),
        )
    )

    assert [b.id for b in budget_store.list_active_for_owner("alice", now)] == [current.id]
    assert [b.id for b in budget_store.list_for_owner("alice", BudgetPeriod.YEARLY)] == [expired.id]
    assert budget_store.list_for_owner("bob") == []

    updated = budget_store.update_for_owner(current.id, "alice", {"amount": Decimal("1300.00")})
    assert updated.amount == Decimal("1300.00")
    assert budget_store.update_for_owner(current.id, "bob", {"amount": Decimal("1")}) is None
