"""Alert sweep tests: trigger once, notify once, never re-arm."""
import asyncio
from decimal import Decimal

import pytest
from fakes import FakeStockProvider, RecordingNotifier

from market_alerts.db import Alert, AlertCondition, InstrumentKind
from market_alerts.providers.core import ProviderChain
from market_alerts.services import AlertEvaluator, StockService, should_trigger


def _alert(alert_store, target="AAPL", condition=AlertCondition.ABOVE, threshold="150",
           kind=InstrumentKind.STOCK, owner="user-1") -> Alert:
    return alert_store.add(
        Alert(
            owner_id=owner,
            kind=kind,
            target=target,
            condition=condition,
            threshold=Decimal(threshold),
            notify_address=f"{owner}@example.com",
        )
    )


@pytest.mark.parametrize(
    "condition, current, threshold, expected",
    [
        (AlertCondition.ABOVE, "153", "150", True),
        (AlertCondition.ABOVE, "150", "150", False),
        (AlertCondition.ABOVE, "149.99", "150", False),
        (AlertCondition.BELOW, "149.99", "150", True),
        (AlertCondition.BELOW, "150", "150", False),
    ],
)
def test_should_trigger(condition, current, threshold, expected):
    assert should_trigger(condition, Decimal(current), Decimal(threshold)) is expected


@pytest.mark.asyncio
async def test_above_alert_triggers_and_notifies_once(evaluator, alert_store, notifier):
    alert = _alert(alert_store)

    report = await evaluator.run_sweep()

    assert report.checked == 1
    assert report.triggered == 1
    stored = alert_store.get(alert.id)
    assert stored.active is False
    assert stored.triggered_value == Decimal("153")
    assert stored.triggered_at is not None
    assert len(notifier.sent) == 1
    address, subject, body = notifier.sent[0]
    assert address == "user-1@example.com"
    assert subject.startswith("Market alert: AAPL is above 150")
    assert "153" in body


@pytest.mark.asyncio
async def test_triggered_alert_is_left_alone_by_later_sweeps(evaluator, alert_store, notifier):
    alert = _alert(alert_store)
    await evaluator.run_sweep()
    first = alert_store.get(alert.id)

    second_report = await evaluator.run_sweep()
    await evaluator.run_sweep()

    assert second_report.checked == 0
    assert len(notifier.sent) == 1
    assert alert_store.get(alert.id).triggered_at == first.triggered_at


@pytest.mark.asyncio
async def test_untriggered_alert_stays_active(evaluator, alert_store, notifier):
    alert = _alert(alert_store, condition=AlertCondition.BELOW)

    report = await evaluator.run_sweep()

    assert report.triggered == 0
    assert alert_store.get(alert.id).active is True
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_paused_alert_is_not_evaluated(evaluator, alert_store, notifier):
    alert = _alert(alert_store)
    alert_store.toggle_for_owner(alert.id, "user-1")

    report = await evaluator.run_sweep()

    assert report.checked == 0
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_currency_alert_compares_usd_per_unit_of_target(
    evaluator, alert_store, notifier, rate_provider
):
    gbp = _alert(
        alert_store, target="GBP", condition=AlertCondition.ABOVE, threshold="1.20",
        kind=InstrumentKind.CURRENCY,
    )
    eur = _alert(
        alert_store, target="EUR", condition=AlertCondition.ABOVE, threshold="1.0",
        kind=InstrumentKind.CURRENCY, owner="user-2",
    )

    report = await evaluator.run_sweep()

    assert report.triggered == 2
    assert alert_store.get(gbp.id).triggered_value == Decimal("1.27")
    assert alert_store.get(eur.id).triggered_value == Decimal("1.087")
    assert sorted(rate_provider.calls) == ["EUR", "GBP"]
    assert len(notifier.sent) == 2


@pytest.mark.asyncio
async def test_concurrent_evaluators_notify_once(
    alert_store, currency_service, stock_service, notifier
):
    alerts = [_alert(alert_store, owner=f"user-{i}") for i in range(3)]
    first = AlertEvaluator(alert_store, currency_service, stock_service, notifier)
    second = AlertEvaluator(alert_store, currency_service, stock_service, notifier)

    reports = await asyncio.gather(first.run_sweep(), second.run_sweep())

    assert sum(r.triggered for r in reports) == 3
    assert len(notifier.sent) == 3
    assert sorted(a for a, _, _ in notifier.sent) == sorted(
        f"{a.owner_id}@example.com" for a in alerts
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failing", [RecordingNotifier(fail=True), RecordingNotifier(raises=OSError("smtp down"))]
)
async def test_failed_notification_does_not_rearm(
    alert_store, currency_service, stock_service, failing, caplog
):
    alert = _alert(alert_store)
    evaluator = AlertEvaluator(alert_store, currency_service, stock_service, failing)

    report = await evaluator.run_sweep()
    again = await evaluator.run_sweep()

    assert report.triggered == 1
    assert report.notification_failures == 1
    assert again.checked == 0
    assert alert_store.get(alert.id).active is False
    assert len(failing.sent) == 1
    assert f"Notification for alert {alert.id}" in caplog.text


@pytest.mark.asyncio
async def test_one_failing_alert_does_not_block_others(
    alert_store, cache, price_store, currency_service, notifier
):
    provider = FakeStockProvider(prices={"AAPL": "153"})
    stock_service = StockService(ProviderChain("stock", [provider]), cache, price_store)
    evaluator = AlertEvaluator(alert_store, currency_service, stock_service, notifier)
    missing = _alert(alert_store, target="NOPE")
    good = _alert(alert_store)

    report = await evaluator.run_sweep()

    assert report.checked == 2
    assert report.failed == 1
    assert report.triggered == 1
    assert alert_store.get(missing.id).active is True
    assert alert_store.get(good.id).active is False


@pytest.mark.asyncio
async def test_overlapping_sweep_is_skipped(
    alert_store, currency_service, stock_service, notifier
):
    entered = asyncio.Event()
    gate = asyncio.Event()

    class SlowNotifier(RecordingNotifier):
        async def send(self, address, subject, body, html=None):
            entered.set()
            await gate.wait()
            return await super().send(address, subject, body, html)

    slow = SlowNotifier()
    _alert(alert_store)
    evaluator = AlertEvaluator(alert_store, currency_service, stock_service, slow)

    running = asyncio.create_task(evaluator.run_sweep())
    await entered.wait()
    skipped = await evaluator.run_sweep()
    gate.set()
    report = await running

    assert skipped is None
    assert report.triggered == 1
    assert len(slow.sent) == 1
