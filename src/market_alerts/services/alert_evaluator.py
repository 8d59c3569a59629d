"""Scheduled evaluation of active alerts.

An alert moves from active to triggered at most once. The trigger is claimed by
a conditional write before any notification goes out, so concurrent sweeps can
never notify twice, and a failed notification never re-arms the alert.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from market_alerts.db import Alert, AlertCondition, AlertStore, InstrumentKind
from market_alerts.errors import MarketAlertsError, NotificationFailed
from market_alerts.notifiers import NotificationSender
from market_alerts.services.currency_service import CurrencyService
from market_alerts.services.stock_service import StockService
from market_alerts.utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5


@dataclass
class SweepReport:
    checked: int = 0
    triggered: int = 0
    failed: int = 0
    notification_failures: int = 0


class _Outcome(Enum):
    UNCHANGED = "unchanged"
    TRIGGERED = "triggered"
    TRIGGERED_NOT_NOTIFIED = "triggered_not_notified"
    FAILED = "failed"


def should_trigger(condition: AlertCondition, current: Decimal, threshold: Decimal) -> bool:
    """ABOVE fires on current > threshold, BELOW on current < threshold. Equality never fires."""
    if condition == AlertCondition.ABOVE:
        return current > threshold
    if condition == AlertCondition.BELOW:
        return current < threshold
    raise ValueError(f"Unknown alert condition: {condition}")


def render_message(alert: Alert, value: Decimal, observed_at: datetime) -> tuple[str, str]:
    """Subject and plain text body for a triggered alert."""
    direction = "above" if alert.condition == AlertCondition.ABOVE else "below"
    subject = f"Market alert: {alert.target} is {direction} {alert.threshold}"
    body = (
        f"Your {alert.kind.value.lower()} alert for {alert.target} has been triggered.\n"
        f"\n"
        f"Condition: {alert.condition.value} {alert.threshold}\n"
        f"Observed value: {value}\n"
        f"Observed at: {observed_at.strftime('%Y-%m-%d %H:%M:%S')} UTC\n"
        f"\n"
        f"This alert is now inactive.\n"
    )
    return subject, body


class AlertEvaluator:
    """Checks every active alert against current market values."""

    def __init__(
        self,
        store: AlertStore,
        currency_service: CurrencyService,
        stock_service: StockService,
        notifier: NotificationSender,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self._store = store
        self._currency = currency_service
        self._stocks = stock_service
        self._notifier = notifier
        self._concurrency = concurrency
        self._lock = asyncio.Lock()

    async def current_value(self, alert: Alert) -> Decimal:
        """Quote price for STOCK alerts; USD per unit of the target for CURRENCY alerts."""
        if alert.kind == InstrumentKind.STOCK:
            quote = await self._stocks.get_quote(alert.target)
            return quote.price
        if alert.kind == InstrumentKind.CURRENCY:
            return await self._currency.get_rate_against_usd(alert.target)
        raise ValueError(f"Unsupported instrument kind: {alert.kind}")

    async def run_sweep(self) -> SweepReport | None:
        """Evaluate every active alert once.

        Returns:
            The sweep report, or None when another sweep is already running.
        """
        if self._lock.locked():
            logger.info("Alert sweep already in progress; skipping")
            return None
        async with self._lock:
            alerts = await asyncio.to_thread(self._store.list_active)
            semaphore = asyncio.Semaphore(self._concurrency)

            async def bounded(alert: Alert) -> _Outcome:
                async with semaphore:
                    return await self._evaluate(alert)

            results = await asyncio.gather(
                *(bounded(a) for a in alerts), return_exceptions=True
            )

        report = SweepReport(checked=len(alerts))
        for alert, result in zip(alerts, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Unexpected error evaluating alert %s", alert.id, exc_info=result
                )
                report.failed += 1
            elif result == _Outcome.FAILED:
                report.failed += 1
            elif result == _Outcome.TRIGGERED:
                report.triggered += 1
            elif result == _Outcome.TRIGGERED_NOT_NOTIFIED:
                report.triggered += 1
                report.notification_failures += 1
        logger.info(
            "Alert sweep done: %d checked, %d triggered, %d failed",
            report.checked, report.triggered, report.failed,
        )
        return report

    async def _evaluate(self, alert: Alert) -> _Outcome:
        try:
            value = await self.current_value(alert)
        except (MarketAlertsError, ValueError) as e:
            logger.warning("Could not evaluate alert %s (%s): %s", alert.id, alert.target, e)
            return _Outcome.FAILED

        if not should_trigger(alert.condition, value, alert.threshold):
            return _Outcome.UNCHANGED

        observed_at = utcnow()
        try:
            claimed = await asyncio.to_thread(
                self._store.mark_triggered, alert.id, value, observed_at
            )
        except SQLAlchemyError as e:
            logger.error("Failed to mark alert %s as triggered: %s", alert.id, e)
            return _Outcome.FAILED
        if claimed is None:
            logger.info("Alert %s was already handled elsewhere", alert.id)
            return _Outcome.UNCHANGED

        logger.info(
            "Alert %s triggered: %s %s %s (observed %s)",
            alert.id, alert.target, alert.condition.value, alert.threshold, value,
        )
        if await self._notify(claimed, value, observed_at):
            return _Outcome.TRIGGERED
        return _Outcome.TRIGGERED_NOT_NOTIFIED

    async def _notify(self, alert: Alert, value: Decimal, observed_at: datetime) -> bool:
        subject, body = render_message(alert, value, observed_at)
        try:
            result = await self._notifier.send(alert.notify_address, subject, body)
        except Exception as e:  # pylint: disable=broad-except
            failure = NotificationFailed(f"Notification for alert {alert.id} raised: {e}")
            logger.error("%s", failure, exc_info=e)
            return False
        if not result.success:
            failure = NotificationFailed(
                f"Notification for alert {alert.id} via {result.channel} failed: {result.error}"
            )
            logger.error("%s", failure)
            return False
        return True
