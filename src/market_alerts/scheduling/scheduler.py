"""Periodic jobs: alert sweep, market data refresh, and history reaper.

Uses APScheduler's AsyncIOScheduler so every job runs on the application's
event loop. Each job is registered with max_instances=1 and coalesce=True and
wrapped in a SingleFlight guard, so overlapping ticks are skipped.
"""
import logging
from dataclasses import dataclass

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError

from market_alerts.errors import MarketAlertsError
from market_alerts.scheduling.singleflight import SingleFlight
from market_alerts.services import (AlertEvaluator, CurrencyService,
                                    StockService, SweepReport)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleConfig:
    alert_sweep_seconds: int = 300
    market_refresh_seconds: int = 3600
    reaper_seconds: int = 86400
    retention_days: int = 30


class MarketScheduler:
    """Owns the AsyncIOScheduler and the three recurring jobs.

    Usage:
        scheduler = MarketScheduler(evaluator, currency, stocks)
        scheduler.start()   # inside a running event loop
        scheduler.stop()
    """

    def __init__(
        self,
        evaluator: AlertEvaluator,
        currency_service: CurrencyService,
        stock_service: StockService,
        config: ScheduleConfig | None = None,
    ) -> None:
        self._evaluator = evaluator
        self._currency = currency_service
        self._stocks = stock_service
        self._config = config or ScheduleConfig()
        self._scheduler: AsyncIOScheduler | None = None

        self.sweep_job = SingleFlight("alert_sweep", self.sweep_alerts)
        self.refresh_job = SingleFlight("market_refresh", self.refresh_market_data)
        self.reaper_job = SingleFlight("record_reaper", self.purge_old_records)

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        """Register the interval jobs and start the scheduler."""
        if self.is_running:
            logger.warning("Scheduler already running.")
            return
        self._scheduler = AsyncIOScheduler(
            job_defaults={"coalesce": True, "max_instances": 1},
        )
        self._scheduler.add_job(
            self.sweep_job,
            IntervalTrigger(seconds=self._config.alert_sweep_seconds),
            id="alert_sweep",
            name="Evaluate active alerts",
        )
        self._scheduler.add_job(
            self.refresh_job,
            IntervalTrigger(seconds=self._config.market_refresh_seconds),
            id="market_refresh",
            name="Refresh major rates and trending quotes",
        )
        self._scheduler.add_job(
            self.reaper_job,
            IntervalTrigger(seconds=self._config.reaper_seconds),
            id="record_reaper",
            name="Delete old rate and price records",
        )
        self._scheduler.start()
        logger.info("MarketScheduler started.")

    def stop(self) -> None:
        """Stop without waiting for running jobs."""
        if self._scheduler is not None:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("MarketScheduler stopped.")

    def job_ids(self) -> list[str]:
        if self._scheduler is None:
            return []
        return [job.id for job in self._scheduler.get_jobs()]

    async def sweep_alerts(self) -> SweepReport | None:
        return await self._evaluator.run_sweep()

    async def refresh_market_data(self) -> None:
        """Refresh rates, then quotes; a failing domain does not stop the other."""
        for name, refresh in (
            ("currency", self._currency.refresh_major_rates),
            ("stock", self._stocks.refresh_watchlist),
        ):
            try:
                await refresh()
            except (MarketAlertsError, SQLAlchemyError) as e:
                logger.error("%s refresh failed: %s", name, e)

    async def purge_old_records(self) -> int:
        """Delete old records from both histories; returns the total deleted."""
        total = 0
        for name, purge in (
            ("rate", self._currency.purge_old_records),
            ("stock price", self._stocks.purge_old_records),
        ):
            try:
                total += await purge(self._config.retention_days)
            except SQLAlchemyError as e:
                logger.error("Failed to purge %s records: %s", name, e)
        return total
