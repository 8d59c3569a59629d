"""Periodic job scheduling."""
from market_alerts.scheduling.scheduler import MarketScheduler, ScheduleConfig
from market_alerts.scheduling.singleflight import SingleFlight

__all__ = ["MarketScheduler", "ScheduleConfig", "SingleFlight"]
