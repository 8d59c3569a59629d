"""Owner-scoped alert management."""
import asyncio
import logging
import uuid

from market_alerts.db import Alert, AlertStore, InstrumentKind
from market_alerts.errors import NotFound
from market_alerts.providers.core import (normalize_currency_code,
                                          normalize_stock_symbol)
from market_alerts.schemas import AlertCreate

logger = logging.getLogger(__name__)


class AlertService:
    """CRUD over alerts belonging to one owner at a time.

    Every lookup is scoped by owner_id; another owner's alert is reported as
    NotFound, never as forbidden.
    """

    def __init__(self, store: AlertStore) -> None:
        self._store = store

    async def create_alert(self, owner_id: str, payload: AlertCreate) -> Alert:
        if payload.kind == InstrumentKind.CURRENCY:
            target = normalize_currency_code(payload.target)
        else:
            target = normalize_stock_symbol(payload.target)
        alert = Alert(
            owner_id=owner_id,
            kind=payload.kind,
            target=target,
            condition=payload.condition,
            threshold=payload.threshold,
            notify_address=str(payload.notify_address),
        )
        created = await asyncio.to_thread(self._store.add, alert)
        logger.info(
            "Alert %s created for %s: %s %s %s",
            created.id, owner_id, target, payload.condition.value, payload.threshold,
        )
        return created

    async def list_alerts(self, owner_id: str) -> list[Alert]:
        return await asyncio.to_thread(self._store.list_for_owner, owner_id)

    async def get_alert(self, owner_id: str, alert_id: uuid.UUID) -> Alert:
        alert = await asyncio.to_thread(self._store.get_for_owner, alert_id, owner_id)
        if alert is None:
            raise NotFound(f"Alert with ID {alert_id} not found")
        return alert

    async def delete_alert(self, owner_id: str, alert_id: uuid.UUID) -> None:
        deleted = await asyncio.to_thread(self._store.delete_for_owner, alert_id, owner_id)
        if not deleted:
            raise NotFound(f"Alert with ID {alert_id} not found")
        logger.info("Alert %s deleted by %s", alert_id, owner_id)

    async def toggle_alert(self, owner_id: str, alert_id: uuid.UUID) -> Alert:
        """Flip active on an untriggered alert.

        Raises:
            NotFound: If the owner has no such alert.
            AlertAlreadyTriggered: If the alert has already fired.
        """
        alert = await asyncio.to_thread(self._store.toggle_for_owner, alert_id, owner_id)
        if alert is None:
            raise NotFound(f"Alert with ID {alert_id} not found")
        return alert

    async def active_count(self, owner_id: str) -> int:
        return await asyncio.to_thread(self._store.count_active_for_owner, owner_id)

    async def triggered_alerts(self, owner_id: str) -> list[Alert]:
        """Fired alerts, most recently triggered first."""
        return await asyncio.to_thread(self._store.list_triggered_for_owner, owner_id)
