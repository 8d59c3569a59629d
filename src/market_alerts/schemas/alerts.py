"""Alert request/response schemas."""
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from market_alerts.db.models import AlertCondition, InstrumentKind
from market_alerts.schemas.market import JsonDecimal


class AlertCreate(BaseModel):
    kind: InstrumentKind
    target: str = Field(min_length=1, max_length=20)
    condition: AlertCondition
    threshold: Decimal = Field(ge=0)
    notify_address: EmailStr


class AlertRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    kind: InstrumentKind
    target: str
    condition: AlertCondition
    threshold: JsonDecimal
    notify_address: str
    active: bool
    created_at: datetime
    updated_at: datetime
    triggered_at: datetime | None = None
    triggered_value: JsonDecimal | None = None


class ActiveAlertCount(BaseModel):
    count: int
