"""Alert routes. Every route acts on the alerts of the caller (X-User-Id)."""
import uuid

from fastapi import APIRouter, Response, status

from market_alerts.deps import AlertServiceDep, OwnerId
from market_alerts.schemas import (ActiveAlertCount, AlertCreate, AlertRead,
                                   ApiResponse)

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.post(
    "", response_model=ApiResponse[AlertRead], status_code=status.HTTP_201_CREATED
)
async def create_alert(
    body: AlertCreate, owner_id: OwnerId, service: AlertServiceDep
) -> ApiResponse[AlertRead]:
    """Create a one-shot alert.

    CURRENCY targets must be 3-letter ISO codes; STOCK targets are symbols of
    at most 20 characters. Both are stored uppercase.
    """
    alert = await service.create_alert(owner_id, body)
    return ApiResponse(data=AlertRead.model_validate(alert))


@router.get("", response_model=ApiResponse[list[AlertRead]])
async def list_alerts(owner_id: OwnerId, service: AlertServiceDep) -> ApiResponse[list[AlertRead]]:
    alerts = await service.list_alerts(owner_id)
    return ApiResponse(data=[AlertRead.model_validate(a) for a in alerts])


@router.get("/active-count", response_model=ApiResponse[ActiveAlertCount])
async def active_alert_count(
    owner_id: OwnerId, service: AlertServiceDep
) -> ApiResponse[ActiveAlertCount]:
    return ApiResponse(data=ActiveAlertCount(count=await service.active_count(owner_id)))


@router.get("/triggered", response_model=ApiResponse[list[AlertRead]])
async def triggered_alerts(
    owner_id: OwnerId, service: AlertServiceDep
) -> ApiResponse[list[AlertRead]]:
    """Alerts that have fired, most recent first."""
    alerts = await service.triggered_alerts(owner_id)
    return ApiResponse(data=[AlertRead.model_validate(a) for a in alerts])


@router.get("/{alert_id}", response_model=ApiResponse[AlertRead])
async def get_alert(
    alert_id: uuid.UUID, owner_id: OwnerId, service: AlertServiceDep
) -> ApiResponse[AlertRead]:
    alert = await service.get_alert(owner_id, alert_id)
    return ApiResponse(data=AlertRead.model_validate(alert))


@router.delete("/{alert_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_alert(
    alert_id: uuid.UUID, owner_id: OwnerId, service: AlertServiceDep
) -> Response:
    await service.delete_alert(owner_id, alert_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{alert_id}/toggle", response_model=ApiResponse[AlertRead])
async def toggle_alert(
    alert_id: uuid.UUID, owner_id: OwnerId, service: AlertServiceDep
) -> ApiResponse[AlertRead]:
    """Pause or resume an alert. A triggered alert cannot be re-armed (409)."""
    alert = await service.toggle_alert(owner_id, alert_id)
    return ApiResponse(data=AlertRead.model_validate(alert))
