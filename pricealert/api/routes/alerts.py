"""Price alert management API routes."""
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from typing import List, Optional
import logging

from pricealert.api.dependencies import get_alert_service, raise_for_result
from pricealert.core.exceptions import MonitorStateError, StoreError
from pricealert.services.alert_service import AlertService
from pricealert.services.alert_store import Alert, AlertDirection

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/alerts", tags=["alerts"])


class CreateAlertRequest(BaseModel):
    """Request to create a price alert."""
    symbol: str
    target_price: float
    direction: AlertDirection
    current_price: Optional[float] = None


class NearMarketAlertRequest(BaseModel):
    """Request to create an alert a small percentage away from the market."""
    symbol: str
    direction: AlertDirection
    offset_pct: float = Field(default=1.0, gt=0)


class UpdateAlertRequest(BaseModel):
    """Partial alert update."""
    target_price: Optional[float] = None
    direction: Optional[AlertDirection] = None


class SimulateRequest(BaseModel):
    """Simulated price move for testing alerts."""
    symbol: str
    percentage_change: float


class AlertResponse(BaseModel):
    """Alert information response."""
    id: str
    symbol: str
    current_price: float
    target_price: float
    direction: AlertDirection
    active: bool
    created_at: int
    user_id: str


def _alert_response(alert: Alert) -> dict:
    return {
        "id": alert.id,
        "symbol": alert.symbol,
        "current_price": alert.current_price,
        "target_price": alert.target_price,
        "direction": alert.direction,
        "active": alert.active,
        "created_at": alert.created_at,
        "user_id": alert.user_id
    }


@router.get("", response_model=List[AlertResponse])
async def list_alerts(service: AlertService = Depends(get_alert_service)):
    """List the configured user's alerts, newest first."""
    try:
        alerts = await service.list_alerts()
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return [_alert_response(alert) for alert in alerts]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_alert(
    request: CreateAlertRequest,
    service: AlertService = Depends(get_alert_service)
):
    """Create a new active alert."""
    result = raise_for_result(await service.create_alert(
        request.symbol,
        request.target_price,
        request.direction,
        current_price=request.current_price
    ))

    return {
        "id": result.alert_id,
        "alert": _alert_response(result.alert),
        "message": result.reason
    }


@router.post("/near-market", status_code=status.HTTP_201_CREATED)
async def create_near_market_alert(
    request: NearMarketAlertRequest,
    service: AlertService = Depends(get_alert_service)
):
    """Create an alert whose target is offset_pct away from the current price."""
    result = raise_for_result(await service.create_near_market_alert(
        request.symbol,
        request.direction,
        offset_pct=request.offset_pct
    ))

    return {
        "id": result.alert_id,
        "alert": _alert_response(result.alert),
        "message": result.reason
    }


@router.post("/check")
async def check_alerts(service: AlertService = Depends(get_alert_service)):
    """Run one alert check cycle immediately."""
    try:
        report = await service.check_now()
    except MonitorStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return {
        "checked": report.checked,
        "triggered": report.triggered,
        "skipped": report.skipped,
        "failed": report.failed
    }


@router.post("/simulate")
async def simulate_price_change(
    request: SimulateRequest,
    service: AlertService = Depends(get_alert_service)
):
    """Store a simulated price for a symbol and re-check alerts."""
    result = raise_for_result(
        await service.simulate_price_change(request.symbol, request.percentage_change)
    )
    return {"message": result.reason}


@router.patch("/{alert_id}")
async def update_alert(
    alert_id: str,
    request: UpdateAlertRequest,
    service: AlertService = Depends(get_alert_service)
):
    """Edit the target price and/or direction of an active alert."""
    result = raise_for_result(await service.update_alert(
        alert_id,
        target_price=request.target_price,
        direction=request.direction
    ))

    return {
        "alert": _alert_response(result.alert),
        "message": result.reason
    }


@router.post("/{alert_id}/deactivate")
async def deactivate_alert(
    alert_id: str,
    service: AlertService = Depends(get_alert_service)
):
    """Deactivate an alert without deleting it."""
    result = raise_for_result(await service.deactivate_alert(alert_id))
    return {"id": alert_id, "message": result.reason}


@router.delete("/{alert_id}")
async def delete_alert(
    alert_id: str,
    service: AlertService = Depends(get_alert_service)
):
    """Delete an alert."""
    result = raise_for_result(await service.delete_alert(alert_id))
    return {"id": alert_id, "message": result.reason}
