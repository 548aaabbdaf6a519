"""Alert trigger history API routes."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pricealert.api.dependencies import get_alert_service
from pricealert.core.exceptions import StoreError
from pricealert.services.alert_service import AlertService
from pricealert.utils.formatting import format_history

router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("")
async def get_history(
    limit: int = Query(default=50, ge=1, le=500),
    service: AlertService = Depends(get_alert_service)
):
    """Triggered alerts, newest first."""
    try:
        records = await service.list_history(limit)
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return {
        "count": len(records),
        "summary": format_history(records),
        "history": [
            {
                "alert_id": record.alert_id,
                "symbol": record.symbol,
                "target_price": record.target_price,
                "actual_price": record.actual_price,
                "direction": record.direction,
                "triggered_at": record.triggered_at,
                "user_id": record.user_id
            }
            for record in records
        ]
    }
