"""Quote lookup API routes."""
from fastapi import APIRouter, Depends, HTTPException, status
from pricealert.api.dependencies import get_alert_service
from pricealert.core.exceptions import AlertValidationError, QuoteUnavailable
from pricealert.services.alert_service import AlertService
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/quotes", tags=["quotes"])


@router.get("/{symbol}")
async def get_quote(
    symbol: str,
    force: bool = False,
    service: AlertService = Depends(get_alert_service)
):
    """
    Get the current quote for a symbol.

    Pass force=true to bypass the quote cache.
    """
    try:
        quote = await service.get_quote(symbol, force=force)
    except AlertValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except QuoteUnavailable as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return quote.to_dict()


@router.delete("/cache")
async def clear_quote_cache(service: AlertService = Depends(get_alert_service)):
    """Drop every cached quote."""
    service.clear_quote_cache()
    return {"message": "Quote cache cleared"}
