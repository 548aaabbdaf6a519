"""Health check endpoints for API and monitor status."""
from fastapi import APIRouter, Request
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Basic health check including the alert monitor state."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        return {"status": "starting", "service": "pricealert-api"}

    monitor = container.monitor
    return {
        "status": "healthy" if monitor.is_active else "degraded",
        "service": "pricealert-api",
        "monitor": {
            "state": monitor.state.value,
            "cycles_completed": monitor.cycles_completed
        },
        "cached_quotes": len(container.provider.cache)
    }
