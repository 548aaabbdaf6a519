"""Request dependencies for API routes."""
from fastapi import HTTPException, Request, status
from pricealert.services.alert_service import ActionError, ActionResult, AlertService


# HTTP status for each ActionResult failure category
ERROR_STATUS = {
    ActionError.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ActionError.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ActionError.CONFLICT: status.HTTP_409_CONFLICT,
    ActionError.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_alert_service(request: Request) -> AlertService:
    """Alert service of the container built at startup."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up"
        )
    return container.service


def raise_for_result(result: ActionResult) -> ActionResult:
    """Raise the HTTPException matching a failed action, else return it."""
    if not result.ok:
        raise HTTPException(
            status_code=ERROR_STATUS.get(result.error, status.HTTP_400_BAD_REQUEST),
            detail=result.reason
        )
    return result
