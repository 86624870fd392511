# =======================================================================================
# access_request/api/routes/access.py - Access Request Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from ...models.enums import RequestMethod
from ...models.schemas import AccessRequestResult, ProxyAccessRequest
from ...services.access_control import AccessRequestService
from ...logging_config import get_logger
from ..dependencies import get_access_service, get_current_user_id

logger = get_logger(__name__)

router = APIRouter()

# HTTP status returned for each request status
STATUS_CODES = {
    "allowed": 200,
    "denied": 200,
    "error": 502,
    "rate_limited": 429,
    "not_configured": 503,
    "invalid_asset": 400,
    "blocked": 403,
    "no_credential": 422,
}

def _run(service: AccessRequestService, user_id: int, asset_id: str, method: str, source=None) -> JSONResponse:
    try:
        result = service.process_access_request(user_id, asset_id, method=method, source=source)
    except SQLAlchemyError as e:
        logger.error("access_request_database_error", uid=user_id, asset_id=asset_id, error=str(e))
        raise HTTPException(status_code=500, detail="Database error")
    return _to_response(result)

def _to_response(result: AccessRequestResult) -> JSONResponse:
    # The raw gateway body can carry transport errors; it is logged, not returned
    return JSONResponse(
        status_code=STATUS_CODES.get(result.status, 500),
        content=result.model_dump(mode="json", exclude={"gateway_result"}),
    )

@router.post("/access-request/{asset_id}", response_model=AccessRequestResult)
def request_asset_access(
    asset_id: str,
    method: RequestMethod = Query(RequestMethod.WEBSITE, description="website | qr"),
    user_id: int = Depends(get_current_user_id),
    service: AccessRequestService = Depends(get_access_service),
):
    """Send an access request for an asset on behalf of the signed-in user."""
    return _run(service, user_id, asset_id, method.value)

@router.post("/access-request", response_model=AccessRequestResult)
def proxy_access_request(
    request: ProxyAccessRequest,
    user_id: int = Depends(get_current_user_id),
    service: AccessRequestService = Depends(get_access_service),
):
    """Access request relayed by another client (kiosk, QR landing page)."""
    if not request.asset_identifier:
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "asset_identifier not provided."},
        )
    return _run(service, user_id, request.asset_identifier, request.method, request.source)
