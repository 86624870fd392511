# =======================================================================================
# access_request/api/routes/gateway.py - Gateway Health Endpoint
# =======================================================================================
from typing import Callable
from fastapi import APIRouter, Depends
from ...models.schemas import AccessRequestSettings, GatewayHealthResponse
from ...services.gateway_client import GatewayClient
from ..dependencies import get_gateway_client, get_settings_provider

router = APIRouter()


@router.get("/gateway/health", response_model=GatewayHealthResponse)
def gateway_health(
    settings_provider: Callable[[], AccessRequestSettings] = Depends(get_settings_provider),
    gateway: GatewayClient = Depends(get_gateway_client),
):
    """Probe the access gateway's health endpoint and report latency."""
    settings = settings_provider()
    return gateway.check_health(settings.gateway_url, settings.timeout_seconds, settings.health_suffix)
