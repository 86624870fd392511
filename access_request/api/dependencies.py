# =======================================================================================
# access_request/api/dependencies.py - FastAPI Dependencies
# =======================================================================================
from typing import Callable, Optional
from fastapi import Depends, Header, HTTPException
from ..config import config, load_access_settings
from ..database import db_manager
from ..models.schemas import AccessRequestSettings
from ..services.access_control import AccessRequestService
from ..services.asset_registry import AssetRegistryCache
from ..services.gateway_client import GatewayClient, HttpxSender
from ..services.rate_limiter import InMemoryRateLimiter
from ..services.user_directory import SqlUserDirectory, UserDirectory

# Shared across requests: HTTP connection pool, rate-limit windows, parsed asset map
gateway_client = GatewayClient(HttpxSender())
rate_limiter = InMemoryRateLimiter()
registry_cache = AssetRegistryCache(ttl_seconds=config.ASSET_MAP_CACHE_TTL)

def get_user_directory() -> UserDirectory:
    """Directory that checks out a pooled connection per lookup, never across the gateway call."""
    return SqlUserDirectory(db_manager.get_connection)

def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> int:
    """The user is authenticated upstream and identified by the X-User-Id header."""
    if not x_user_id or not x_user_id.strip().isdigit():
        raise HTTPException(status_code=401, detail="Authentication required")
    return int(x_user_id.strip())

def get_settings_provider() -> Callable[[], AccessRequestSettings]:
    return load_access_settings

def get_gateway_client() -> GatewayClient:
    return gateway_client

def get_access_service(
    directory: UserDirectory = Depends(get_user_directory),
    settings_provider: Callable[[], AccessRequestSettings] = Depends(get_settings_provider),
    gateway: GatewayClient = Depends(get_gateway_client),
) -> AccessRequestService:
    """Wire an AccessRequestService around the shared gateway client and rate limiter."""
    return AccessRequestService(
        directory=directory,
        gateway=gateway,
        rate_limiter=rate_limiter,
        settings_provider=settings_provider,
        registry_cache=registry_cache,
        rate_limit=config.RATE_LIMIT_MAX,
        rate_window=config.RATE_LIMIT_WINDOW,
    )
