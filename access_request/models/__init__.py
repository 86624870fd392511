# =======================================================================================
# access_request/models/__init__.py - Models Package
# =======================================================================================
from .schemas import *
from .enums import *

__all__ = [
    "AccessRequestSettings", "AssetMapping", "ResolvedAsset", "Actor", "ActorAttributes",
    "GatewayRequest", "GatewayResult", "AccessRequestResult", "ProxyAccessRequest",
    "AssetCard", "AssetListResponse", "GatewayHealthResponse", "HealthResponse",
    "GatewayOutcome", "RequestStatus", "OverrideFlag", "HealthStatus",
    "DenialReason", "RequestMethod",
]
