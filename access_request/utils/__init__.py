# =======================================================================================
# access_request/utils/__init__.py - Utils Package
# =======================================================================================
from .exceptions import *
from .validators import *

__all__ = [
    "AccessRequestError", "GatewayTransportError",
    "AssetMapError", "AssetIdentifierValidator",
]
