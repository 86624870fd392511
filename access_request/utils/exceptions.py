# =======================================================================================
# access_request/utils/exceptions.py - Custom Exceptions
# =======================================================================================
class AccessRequestError(Exception):
    """Base exception for the access request service."""
    pass

class GatewayTransportError(AccessRequestError):
    """Raised when the gateway could not be reached or sent an unreadable response."""
    pass

class AssetMapError(AccessRequestError):
    """Raised when the configured asset map cannot be parsed."""
    pass
