# =======================================================================================
# access_request/models/enums.py - Enums and Constants
# =======================================================================================
from enum import Enum
from typing import Literal

# Type aliases for better type hints
GatewayOutcome = Literal["allowed", "denied", "error"]
RequestStatus = Literal[
    "allowed", "denied", "error",
    "rate_limited", "not_configured", "invalid_asset", "blocked", "no_credential",
]
OverrideFlag = Literal["allow", "deny"]
HealthStatus = Literal["ok", "not_implemented", "failed", "error", "not_configured"]

# Gateway accepts a request only with this exact status
GATEWAY_SUCCESS_STATUS = 201
# http_status recorded when no response was received
TRANSPORT_FAILURE_STATUS = 0

READER_SUFFIX = "reader"
MAIN_PROFILE_TYPE = "main"
MAX_REASON_LENGTH = 300

class DenialReason(Enum):
    """Denial predicates in evaluation priority order."""
    OVERRIDE = "override"
    MANUAL_PAUSE = "manual_pause"
    UNPAID = "unpaid"
    PAYMENT_PAUSE = "payment_pause"
    NO_MEMBER_ROLE = "no_member_role"

class RequestMethod(str, Enum):
    """How the user reached the access request."""
    WEBSITE = "website"
    QR = "qr"
    PROXY = "proxy"
