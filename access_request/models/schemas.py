
# =======================================================================================
# access_request/models/schemas.py - Pydantic Models
# =======================================================================================
import math
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, computed_field, field_validator
from .enums import (
    GatewayOutcome, RequestStatus, OverrideFlag, HealthStatus,
    GATEWAY_SUCCESS_STATUS, TRANSPORT_FAILURE_STATUS,
)

DEFAULT_TIMEOUT_SECONDS = 5.0

# ========== Configuration surface ==========
class AccessRequestSettings(BaseModel):
    """Operator-managed settings, re-read for every access request."""
    gateway_url: str = ""
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    hmac_secret: str = ""
    asset_map: str = Field("", description="YAML mapping of asset id to reader/permission/display data")
    dry_run: bool = False
    user_block_field: str = ""
    user_block_message: str = "Your account is blocked from requesting access. Please contact support."
    payment_portal_url: str = ""
    member_role: str = "member"
    health_suffix: str = "/toolauth/req"

    # Denial templates; {payment_link} is replaced by a link to the payment portal
    override_message: str = "Your access has been suspended by an administrator. Please contact support."
    manual_pause_message: str = "Your membership is currently paused."
    unpaid_message: str = "Your most recent membership payment failed. {payment_link}"
    payment_pause_message: str = "Your membership payments are paused. {payment_link}"
    no_member_role_message: str = "An active membership is required to use this asset."
    default_denial_message: str = ""

    @field_validator("timeout_seconds")
    @classmethod
    def _bounded_timeout(cls, v: float) -> float:
        return v if math.isfinite(v) and v > 0 else DEFAULT_TIMEOUT_SECONDS

    @property
    def is_configured(self) -> bool:
        return bool(self.gateway_url.strip()) or self.dry_run

# ========== Asset registry ==========
class AssetMapping(BaseModel):
    """One entry of the configured asset map."""
    asset_id: str
    reader_name: Optional[str] = None
    permission_id: Optional[str] = None
    category: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None

class ResolvedAsset(BaseModel):
    asset_id: str
    reader_name: str
    permission_id: str

# ========== Actor ==========
class Actor(BaseModel):
    """The authenticated user issuing the request."""
    user_id: int
    email: Optional[str] = None

class ActorAttributes(BaseModel):
    """Account state consulted by the denial policy."""
    override: Optional[OverrideFlag] = None
    manual_pause: bool = False
    payment_failed: bool = False
    payment_pause: bool = False
    has_member_role: bool = True

# ========== Gateway ==========
class GatewayRequest(BaseModel):
    """Signed bytes plus the richer context kept for logging."""
    body: bytes
    headers: Dict[str, str]
    log_payload: Dict[str, Any]

class GatewayResult(BaseModel):
    http_status: int = Field(..., description="0 means no response was received")
    body: str = ""
    latency: float = Field(0.0, description="Wall-clock seconds spent on the call")
    request_id: Optional[str] = None

    @computed_field
    @property
    def outcome(self) -> GatewayOutcome:
        if self.http_status == GATEWAY_SUCCESS_STATUS:
            return "allowed"
        if self.http_status == TRANSPORT_FAILURE_STATUS:
            return "error"
        return "denied"

# ========== Result surface ==========
class AccessRequestResult(BaseModel):
    status: RequestStatus
    message: str
    outcome: Optional[GatewayOutcome] = None
    http_status: Optional[int] = None
    reason: Optional[str] = None
    latency: Optional[float] = None
    request_id: Optional[str] = None
    asset_id: Optional[str] = None
    reader_name: Optional[str] = None
    permission_id: Optional[str] = None
    gateway_result: Optional[GatewayResult] = None

# ========== HTTP surface ==========
class ProxyAccessRequest(BaseModel):
    """Proxy access request body."""
    asset_identifier: Optional[str] = Field(None, description="Asset identifier to open")
    method: str = Field("proxy", description="How the request was initiated")
    source: Optional[str] = None

class AssetCard(BaseModel):
    asset_id: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    url: str

class AssetListResponse(BaseModel):
    assets: List[AssetCard]
    message: Optional[str] = None

class GatewayHealthResponse(BaseModel):
    status: HealthStatus
    message: str
    url: Optional[str] = None
    http_status: Optional[int] = None
    latency_ms: Optional[int] = None
    body: Optional[str] = None

# ========== Health for the service itself ==========

class HealthResponse(BaseModel):
    status: str                 # "ok" | "error"
    dataAvailable: bool
    message: Optional[str] = None
