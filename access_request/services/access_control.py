# =======================================================================================
# access_request/services/access_control.py - Core Business Logic
# =======================================================================================
from typing import Callable, Optional

import structlog

from ..config import config
from ..models.enums import RequestStatus
from ..models.schemas import (
    AccessRequestResult, AccessRequestSettings, ActorAttributes, Actor,
)
from ..utils.validators import AssetIdentifierValidator
from .asset_registry import AssetRegistryCache
from .credential_resolver import CredentialResolver
from .denial_policy import DenialPolicy, response_excerpt
from .gateway_client import GatewayClient
from .payload_builder import PayloadBuilder
from .rate_limiter import RateLimiter
from .user_directory import UserDirectory, is_truthy

logger = structlog.get_logger(__name__)

ALLOWED_MESSAGE = "Access granted. Your request was accepted."
RATE_LIMITED_MESSAGE = "Too many access requests. Please wait a moment and try again."
NOT_CONFIGURED_MESSAGE = (
    "Access requests are currently unavailable because the access gateway is not configured. "
    "Please contact support."
)
INVALID_ASSET_MESSAGE = "Invalid asset identifier provided."
NO_CREDENTIAL_MESSAGE = "No card found associated with your account. Please contact support."


def rate_limit_key(user_id: int) -> str:
    return f"access_request:{user_id}"


class AccessRequestService:
    """Runs one access request from rate limiting through to the user-facing message."""

    def __init__(
        self,
        directory: UserDirectory,
        gateway: GatewayClient,
        rate_limiter: RateLimiter,
        settings_provider: Callable[[], AccessRequestSettings],
        registry_cache: Optional[AssetRegistryCache] = None,
        denial_policy: Optional[DenialPolicy] = None,
        rate_limit: int = config.RATE_LIMIT_MAX,
        rate_window: float = config.RATE_LIMIT_WINDOW,
        log=None,
    ):
        self.directory = directory
        self.gateway = gateway
        self.rate_limiter = rate_limiter
        self.settings_provider = settings_provider
        self.registry_cache = registry_cache or AssetRegistryCache()
        self.denial_policy = denial_policy or DenialPolicy()
        self.rate_limit = rate_limit
        self.rate_window = rate_window
        self.logger = log or logger

    # ----------------------------------------------------------------------
    # Access request pipeline
    # ----------------------------------------------------------------------
    def process_access_request(
        self,
        user_id: int,
        asset_id: Optional[str],
        method: str = "website",
        source: Optional[str] = None,
    ) -> AccessRequestResult:
        """
        Process an access request through the complete pipeline.

        Early halts (rate limit, missing configuration, invalid asset, blocked
        account, missing card) never reach the gateway.
        """
        if not self.rate_limiter.check_and_register(rate_limit_key(user_id), self.rate_limit, self.rate_window):
            return self._halt("rate_limited", RATE_LIMITED_MESSAGE, user_id, asset_id)

        settings = self.settings_provider()
        if not settings.is_configured:
            return self._halt("not_configured", NOT_CONFIGURED_MESSAGE, user_id, asset_id)

        if not AssetIdentifierValidator.is_valid(asset_id):
            return self._halt("invalid_asset", INVALID_ASSET_MESSAGE, user_id, asset_id)

        # All directory reads happen before the gateway call
        record = self.directory.load_user(user_id) or {}
        if settings.user_block_field and is_truthy(record.get(settings.user_block_field)):
            return self._halt("blocked", settings.user_block_message, user_id, asset_id)

        credential = CredentialResolver(self.directory).fetch_credential(user_id)
        if credential is None:
            return self._halt("no_credential", NO_CREDENTIAL_MESSAGE, user_id, asset_id)

        attributes = self.directory.load_actor_attributes(user_id, settings.member_role)
        resolved = self.registry_cache.load(settings.asset_map).resolve(asset_id)
        actor = Actor(user_id=user_id, email=record.get("email"))
        request = PayloadBuilder(settings.hmac_secret).build(resolved, credential, actor, method, source)

        result = self.gateway.send(settings.gateway_url, request, settings.timeout_seconds, settings.dry_run)

        if result.outcome == "allowed":
            message = ALLOWED_MESSAGE
        elif result.outcome == "denied":
            message = self.denial_policy.evaluate(attributes, settings, result.http_status, result.body)
        else:
            message = self.denial_policy.evaluate(ActorAttributes(), settings, result.http_status, result.body)

        return AccessRequestResult(
            status=result.outcome,
            message=message,
            outcome=result.outcome,
            http_status=result.http_status,
            # Transport error text stays in the logs
            reason=response_excerpt(result.body) if result.outcome != "error" else None,
            latency=result.latency,
            request_id=result.request_id,
            asset_id=resolved.asset_id,
            reader_name=resolved.reader_name,
            permission_id=resolved.permission_id,
            gateway_result=result,
        )

    def _halt(
        self, status: RequestStatus, message: str, user_id: int, asset_id: Optional[str]
    ) -> AccessRequestResult:
        self.logger.info("access_request_halted", status=status, uid=user_id, asset_id=asset_id)
        return AccessRequestResult(status=status, message=message, asset_id=asset_id)

