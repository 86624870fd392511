# =======================================================================================
# access_request/services/__init__.py - Services Package
# =======================================================================================
from .access_control import AccessRequestService
from .asset_registry import AssetRegistry, AssetRegistryCache
from .credential_resolver import CredentialResolver
from .denial_policy import DenialPolicy
from .gateway_client import GatewayClient, HttpxSender
from .payload_builder import PayloadBuilder
from .rate_limiter import RateLimiter, InMemoryRateLimiter
from .user_directory import UserDirectory, SqlUserDirectory

__all__ = [
    "AccessRequestService", "AssetRegistry", "AssetRegistryCache", "CredentialResolver",
    "DenialPolicy", "GatewayClient", "HttpxSender", "PayloadBuilder", "RateLimiter",
    "InMemoryRateLimiter", "UserDirectory", "SqlUserDirectory",
]
