# =======================================================================================
# access_request/services/asset_registry.py - Asset Map Parsing and Lookup
# =======================================================================================
import hashlib
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

import structlog
import yaml

from ..models.enums import READER_SUFFIX
from ..models.schemas import AssetMapping, ResolvedAsset
from ..utils.exceptions import AssetMapError

logger = structlog.get_logger(__name__)

NO_ASSETS_MESSAGE = "No assets have been configured."
ASSET_MAP_ERROR_MESSAGE = "There was an error parsing the asset map configuration."

# YAML keys accepted for the display name of an asset
_DISPLAY_NAME_KEYS = ("display_name", "name", "title")


def normalize_reader_name(reader_name: str) -> str:
    """Append the reader suffix unless the name already ends with it (case-sensitive)."""
    if reader_name.endswith(READER_SUFFIX):
        return reader_name
    return reader_name + READER_SUFFIX


def _as_text(value) -> Optional[str]:
    if value is None:
        return None
    text_value = str(value).strip()
    return text_value or None


def parse_asset_map(source: str) -> Dict[str, AssetMapping]:
    """
    Parse the YAML asset map into AssetMapping entries.

    An empty document gives an empty map. Entries whose value is not a
    mapping are skipped; lookups for them fall back to defaults.

    Raises:
        AssetMapError: the text is not valid YAML or its top level is not a mapping
    """
    if not source or not source.strip():
        return {}

    try:
        data = yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise AssetMapError(f"Asset map is not valid YAML: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise AssetMapError("Asset map must be a mapping of asset id to settings")

    assets: Dict[str, AssetMapping] = {}
    for raw_id, info in data.items():
        asset_id = str(raw_id)
        if not isinstance(info, dict):
            continue
        display_name = next(
            (_as_text(info[k]) for k in _DISPLAY_NAME_KEYS if _as_text(info.get(k))), None
        )
        assets[asset_id] = AssetMapping(
            asset_id=asset_id,
            reader_name=_as_text(info.get("reader_name")),
            permission_id=_as_text(info.get("permission_id")),
            category=_as_text(info.get("category")),
            display_name=display_name,
            description=_as_text(info.get("description")),
            image_url=_as_text(info.get("image_url")),
        )
    return assets


class AssetRegistry:
    """Resolves asset ids to reader names and permission ids."""

    def __init__(self, assets: Optional[Dict[str, AssetMapping]] = None):
        self._assets: Dict[str, AssetMapping] = dict(assets or {})

    @classmethod
    def from_yaml(cls, source: str, log=None) -> "AssetRegistry":
        """Build a registry, degrading to an empty one when the map cannot be parsed."""
        log = log or logger
        try:
            return cls(parse_asset_map(source))
        except AssetMapError as e:
            log.error("asset_map_parse_failed", error=str(e))
            return cls()

    def __len__(self) -> int:
        return len(self._assets)

    def resolve(self, asset_id: str) -> ResolvedAsset:
        """Look up reader/permission for an asset, defaulting both to the asset id."""
        mapping = self._assets.get(asset_id)
        reader_name = (mapping.reader_name if mapping else None) or asset_id
        permission_id = (mapping.permission_id if mapping else None) or asset_id
        return ResolvedAsset(
            asset_id=asset_id,
            reader_name=normalize_reader_name(reader_name),
            permission_id=permission_id,
        )

    def list_assets(self, category: Optional[str] = None) -> List[AssetMapping]:
        """Return configured assets in map order, optionally limited to one category."""
        return [
            mapping for mapping in self._assets.values()
            if category is None or mapping.category == category
        ]


class AssetRegistryCache:
    """
    Short-lived cache of parsed registries.

    Entries are keyed by a checksum of the map text, so an edited map is
    picked up on the next call; an unchanged map is re-parsed once the TTL
    expires. A TTL of zero disables caching.
    """

    def __init__(self, ttl_seconds: float = 0.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._checksum: Optional[str] = None
        self._loaded_at = 0.0
        self._registry: Optional[AssetRegistry] = None
        self._lock = threading.Lock()

    @staticmethod
    def checksum(source: str) -> str:
        return hashlib.sha256((source or "").encode("utf-8")).hexdigest()

    def load(self, source: str) -> AssetRegistry:
        if self.ttl_seconds <= 0:
            return AssetRegistry.from_yaml(source)

        digest = self.checksum(source)
        with self._lock:
            now = self._clock()
            if (
                self._registry is not None
                and digest == self._checksum
                and now - self._loaded_at < self.ttl_seconds
            ):
                return self._registry

            self._registry = AssetRegistry.from_yaml(source)
            self._checksum = digest
            self._loaded_at = now
            return self._registry


def describe_assets(
    source: str, category: Optional[str] = None, log=None
) -> Tuple[List[AssetMapping], Optional[str]]:
    """
    Assets for the listing page, with a message when there is nothing to show.

    Unlike AssetRegistry.from_yaml this reports a broken map to the caller
    instead of silently treating it as empty.
    """
    log = log or logger
    try:
        registry = AssetRegistry(parse_asset_map(source))
    except AssetMapError as e:
        log.error("asset_map_parse_failed", error=str(e))
        return [], ASSET_MAP_ERROR_MESSAGE

    if not len(registry):
        return [], NO_ASSETS_MESSAGE
    return registry.list_assets(category), None
