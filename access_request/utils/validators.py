# =======================================================================================
# access_request/utils/validators.py - Validation Helpers
# =======================================================================================
import re
from typing import Optional

ASSET_IDENTIFIER_PATTERN = re.compile(r"[a-zA-Z0-9_-]+")


class AssetIdentifierValidator:
    """Validates asset identifiers received from URLs and proxy clients."""

    @staticmethod
    def is_valid(asset_id: Optional[str]) -> bool:
        return bool(asset_id) and ASSET_IDENTIFIER_PATTERN.fullmatch(asset_id) is not None
