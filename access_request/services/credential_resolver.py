# =======================================================================================
# access_request/services/credential_resolver.py - Card Credential Lookup
# =======================================================================================
from typing import Any, Dict, Optional

from ..models.enums import MAIN_PROFILE_TYPE
from .user_directory import UserDirectory

CARD_SERIAL_FIELD = "card_serial_number"


def _card_serial(record: Optional[Dict[str, Any]]) -> Optional[str]:
    if not record:
        return None
    value = record.get(CARD_SERIAL_FIELD)
    if value is None:
        return None
    # Sent exactly as stored; whitespace only matters for the emptiness test
    value = str(value)
    return value if value.strip() else None


class CredentialResolver:
    """Finds a user's access card serial: user record first, then the main profile."""

    def __init__(self, directory: UserDirectory):
        self.directory = directory

    def fetch_credential(self, user_id: int) -> Optional[str]:
        """
        Return the user's card serial, or None when neither record carries one.

        None is not an error: the caller must stop before contacting the gateway.
        """
        credential = _card_serial(self.directory.load_user(user_id))
        if credential:
            return credential

        profiles = self.directory.load_profiles(user_id, MAIN_PROFILE_TYPE)
        if profiles:
            return _card_serial(profiles[0])
        return None
