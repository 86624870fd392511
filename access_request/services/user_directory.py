# =======================================================================================
# access_request/services/user_directory.py - User and Profile Lookups
# =======================================================================================
from abc import ABC, abstractmethod
from typing import Any, Callable, ContextManager, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

from ..models.schemas import ActorAttributes

_TRUE_STRINGS = ("1", "true", "yes", "on")


def is_truthy(value: Any) -> bool:
    """Interpret a loosely typed record field (int, bool or string) as a flag."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


class UserDirectory(ABC):
    """Read-only access to user records, profiles and roles."""

    @abstractmethod
    def load_user(self, user_id: int) -> Optional[Dict[str, Any]]:
        """Return the user record as a dict, or None if it does not exist."""

    @abstractmethod
    def load_profiles(self, user_id: int, profile_type: str) -> List[Dict[str, Any]]:
        """Return the user's profiles of the given type."""

    @abstractmethod
    def load_roles(self, user_id: int) -> List[str]:
        """Return the role names held by the user."""

    def load_actor_attributes(self, user_id: int, member_role: str) -> ActorAttributes:
        """Collect the account state the denial policy needs into one typed record."""
        record = self.load_user(user_id) or {}
        override = str(record.get("override_status") or "").strip().lower()
        return ActorAttributes(
            override=override if override in ("allow", "deny") else None,
            manual_pause=is_truthy(record.get("manual_pause")),
            payment_failed=is_truthy(record.get("payment_failed")),
            payment_pause=is_truthy(record.get("payment_pause")),
            has_member_role=member_role in self.load_roles(user_id) if member_role else True,
        )


class SqlUserDirectory(UserDirectory):
    """
    UserDirectory backed by the users, profiles and user_roles tables.

    Each lookup checks out its own short-lived connection from `connect`
    (e.g. `db_manager.get_connection`), so nothing stays checked out while
    the caller waits on the gateway.
    """

    def __init__(self, connect: Callable[[], ContextManager[Connection]]):
        self.connect = connect

    def load_user(self, user_id: int) -> Optional[Dict[str, Any]]:
        with self.connect() as conn:
            row = conn.execute(
                text("SELECT * FROM users WHERE id = :uid"),
                {"uid": user_id}
            ).mappings().first()
        return dict(row) if row else None

    def load_profiles(self, user_id: int, profile_type: str) -> List[Dict[str, Any]]:
        with self.connect() as conn:
            rows = conn.execute(
                text("SELECT * FROM profiles WHERE uid = :uid AND type = :type ORDER BY id"),
                {"uid": user_id, "type": profile_type}
            ).mappings().all()
        return [dict(row) for row in rows]

    def load_roles(self, user_id: int) -> List[str]:
        with self.connect() as conn:
            rows = conn.execute(
                text("SELECT role FROM user_roles WHERE uid = :uid"),
                {"uid": user_id}
            ).all()
        return [row[0] for row in rows]
