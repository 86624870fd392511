"""Pytest configuration and shared fixtures for all tests.

This module provides shared test fixtures including:
- An in-memory SQLite database with users, profiles and roles
- A stub access gateway built on httpx.MockTransport
- Factories for wiring an AccessRequestService
"""

from unittest.mock import MagicMock

import httpx
import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from access_request.models.schemas import AccessRequestSettings
from access_request.services.access_control import AccessRequestService
from access_request.services.gateway_client import GatewayClient, HttpxSender
from access_request.services.rate_limiter import InMemoryRateLimiter
from access_request.services.user_directory import SqlUserDirectory

GATEWAY_URL = "http://gateway.test/toolauth/req"

SCHEMA = [
    """
    CREATE TABLE users (
        id INTEGER PRIMARY KEY,
        email TEXT,
        card_serial_number TEXT,
        override_status TEXT,
        manual_pause INTEGER DEFAULT 0,
        payment_failed INTEGER DEFAULT 0,
        payment_pause INTEGER DEFAULT 0,
        is_blocked INTEGER DEFAULT 0
    )
    """,
    """
    CREATE TABLE profiles (
        id INTEGER PRIMARY KEY,
        uid INTEGER NOT NULL,
        type TEXT NOT NULL,
        card_serial_number TEXT
    )
    """,
    """
    CREATE TABLE user_roles (
        uid INTEGER NOT NULL,
        role TEXT NOT NULL
    )
    """,
]

# id, email, card, override, manual_pause, payment_failed, payment_pause, is_blocked
USERS = [
    (1, "alice@example.org", "CARD123", None, 0, 0, 0, 0),
    (2, "bob@example.org", None, None, 0, 0, 0, 0),
    (3, "carol@example.org", "", None, 0, 0, 0, 0),
    (4, "dave@example.org", "CARD999", "deny", 0, 1, 0, 0),
    (5, "erin@example.org", "CARD555", None, 0, 0, 0, 0),
    (6, "frank@example.org", "CARD777", None, 0, 0, 0, 1),
    (7, "gina@example.org", "CARD888", None, 0, 1, 1, 0),
]

PROFILES = [
    (10, 2, "main", "PROFILE456"),
    (11, 2, "main", "PROFILE999"),
    (12, 3, "main", ""),
    (13, 3, "billing", "BILLING1"),
]

MEMBERS = [1, 2, 3, 4, 6, 7]

# Users, keyed by role in the scenarios
ALICE, BOB, CAROL, DAVE, ERIN, FRANK, GINA = 1, 2, 3, 4, 5, 6, 7


@pytest.fixture
def engine():
    """Seeded in-memory database shared across threads (TestClient uses a threadpool)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    with engine.begin() as conn:
        for statement in SCHEMA:
            conn.execute(text(statement))
        conn.execute(
            text(
                "INSERT INTO users (id, email, card_serial_number, override_status, manual_pause, "
                "payment_failed, payment_pause, is_blocked) "
                "VALUES (:id, :email, :card, :override, :mp, :pf, :pp, :blocked)"
            ),
            [
                {"id": u[0], "email": u[1], "card": u[2], "override": u[3],
                 "mp": u[4], "pf": u[5], "pp": u[6], "blocked": u[7]}
                for u in USERS
            ],
        )
        conn.execute(
            text("INSERT INTO profiles (id, uid, type, card_serial_number) VALUES (:id, :uid, :type, :card)"),
            [{"id": p[0], "uid": p[1], "type": p[2], "card": p[3]} for p in PROFILES],
        )
        conn.execute(
            text("INSERT INTO user_roles (uid, role) VALUES (:uid, 'member')"),
            [{"uid": uid} for uid in MEMBERS],
        )
    yield engine
    engine.dispose()


@pytest.fixture
def directory(engine):
    return SqlUserDirectory(engine.begin)


class GatewayStub:
    """Records requests and answers with a configurable status/body or raises an httpx error."""

    def __init__(self):
        self.requests = []
        self.status_code = 201
        self.body = "Card accepted"
        self.error = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.body)


@pytest.fixture
def gateway_stub():
    return GatewayStub()


@pytest.fixture
def sender(gateway_stub):
    return HttpxSender(httpx.Client(transport=httpx.MockTransport(gateway_stub.handler)))


@pytest.fixture
def gateway_log():
    return MagicMock()


@pytest.fixture
def gateway_client(sender, gateway_log):
    return GatewayClient(sender, log=gateway_log)


@pytest.fixture
def settings():
    return AccessRequestSettings(gateway_url=GATEWAY_URL)


@pytest.fixture
def make_service(directory, gateway_client):
    """Factory for an AccessRequestService with fixed settings."""

    def _make(settings, rate_limit=10, rate_window=60, limiter=None, log=None):
        return AccessRequestService(
            directory=directory,
            gateway=gateway_client,
            rate_limiter=limiter or InMemoryRateLimiter(),
            settings_provider=lambda: settings,
            rate_limit=rate_limit,
            rate_window=rate_window,
            log=log or MagicMock(),
        )

    return _make
