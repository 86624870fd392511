# =======================================================================================
# access_request/database.py - Database Management
# =======================================================================================
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool
from contextlib import contextmanager
from typing import Optional
from .config import config

class DatabaseManager:
    """Manages database connections and transactions."""

    def __init__(self, url: Optional[str] = None):
        self.url = url or config.DB_URL
        self._engine: Optional[Engine] = None

    @property
    def engine(self) -> Engine:
        """Create the engine on first use so importing the app never connects."""
        if self._engine is None:
            if self.url.startswith("sqlite"):
                self._engine = create_engine(self.url, future=True)
            else:
                self._engine = create_engine(
                    self.url,
                    poolclass=QueuePool,
                    pool_size=config.DB_POOL_SIZE,
                    max_overflow=config.DB_MAX_OVERFLOW,
                    pool_pre_ping=True,
                    isolation_level="READ COMMITTED",
                    future=True,
                )
        return self._engine

    @contextmanager
    def get_connection(self):
        """Get a database connection with automatic cleanup."""
        with self.engine.begin() as conn:
            yield conn

    def fetch_one(self, query: str, params: dict = None):
        """Fetch a single result."""
        with self.get_connection() as conn:
            result = conn.execute(text(query), params or {})
            return result.mappings().first()

# Global database instance
db_manager = DatabaseManager()
