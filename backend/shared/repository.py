"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
the DB-API connection and the cursor handling shared by every query.
"""

from typing import Any, Generic, Optional, Sequence, TypeVar

from psycopg2 import sql


T = TypeVar("T")

Query = str | sql.Composable


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - connection access via self._conn
    - fetch/execute helpers that always close their cursor

    Subclasses should implement domain-specific data access methods
    and handle row-to-model mapping internally.

    Example:
        class UserRepository(BaseRepository[dict]):
            def get_by_id(self, user_id: str) -> Optional[dict]:
                return self._fetch_one(
                    "SELECT * FROM app_users WHERE id = %s", (user_id,)
                )
    """

    def __init__(self, conn: Any) -> None:
        """
        Initialize the repository with an open connection.

        Args:
            conn: DB-API connection whose cursors yield dict rows.
        """
        self._conn = conn

    def _fetch_one(self, query: Query, params: Sequence[Any] = ()) -> Optional[dict]:
        with self._conn.cursor() as cur:
            cur.execute(query, params)
            row = cur.fetchone()
        return dict(row) if row is not None else None

    def _fetch_all(self, query: Query, params: Sequence[Any] = ()) -> list[dict]:
        with self._conn.cursor() as cur:
            cur.execute(query, params)
            rows = cur.fetchall()
        return [dict(row) for row in rows]

    def _execute(self, query: Query, params: Sequence[Any] = ()) -> int:
        """Run a statement and return the affected row count."""
        with self._conn.cursor() as cur:
            cur.execute(query, params)
            return cur.rowcount
