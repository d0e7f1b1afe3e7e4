"""
Database connection factory for PostgreSQL.

Connections are opened per request and closed when the request finishes.
No pooling and no multi-statement transactions: every statement autocommits.
"""

from contextlib import contextmanager
from typing import Callable, Iterator, Optional

import psycopg2
from psycopg2.extensions import connection as PGConnection
from psycopg2.extras import RealDictCursor

from .config import get_settings

ConnectionFactory = Callable[[], PGConnection]


def connect(database_url: Optional[str] = None) -> PGConnection:
    """
    Open a new connection to the auth database.

    Rows come back as dicts (RealDictCursor) so repositories can map
    them by column name.

    Args:
        database_url: Optional DSN override, defaults to DATABASE_URL

    Returns:
        Open psycopg2 connection in autocommit mode
    """
    dsn = database_url or get_settings().database_url
    if not dsn:
        raise RuntimeError(
            "Database configuration missing. Set the DATABASE_URL environment variable."
        )

    conn = psycopg2.connect(dsn, cursor_factory=RealDictCursor)
    conn.autocommit = True
    return conn


@contextmanager
def scoped_connection(factory: ConnectionFactory = connect) -> Iterator[PGConnection]:
    """
    Acquire a connection for the duration of one request.

    The connection is closed on every exit path, including exceptions
    raised by the caller.
    """
    conn = factory()
    try:
        yield conn
    finally:
        conn.close()
