"""
core/database.py -- Engine construction shared by the SQL stores.

auth/store.py and orders/store.py each build their own Engine from the same
DATABASE_URL; both go through make_engine() so the SQLite tweaks match.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    WAL (Write-Ahead Logging) lets readers proceed without blocking during
    writes. Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    """Create an Engine; SQLite URLs get cross-thread access and WAL mode.

    check_same_thread=False is required because FastAPI runs sync handlers in
    a thread pool.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine
