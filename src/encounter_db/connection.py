"""SQLite connection handling for encounter-db."""

import logging
import sqlite3
from pathlib import Path

from .constants import DEFAULT_CONNECT_TIMEOUT, MEMORY_DB
from .utils import ensure_dir

logger = logging.getLogger(__name__)


class StoreConnectionError(Exception):
    """
    Raised when the store cannot be opened or read.

    This exception is raised for failures including:
    - Missing permissions on the database file or its directory
    - A file that is not a SQLite database, or is corrupt
    - A database locked by another process past the connect timeout

    Startup should abort when this is raised.
    """

    pass


def open_connection(
    db_file: Path | str,
    timeout: float = DEFAULT_CONNECT_TIMEOUT,
    foreign_keys: bool = True,
) -> sqlite3.Connection:
    """
    Open a connection to the store and make sure it is readable.

    SQLite opens files lazily, so the file header is read right away to
    surface unreadable or non-database files here rather than mid-migration.

    Args:
        db_file: Database file path, or ":memory:"
        timeout: Seconds to wait for a lock held by another connection
        foreign_keys: Whether to enforce foreign key constraints

    Returns:
        Open SQLite connection

    Raises:
        StoreConnectionError: If the store cannot be opened or read
    """
    target = str(db_file)
    try:
        if target != MEMORY_DB:
            ensure_dir(Path(target).parent)
        conn = sqlite3.connect(target, timeout=timeout)
    except (sqlite3.Error, OSError) as e:
        raise StoreConnectionError(f"Could not open database {target}: {e}") from e

    try:
        conn.execute("PRAGMA schema_version").fetchone()
        conn.execute(f"PRAGMA foreign_keys = {'ON' if foreign_keys else 'OFF'}")
    except sqlite3.Error as e:
        conn.close()
        raise StoreConnectionError(f"Could not read database {target}: {e}") from e

    logger.debug(f"Opened database {target}")
    return conn


def get_database_path(conn: sqlite3.Connection) -> Path | None:
    """
    Get the file backing the main database of a connection.

    Args:
        conn: Open SQLite connection

    Returns:
        Path to the database file, or None for in-memory databases
    """
    for _seq, name, file in conn.execute("PRAGMA database_list").fetchall():
        if name == "main":
            return Path(file) if file else None
    return None
