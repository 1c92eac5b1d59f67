"""
Relational Access Bridge — One SQLite connection behind one lock.

Executes parameterized mutations and queries on behalf of the
front-end. Parameters and results go through :mod:`sidecar_core.codec`
so callers only ever see untyped JSON-like values.

The connection runs in autocommit mode: each statement is its own
transaction, unless the caller issues ``BEGIN``/``COMMIT`` explicitly.
"""
import os
import sqlite3
import logging
import threading
from collections.abc import Sequence
from typing import Any, Optional

from .codec import Value, decode_row, to_parameters
from .conf import SidecarConfig
from .exceptions import DatabaseError, InvalidStateError
from .utils import get_app_data_dir

logger = logging.getLogger("sidecar.db")

# older interpreters report multi-statement input as sqlite3.Warning
_STORE_ERRORS = (sqlite3.Error, sqlite3.Warning)


class Database:
    """Holder of the process's sole relational connection.

    Every public method takes the same exclusive lock, so concurrent
    callers are serialized. A failed statement leaves the connection
    installed and usable.
    """

    def __init__(self, config: Optional[SidecarConfig] = None):
        self._config = config or SidecarConfig()
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self._path: Optional[str] = None

    @property
    def is_initialized(self) -> bool:
        """True once a connection is installed and until it is closed."""
        with self._lock:
            return self._conn is not None

    @property
    def path(self) -> Optional[str]:
        """File path of the current connection, if any."""
        with self._lock:
            return self._path

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _resolve_path(self, path: Optional[str]) -> str:
        if path is not None:
            return path
        directory = get_app_data_dir(self._config.data_dir)
        return os.path.join(directory, self._config.db_filename)

    def _connect(self, db_path: str) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(
                db_path,
                timeout=self._config.busy_timeout,
                isolation_level=None,
                check_same_thread=False,
            )
        except _STORE_ERRORS as err:
            raise DatabaseError(err) from err
        try:
            conn.executescript(self._config.pragmas())
        except _STORE_ERRORS as err:
            conn.close()
            raise DatabaseError(err) from err
        return conn

    def initialize(self, path: Optional[str] = None) -> None:
        """Open the store and install it as the sole connection.

        Args:
            path: Database file path. Defaults to ``sidecar.db`` in the
                application data directory, which is created if absent.

        Raises:
            InvalidStateError: If the default directory is unusable.
            DatabaseError: If the store cannot be opened or configured.
        """
        db_path = self._resolve_path(path)
        conn = self._connect(db_path)
        with self._lock:
            previous, self._conn = self._conn, conn
            self._path = db_path
        if previous is not None:
            previous.close()
            logger.debug("Closed previous database connection")
        logger.info("Database initialized at %s", db_path)

    def close(self) -> None:
        """Close and drop the current connection, if any."""
        with self._lock:
            conn, self._conn = self._conn, None
            self._path = None
        if conn is not None:
            conn.close()

    def _require(self) -> sqlite3.Connection:
        if self._conn is None:
            raise InvalidStateError("Database not initialized")
        return self._conn

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """Run a mutating statement.

        Args:
            sql: A single SQL statement with ``?`` placeholders.
            params: Untyped positional parameters.

        Returns:
            Number of rows affected (0 for statements reporting none).

        Raises:
            InvalidStateError: If no connection is installed.
            DatabaseError: On malformed SQL, constraint violation or I/O.
        """
        bound = to_parameters(params)
        with self._lock:
            conn = self._require()
            try:
                cursor = conn.execute(sql, bound)
            except _STORE_ERRORS as err:
                logger.debug("execute failed: %s", err)
                raise DatabaseError(err) from err
            affected = cursor.rowcount
            cursor.close()
        return max(affected, 0)

    def query(
        self, sql: str, params: Optional[Sequence[Any]] = None
    ) -> list[dict[str, Value]]:
        """Run a read statement and materialize every row.

        Returns:
            One column name -> value mapping per row, in result order.

        Raises:
            InvalidStateError: If no connection is installed.
            DatabaseError: If the statement fails.
        """
        bound = to_parameters(params)
        with self._lock:
            conn = self._require()
            try:
                cursor = conn.execute(sql, bound)
                rows = cursor.fetchall()
            except _STORE_ERRORS as err:
                logger.debug("query failed: %s", err)
                raise DatabaseError(err) from err
            names = [col[0] for col in cursor.description or ()]
            cursor.close()
        return [decode_row(names, row) for row in rows]

    def execute_batch(self, sql: str) -> None:
        """Run a semicolon-separated script without parameters.

        Used for schema creation and migrations.

        Raises:
            InvalidStateError: If no connection is installed.
            DatabaseError: If any statement in the script fails.
        """
        with self._lock:
            conn = self._require()
            try:
                conn.executescript(sql)
            except _STORE_ERRORS as err:
                raise DatabaseError(err) from err
