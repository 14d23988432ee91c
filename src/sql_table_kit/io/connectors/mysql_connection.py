"""
MySQL connection backed by PyMySQL.

Implements the SqlConnection contract: a lazily connecting handle with
explicit connect/disconnect, prepared statements over positional ``?``
placeholders, transactions and a liveness probe. There is no pooling and no
retry; a failed call surfaces immediately.

Connection parameters come from the constructor first and from
``SQLTK_MYSQL_*`` settings for anything left unset.
"""

from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional, Sequence, Tuple

import pymysql
from pymysql.connections import Connection
from pymysql.cursors import DictCursor

from sql_table_kit.config import resolve_mysql_settings
from sql_table_kit.infrastructure.sql.core.parameters import (
    PLACEHOLDER,
    BindType,
    placeholder_positions,
)
from sql_table_kit.io.connectors.exceptions import (
    DatabaseConnectionError,
    StatementError,
)
from sql_table_kit.utils.logging import get_logger

logger = get_logger(__name__)

_VALID_BIND_TAGS = frozenset(tag.value for tag in BindType)


def to_driver_sql(sql: str, has_params: bool) -> str:
    """
    Translate ``?`` placeholders to the ``%s`` format PyMySQL expects.

    PyMySQL only interpolates when parameters are passed, so literal ``%``
    characters are escaped only in that case. A ``?`` inside a
    backtick-quoted identifier is left alone.

    Examples:
        >>> to_driver_sql("SELECT * FROM t WHERE `a` LIKE ?", True)
        'SELECT * FROM t WHERE `a` LIKE %s'
        >>> to_driver_sql("SELECT * FROM t WHERE `why?` = ?", True)
        'SELECT * FROM t WHERE `why?` = %s'
    """
    if not has_params:
        return sql

    parts: List[str] = []
    cursor = 0
    for position in placeholder_positions(sql):
        parts.append(sql[cursor:position].replace("%", "%%"))
        parts.append("%s")
        cursor = position + len(PLACEHOLDER)
    parts.append(sql[cursor:].replace("%", "%%"))
    return "".join(parts)


class MySQLPreparedStatement:
    """Statement bound to a PyMySQL cursor."""

    def __init__(self, cursor: DictCursor, sql: str):
        self.sql = sql
        self._cursor = cursor
        self._params: Tuple[Any, ...] = ()
        self._types = ""
        self._affected_rows = 0
        self._closed = False

    @property
    def affected_rows(self) -> int:
        return self._affected_rows

    @property
    def types(self) -> str:
        return self._types

    def bind(self, types: str, params: Sequence[Any]) -> None:
        if len(types) != len(params):
            raise StatementError(
                f"Bind type count {len(types)} does not match parameter count {len(params)}",
                sql=self.sql,
            )
        unknown = set(types) - _VALID_BIND_TAGS
        if unknown:
            raise StatementError(
                f"Unknown bind type tags: {''.join(sorted(unknown))}", sql=self.sql
            )
        self._types = types
        self._params = tuple(params)

    def execute(self) -> bool:
        expected = len(placeholder_positions(self.sql))
        if expected != len(self._params):
            raise StatementError(
                f"Statement expects {expected} parameters, {len(self._params)} bound",
                sql=self.sql,
            )

        driver_sql = to_driver_sql(self.sql, bool(self._params))
        try:
            self._affected_rows = self._cursor.execute(
                driver_sql, self._params or None
            )
        except pymysql.Error as e:
            raise StatementError(
                f"Failed to execute statement: {e}", sql=self.sql
            ) from e

        logger.debug(
            "statement.executed",
            sql=self.sql,
            param_count=len(self._params),
            affected_rows=self._affected_rows,
        )
        return True

    def fetch_all(self) -> List[Dict[str, Any]]:
        rows = self._cursor.fetchall()
        return [dict(row) for row in rows or ()]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._cursor.close()


class MySQLConnection:
    """
    Lazily connecting MySQL handle.

    Create one per database and pass it to StatementBuilder.execute() or
    TableSchema; every high-level operation opens it through session().
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        database: Optional[str] = None,
        charset: Optional[str] = None,
        connect_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ):
        self.params = resolve_mysql_settings(
            {
                "host": host,
                "port": port,
                "user": user,
                "password": password,
                "database": database,
                "charset": charset,
                "connect_timeout": connect_timeout,
                "read_timeout": read_timeout,
            }
        )
        self._conn: Optional[Connection] = None
        self._last_error: Optional[str] = None
        self._session_depth = 0

        logger.info(
            "mysql_connection.configured",
            host=self.params.host,
            port=self.params.port,
            database=self.params.database,
            user=self.params.user,
        )

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def connected(self) -> bool:
        return self._conn is not None

    def connect(self) -> bool:
        """
        Open the underlying connection unless it is already open.

        Raises:
            DatabaseConnectionError: If PyMySQL cannot connect
        """
        if self._conn is not None:
            return True

        try:
            self._conn = pymysql.connect(
                **self.params.connect_kwargs(),
                cursorclass=DictCursor,
                autocommit=True,
            )
        except pymysql.Error as e:
            self._last_error = str(e)
            logger.error(
                "mysql_connection.connect_failed",
                host=self.params.host,
                database=self.params.database,
                error=str(e),
            )
            raise DatabaseConnectionError(f"Connection failed: {e}") from e

        logger.debug("mysql_connection.connected", host=self.params.host)
        return True

    def disconnect(self) -> None:
        if self._conn is None:
            return

        conn, self._conn = self._conn, None
        try:
            conn.close()
        except pymysql.Error as e:
            logger.warning("mysql_connection.close_failed", error=str(e))

    @contextmanager
    def session(self) -> Generator["MySQLConnection", None, None]:
        """
        Scoped acquisition: connect on entry, disconnect on every exit path.

        Sessions nest; only the outermost one disconnects.

        Yields:
            This connection, connected
        """
        self.connect()
        self._session_depth += 1
        try:
            yield self
        finally:
            self._session_depth -= 1
            if self._session_depth == 0:
                self.disconnect()

    def _connection(self) -> Connection:
        if self._conn is None:
            self.connect()
        return self._conn

    def prepare(self, sql: str) -> Optional[MySQLPreparedStatement]:
        """
        Prepare ``sql`` for binding and execution.

        Returns:
            A prepared statement, or None when the driver refuses; the
            diagnostic text is then available from ``last_error``.
        """
        try:
            cursor = self._connection().cursor()
        except pymysql.Error as e:
            self._last_error = str(e)
            logger.warning("mysql_connection.prepare_failed", sql=sql, error=str(e))
            return None
        return MySQLPreparedStatement(cursor, sql)

    def query(self, sql: str) -> Optional[List[Dict[str, Any]]]:
        """Run unparameterized SQL; returns rows, or None on failure."""
        try:
            with self._connection().cursor() as cursor:
                cursor.execute(sql)
                return [dict(row) for row in cursor.fetchall() or ()]
        except pymysql.Error as e:
            self._last_error = str(e)
            logger.warning("mysql_connection.query_failed", sql=sql, error=str(e))
            return None

    def last_insert_id(self) -> int:
        return self._connection().insert_id()

    def begin_transaction(self) -> bool:
        return self._transaction_call("begin")

    def commit(self) -> bool:
        return self._transaction_call("commit")

    def rollback(self) -> bool:
        return self._transaction_call("rollback")

    def _transaction_call(self, method: str) -> bool:
        try:
            getattr(self._connection(), method)()
        except pymysql.Error as e:
            self._last_error = str(e)
            logger.warning("mysql_connection.transaction_failed", action=method, error=str(e))
            return False
        return True

    def is_alive(self) -> bool:
        """Ping the server without reconnecting."""
        if self._conn is None:
            return False
        try:
            self._conn.ping(reconnect=False)
        except pymysql.Error:
            return False
        return True
