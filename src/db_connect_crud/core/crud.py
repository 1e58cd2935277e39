"""CRUD, join and stored-procedure execution over arbitrary tables."""

import logging
import time
from typing import Any, Callable, Mapping, Optional, Sequence

from sqlalchemy import Connection, CursorResult
from sqlalchemy.exc import SQLAlchemyError

from db_connect_crud.core.builder import (
    build_call,
    build_delete,
    build_insert,
    build_join,
    build_select,
    build_update,
)
from db_connect_crud.core.connection import DatabaseConnection
from db_connect_crud.exceptions import InvalidArgumentError, PersistenceError
from db_connect_crud.models.query import QueryResult, Statement
from db_connect_crud.utils.serialization import dumps

logger = logging.getLogger(__name__)

# Key under which call_procedure() returns the rows a procedure produced
RESULT_SET_KEY = "result_set"


def _failure(message: str, error: BaseException) -> PersistenceError:
    logger.error(message, exc_info=True)
    return PersistenceError(f"{message}: {error}", cause=error)


class CrudOperations:
    """
    Builds and executes SQL for one table operation per call.

    Every call opens its own connection through the provider and releases it
    before returning, whether the statement succeeded or not.

    Identifiers, join conditions and WHERE fragments are trusted input: they
    are written into the SQL text as given. Values are always bound.
    """

    def __init__(self, connection: DatabaseConnection):
        """
        Initialize CRUD operations.

        Args:
            connection: Connection provider
        """
        self.connection = connection

    def create(self, table: str, columns: Sequence[str], values: Sequence[Any]) -> int:
        """
        Insert one record.

        Args:
            table: Table name
            columns: Column names
            values: Values, in the same order as columns

        Returns:
            Number of rows inserted

        Raises:
            InvalidArgumentError: If columns/values are missing or differ in length
            PersistenceError: If the insert fails
        """
        statement = self._build(
            build_insert,
            table,
            columns,
            values,
            paramstyle=self.connection.get_paramstyle(),
        )

        try:
            rows_affected = self._execute_update(statement)
        except SQLAlchemyError as e:
            raise _failure(f"Failed to create record in table {table}", e) from e

        logger.info(
            f"Successfully created record in table {table}. Rows affected: {rows_affected}"
        )
        return rows_affected

    def read(
        self,
        table: str,
        columns: Optional[Sequence[str]] = None,
        where_clause: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """
        Read records from a table.

        Args:
            table: Table name
            columns: Columns to select; all columns when empty or None
            where_clause: Raw predicate appended after WHERE

        Returns:
            One dict per row, keyed by the column names the database reports

        Raises:
            PersistenceError: If the query fails
        """
        return self.read_result(table, columns, where_clause).rows

    def read_result(
        self,
        table: str,
        columns: Optional[Sequence[str]] = None,
        where_clause: Optional[str] = None,
    ) -> QueryResult:
        """Same as read(), returning rows together with column names and timing."""
        statement = self._build(build_select, table, columns, where_clause)

        try:
            result = self._query(statement)
        except SQLAlchemyError as e:
            raise _failure(f"Failed to read records from table {table}", e) from e

        logger.info(f"Successfully read {result.row_count} records from table {table}")
        return result

    def update(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
        where_clause: Optional[str] = None,
    ) -> int:
        """
        Update records in a table.

        Without a WHERE fragment every row is updated.

        Returns:
            Number of rows updated

        Raises:
            InvalidArgumentError: If columns are empty or values don't match them
            PersistenceError: If the update fails
        """
        statement = self._build(
            build_update,
            table,
            columns,
            values,
            where_clause,
            paramstyle=self.connection.get_paramstyle(),
        )

        try:
            rows_affected = self._execute_update(statement)
        except SQLAlchemyError as e:
            raise _failure(f"Failed to update records in table {table}", e) from e

        logger.info(
            f"Successfully updated records in table {table}. Rows affected: {rows_affected}"
        )
        return rows_affected

    def delete(self, table: str, where_clause: str) -> int:
        """
        Delete the records matching a WHERE fragment.

        Returns:
            Number of rows deleted

        Raises:
            InvalidArgumentError: If the WHERE fragment is missing or blank
            PersistenceError: If the delete fails
        """
        statement = self._build(build_delete, table, where_clause)

        try:
            rows_affected = self._execute_update(statement)
        except SQLAlchemyError as e:
            raise _failure(f"Failed to delete records from table {table}", e) from e

        logger.info(f"Successfully deleted {rows_affected} records from table {table}")
        return rows_affected

    def join(
        self,
        tables: Sequence[str],
        join_conditions: Sequence[str],
        columns: Optional[Sequence[str]] = None,
        where_clause: Optional[str] = None,
        join_type: str = "INNER",
    ) -> list[dict[str, Any]]:
        """
        Select from two or more joined tables.

        ``join_conditions[i]`` joins ``tables[i + 1]`` to the tables before it.
        Columns with the same name in several tables collide in the row
        dicts; alias them in ``columns`` to keep both.

        Raises:
            InvalidArgumentError: If tables and conditions don't form a valid join
            PersistenceError: If the query fails
        """
        statement = self._build(
            build_join, tables, join_conditions, columns, where_clause, join_type
        )

        try:
            result = self._query(statement)
        except SQLAlchemyError as e:
            raise _failure("Failed to execute join query", e) from e

        logger.info(
            f"Successfully executed join query. Records returned: {result.row_count}"
        )
        return result.rows

    def call_procedure(
        self, name: str, params: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Execute a stored procedure.

        Parameters are bound positionally in the mapping's iteration order.
        Drivers with ``cursor.callproc`` report output values in the
        returned sequence; those replace the inputs in the result. Other
        drivers receive a plain ``CALL`` statement and the inputs are
        returned unchanged.

        Args:
            name: Procedure name
            params: Parameter name to input value

        Returns:
            Every parameter name mapped to its value after the call, plus
            ``result_set`` with the produced rows if the procedure returned any

        Raises:
            InvalidArgumentError: If the procedure name is missing or blank
            PersistenceError: If the call fails
        """
        statement = self._build(
            build_call, name, params, paramstyle=self.connection.get_paramstyle()
        )
        names = list(params.keys()) if params else []

        try:
            with self.connection.get_connection() as conn:
                output = self._call(conn, name, names, statement)
        except SQLAlchemyError as e:
            raise _failure(f"Failed to execute stored procedure {name}", e) from e

        logger.info(f"Successfully executed stored procedure: {name}")
        return output

    def _build(self, builder: Callable[..., Statement], *args, **kwargs) -> Statement:
        """Run a statement builder, logging rejected arguments."""
        try:
            return builder(*args, **kwargs)
        except InvalidArgumentError as e:
            logger.error(f"Invalid arguments for {builder.__name__}: {e}")
            raise

    def _execute(self, conn: Connection, statement: Statement) -> CursorResult:
        logger.debug(f"Executing: {statement.sql} params={dumps(statement.params)}")
        if statement.params:
            return conn.exec_driver_sql(statement.sql, [statement.params])
        return conn.exec_driver_sql(statement.sql)

    def _execute_update(self, statement: Statement) -> int:
        """Execute a data-modifying statement and commit it."""
        with self.connection.get_connection() as conn:
            result = self._execute(conn, statement)
            rows_affected = result.rowcount
            conn.commit()
        return rows_affected

    def _query(self, statement: Statement) -> QueryResult:
        """Execute a row-returning statement and materialize every row."""
        start_time = time.time()

        with self.connection.get_connection() as conn:
            result = self._execute(conn, statement)
            columns = list(result.keys())
            rows = [dict(zip(columns, row)) for row in result.fetchall()]

        execution_time = (time.time() - start_time) * 1000  # Convert to ms

        return QueryResult(
            query=statement.sql,
            rows=rows,
            row_count=len(rows),
            columns=columns,
            execution_time_ms=execution_time,
        )

    def _call(
        self,
        conn: Connection,
        name: str,
        names: list[str],
        statement: Statement,
    ) -> dict[str, Any]:
        """Invoke a procedure on the raw DB-API connection."""
        logger.debug(f"Calling: {statement.sql} params={dumps(statement.params)}")
        dbapi_conn = conn.connection
        driver_error = conn.dialect.loaded_dbapi.Error
        output: dict[str, Any] = {}

        try:
            cursor = dbapi_conn.cursor()
            try:
                callproc = getattr(cursor, "callproc", None)
                if callproc is not None:
                    returned = callproc(name, list(statement.params))
                else:
                    cursor.execute(statement.sql, statement.params)
                    returned = None
                values = list(returned) if returned is not None else list(statement.params)

                if cursor.description is not None:
                    columns = [column[0] for column in cursor.description]
                    output[RESULT_SET_KEY] = [
                        dict(zip(columns, row)) for row in cursor.fetchall()
                    ]

                # Drivers may report fewer values than were bound
                for position, param_name in enumerate(names):
                    if position < len(values):
                        output[param_name] = values[position]
                    else:
                        output[param_name] = statement.params[position]
            finally:
                cursor.close()
            dbapi_conn.commit()
        except driver_error as e:
            raise _failure(f"Failed to execute stored procedure {name}", e) from e

        return output
