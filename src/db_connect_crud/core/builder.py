"""SQL statement construction for CRUD operations.

Table names, column names, join conditions and WHERE fragments are
interpolated into the SQL text verbatim. They must come from trusted code,
never from end users; only values are bound as parameters.
"""

from typing import Any, Mapping, Optional, Sequence

from db_connect_crud.exceptions import InvalidArgumentError
from db_connect_crud.models.query import Statement

JOIN_TYPES = {"INNER", "LEFT", "RIGHT", "FULL"}


def placeholder(paramstyle: str, position: int) -> str:
    """
    Get the positional placeholder for a DB-API paramstyle.

    Args:
        paramstyle: DB-API paramstyle of the driver (qmark, format, ...)
        position: 1-based parameter position

    Returns:
        Placeholder text, e.g. ``?`` or ``%s``
    """
    if paramstyle == "qmark":
        return "?"
    if paramstyle in ("format", "pyformat"):
        return "%s"
    if paramstyle in ("numeric", "named"):
        return f":{position}"
    raise InvalidArgumentError(f"Unsupported paramstyle: {paramstyle}")


def _placeholders(paramstyle: str, count: int) -> list[str]:
    return [placeholder(paramstyle, i) for i in range(1, count + 1)]


def _has_text(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def _where(where_clause: Optional[str]) -> str:
    if _has_text(where_clause):
        return f" WHERE {where_clause}"
    return ""


def _select_list(columns: Optional[Sequence[str]]) -> str:
    if not columns:
        return "*"
    return ", ".join(columns)


def _check_columns_and_values(
    columns: Optional[Sequence[str]], values: Optional[Sequence[Any]]
) -> None:
    if columns is None or values is None or len(columns) != len(values):
        raise InvalidArgumentError(
            "Columns and values must be non-null and of equal length"
        )
    if len(columns) == 0:
        raise InvalidArgumentError("Columns cannot be null or empty")


def build_insert(
    table: str,
    columns: Sequence[str],
    values: Sequence[Any],
    paramstyle: str = "qmark",
) -> Statement:
    """
    Build ``INSERT INTO <table> (<cols>) VALUES (<placeholders>)``.

    Raises:
        InvalidArgumentError: If columns/values are missing, empty or differ in length
    """
    _check_columns_and_values(columns, values)

    sql = (
        f"INSERT INTO {table} ({', '.join(columns)}) "
        f"VALUES ({', '.join(_placeholders(paramstyle, len(columns)))})"
    )
    return Statement(sql=sql, params=tuple(values))


def build_select(
    table: str,
    columns: Optional[Sequence[str]] = None,
    where_clause: Optional[str] = None,
) -> Statement:
    """Build ``SELECT <cols-or-*> FROM <table> [WHERE <clause>]``."""
    return Statement(
        sql=f"SELECT {_select_list(columns)} FROM {table}{_where(where_clause)}"
    )


def build_update(
    table: str,
    columns: Sequence[str],
    values: Sequence[Any],
    where_clause: Optional[str] = None,
    paramstyle: str = "qmark",
) -> Statement:
    """
    Build ``UPDATE <table> SET c1 = ?, c2 = ? [WHERE <clause>]``.

    Without a WHERE fragment every row of the table is updated.

    Raises:
        InvalidArgumentError: If columns are empty or values don't match them
    """
    if not columns:
        raise InvalidArgumentError("Columns cannot be null or empty")
    _check_columns_and_values(columns, values)

    assignments = ", ".join(
        f"{column} = {marker}"
        for column, marker in zip(columns, _placeholders(paramstyle, len(columns)))
    )
    return Statement(
        sql=f"UPDATE {table} SET {assignments}{_where(where_clause)}",
        params=tuple(values),
    )


def build_delete(table: str, where_clause: str) -> Statement:
    """
    Build ``DELETE FROM <table> WHERE <clause>``.

    Raises:
        InvalidArgumentError: If the WHERE fragment is missing or blank
    """
    if not _has_text(where_clause):
        raise InvalidArgumentError("Where clause cannot be null or empty")
    return Statement(sql=f"DELETE FROM {table} WHERE {where_clause}")


def build_join(
    tables: Sequence[str],
    join_conditions: Sequence[str],
    columns: Optional[Sequence[str]] = None,
    where_clause: Optional[str] = None,
    join_type: str = "INNER",
) -> Statement:
    """
    Build a SELECT over chained joins.

    The first table goes in FROM; every following table is joined ON the
    condition at the same position minus one::

        SELECT * FROM a INNER JOIN b ON <cond 0> INNER JOIN c ON <cond 1>

    Raises:
        InvalidArgumentError: On fewer than two tables, no conditions, a
            condition count other than ``len(tables) - 1``, or an unknown
            join type
    """
    if tables is None or len(tables) < 2:
        raise InvalidArgumentError("At least two tables are required for a join")
    if join_conditions is None or len(join_conditions) < 1:
        raise InvalidArgumentError("At least one join condition is required")
    if len(join_conditions) != len(tables) - 1:
        raise InvalidArgumentError(
            f"Expected {len(tables) - 1} join conditions for {len(tables)} tables, "
            f"got {len(join_conditions)}"
        )

    keyword = join_type.strip().upper() if isinstance(join_type, str) else None
    if keyword not in JOIN_TYPES:
        raise InvalidArgumentError(
            f"Unsupported join type: {join_type}. "
            f"Supported: {', '.join(sorted(JOIN_TYPES))}"
        )

    joins = "".join(
        f" {keyword} JOIN {table} ON {condition}"
        for table, condition in zip(tables[1:], join_conditions)
    )
    return Statement(
        sql=f"SELECT {_select_list(columns)} FROM {tables[0]}{joins}{_where(where_clause)}"
    )


def build_call(
    name: str,
    params: Optional[Mapping[str, Any]] = None,
    paramstyle: str = "qmark",
) -> Statement:
    """
    Build ``CALL <name>(?, ?, ...)`` with one placeholder per parameter.

    Parameters are bound in the mapping's iteration order.

    Raises:
        InvalidArgumentError: If the procedure name is missing or blank
    """
    if not _has_text(name):
        raise InvalidArgumentError("Procedure name cannot be null or empty")

    values = tuple(params.values()) if params else ()
    markers = ", ".join(_placeholders(paramstyle, len(values)))
    return Statement(sql=f"CALL {name}({markers})", params=values)
