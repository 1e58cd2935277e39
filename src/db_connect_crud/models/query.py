"""Statement and query result models."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from db_connect_crud.utils.serialization import convert_rows_to_json_safe, dumps


class Statement(BaseModel):
    """SQL text plus the positional parameters bound to its placeholders."""

    sql: str = Field(..., description="SQL text in the driver's paramstyle")
    params: tuple[Any, ...] = Field(
        default=(), description="Positional parameters, in placeholder order"
    )

    @property
    def placeholder_count(self) -> int:
        """Number of bound parameters."""
        return len(self.params)

    def __str__(self) -> str:
        return self.sql

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "sql": "INSERT INTO users (id, name) VALUES (?, ?)",
                    "params": [1, "Ann"],
                }
            ]
        },
    }


class QueryResult(BaseModel):
    """Materialized result set of a read or join."""

    query: str = Field(..., description="Executed SQL query")
    rows: list[dict[str, Any]] = Field(..., description="Result rows as dictionaries")
    row_count: int = Field(..., description="Number of rows returned")
    columns: list[str] = Field(..., description="Column names in order")
    execution_time_ms: Optional[float] = Field(
        None, description="Execution time in milliseconds"
    )

    def to_json(self) -> str:
        """Serialize rows to a JSON array, temporal values as ISO strings."""
        return dumps(convert_rows_to_json_safe(self.rows))
