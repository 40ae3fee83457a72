"""Schema and metadata discovery tools."""
import re

from psycopg import sql
from pydantic import BaseModel, ConfigDict, Field, field_validator

from postgres_mcp.tools.registry import ToolContext, ToolRegistry
from postgres_mcp.utils.errors import invalid_params

LIST_TABLES = "list_tables"
DESCRIBE_TABLE = "describe_table"
GET_TABLE_DATA = "get_table_data"

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_$]*")

LIST_TABLES_SQL = """SELECT table_name, table_type
FROM information_schema.tables
WHERE table_schema = $1
ORDER BY table_name"""

COLUMNS_SQL = """SELECT column_name, data_type, is_nullable, column_default,
       character_maximum_length, numeric_precision, numeric_scale
FROM information_schema.columns
WHERE table_schema = $1 AND table_name = $2
ORDER BY ordinal_position"""

CONSTRAINTS_SQL = """SELECT tc.constraint_name, tc.constraint_type, kcu.column_name
FROM information_schema.table_constraints tc
JOIN information_schema.key_column_usage kcu
  ON tc.constraint_schema = kcu.constraint_schema
 AND tc.constraint_name = kcu.constraint_name
WHERE tc.table_schema = $1 AND tc.table_name = $2
ORDER BY tc.constraint_name, kcu.ordinal_position"""

TABLE_DATA_SQL = sql.SQL("SELECT * FROM {}.{} LIMIT $1")


class ListTablesInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True, populate_by_name=True)
    schema_name: str = Field(
        default="public", alias="schema", description="Schema name to list tables from"
    )


class DescribeTableInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True, populate_by_name=True)
    table: str = Field(..., description="Name of the table to describe", min_length=1)
    schema_name: str = Field(
        default="public",
        alias="schema",
        description="Schema name where the table is located",
    )


class GetTableDataInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True, populate_by_name=True)
    table: str = Field(..., description="Name of the table to query", min_length=1)
    schema_name: str = Field(
        default="public",
        alias="schema",
        description="Schema name where the table is located",
    )
    limit: int = Field(default=10, description="Maximum number of rows to return", gt=0)

    @field_validator("table", "schema_name")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        # Interpolated as identifiers, so only plain unquoted-style names pass
        if not IDENTIFIER_PATTERN.fullmatch(v):
            raise ValueError(
                "must be a plain identifier (letters, digits, _ or $, not starting with a digit)"
            )
        return v

    @field_validator("limit", mode="before")
    @classmethod
    def validate_limit_type(cls, v):
        # Lax mode would coerce true -> 1 and "5" -> 5
        if isinstance(v, (bool, str)):
            raise ValueError("must be a number")
        return v


def register_schema_tools(registry: ToolRegistry):

    @registry.tool(LIST_TABLES, ListTablesInput, title="List Tables in Schema")
    async def list_tables(ctx: ToolContext, params: ListTablesInput) -> dict:
        """List all tables in the database or a specific schema."""
        async with ctx.pool.connection() as conn:
            result = await conn.execute(
                LIST_TABLES_SQL, [params.schema_name], tool_name=LIST_TABLES
            )
        return {"schema": params.schema_name, "tables": result.rows}

    @registry.tool(DESCRIBE_TABLE, DescribeTableInput, title="Describe Table Schema")
    async def describe_table(ctx: ToolContext, params: DescribeTableInput) -> dict:
        """Get the structure/schema of a specific table: columns in creation
        order with types, nullability and defaults, plus key constraints."""
        bind = [params.schema_name, params.table]
        async with ctx.pool.connection() as conn:
            columns = await conn.execute(COLUMNS_SQL, bind, tool_name=DESCRIBE_TABLE)
            constraints = await conn.execute(CONSTRAINTS_SQL, bind, tool_name=DESCRIBE_TABLE)
        return {
            "table": f"{params.schema_name}.{params.table}",
            "columns": columns.rows,
            "constraints": constraints.rows,
        }

    @registry.tool(GET_TABLE_DATA, GetTableDataInput, title="Get Sample Table Data")
    async def get_table_data(ctx: ToolContext, params: GetTableDataInput) -> dict:
        """Get sample data from a table with optional limit."""
        if params.limit > ctx.max_rows:
            raise invalid_params(
                f"Invalid parameters: limit: must be at most {ctx.max_rows}"
            )
        query = TABLE_DATA_SQL.format(
            sql.Identifier(params.schema_name), sql.Identifier(params.table)
        )
        async with ctx.pool.connection() as conn:
            result = await conn.execute(query, [params.limit], tool_name=GET_TABLE_DATA)
        return {
            "table": f"{params.schema_name}.{params.table}",
            "limit": params.limit,
            "rowCount": result.row_count,
            "data": result.rows,
        }
