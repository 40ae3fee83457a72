"""Free-form SQL execution, gated by the statement guard."""
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from postgres_mcp.tools.registry import ToolContext, ToolRegistry
from postgres_mcp.utils.errors import invalid_params

logger = logging.getLogger(__name__)

QUERY_DATABASE = "query_database"


class QueryDatabaseInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)
    sql: str = Field(
        ...,
        description="The SQL query to execute",
        min_length=1,
    )
    params: list[Any] = Field(
        default_factory=list,
        description="Optional parameters for the SQL query, bound positionally to $1, $2, ...",
    )


def register_query_tools(registry: ToolRegistry):

    @registry.tool(QUERY_DATABASE, QueryDatabaseInput, title="Execute SQL Query")
    async def query_database(ctx: ToolContext, params: QueryDatabaseInput) -> dict:
        """Execute a SQL query against the PostgreSQL database.

        Only SELECT statements are permitted. Returns the rows, the row count
        and the name and type OID of every result column.
        """
        decision = ctx.guard.evaluate(params.sql)
        if not decision.allowed:
            logger.warning(f"Rejected query: {decision.reason}: {params.sql[:100]}")
            raise invalid_params(decision.reason)

        async with ctx.pool.connection() as conn:
            result = await conn.execute(params.sql, params.params, tool_name=QUERY_DATABASE)
        return result.to_dict()
