"""Centralized error handling with actionable messages.

Tool failures surface to MCP clients as ``McpError`` carrying one of three
JSON-RPC codes: INVALID_PARAMS, METHOD_NOT_FOUND or INTERNAL_ERROR.
"""
import psycopg
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, ErrorData
from psycopg_pool import PoolTimeout
from pydantic import ValidationError


def invalid_params(message: str) -> McpError:
    return McpError(ErrorData(code=INVALID_PARAMS, message=message))


def method_not_found(tool_name: str) -> McpError:
    return McpError(ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {tool_name}"))


def internal_error(tool_name: str, e: Exception) -> McpError:
    return McpError(
        ErrorData(
            code=INTERNAL_ERROR,
            message=f"Failed to execute {tool_name}: {handle_error(e)}",
        )
    )


def format_validation_error(e: ValidationError) -> str:
    """Itemize pydantic errors as ``field: problem`` pairs."""
    items = []
    for err in e.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "arguments"
        items.append(f"{loc}: {err['msg']}")
    return "Invalid parameters: " + "; ".join(items)


def handle_error(e: Exception) -> str:
    """Return a human-readable message for a database or pool failure.

    The driver's own text is always kept; known failure kinds get a hint on
    what to try next.
    """
    detail = str(e).strip()

    if isinstance(e, PoolTimeout):
        return (
            f"Timed out waiting for a database connection ({detail}). "
            "The pool may be exhausted or PostgreSQL may be unreachable."
        )

    if isinstance(e, psycopg.errors.UndefinedTable):
        return f"{detail}. Use list_tables to discover available tables."

    if isinstance(e, psycopg.errors.UndefinedColumn):
        return f"{detail}. Use describe_table to see the table's columns."

    if isinstance(e, psycopg.errors.InsufficientPrivilege):
        return f"Permission denied: {detail}"

    if isinstance(e, psycopg.errors.SyntaxError):
        return f"SQL syntax error: {detail}"

    if isinstance(e, psycopg.errors.QueryCanceled):
        return f"Query canceled: {detail}. Try limiting rows with LIMIT or simplifying the query."

    if isinstance(e, psycopg.OperationalError):
        msg = detail.lower()
        if "connection refused" in msg or "could not connect" in msg:
            return f"Cannot connect to PostgreSQL: {detail}"
        if "terminating connection" in msg or "server closed" in msg:
            return f"Connection was terminated: {detail}"

    if isinstance(e, psycopg.Error) and detail:
        return detail

    return f"{type(e).__name__}: {detail}"
