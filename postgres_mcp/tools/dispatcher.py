"""Single entry point for tool calls.

``ToolDispatcher.dispatch`` validates the arguments of a named tool against
its input model, runs the handler against the injected pool and guard, and
wraps the JSON payload in a response envelope. Every call ends in exactly one
``ToolResponse`` or one ``McpError``.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from mcp import types
from mcp.shared.exceptions import McpError
from pydantic import ValidationError

from postgres_mcp.guard.statement_guard import KeywordStatementGuard, StatementGuard
from postgres_mcp.tools.query import register_query_tools
from postgres_mcp.tools.registry import ConnectionProvider, ToolContext, ToolRegistry
from postgres_mcp.tools.schema import register_schema_tools
from postgres_mcp.utils.errors import (
    format_validation_error,
    internal_error,
    invalid_params,
    method_not_found,
)
from postgres_mcp.utils.formatting import text_content

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolRequest:
    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResponse:
    content: list[types.TextContent]


def build_registry() -> ToolRegistry:
    registry = ToolRegistry()
    register_query_tools(registry)
    register_schema_tools(registry)
    return registry


class ToolDispatcher:
    """Routes tool calls to handlers. Holds no per-call state."""

    def __init__(
        self,
        pool: ConnectionProvider,
        guard: Optional[StatementGuard] = None,
        max_rows: int = 1000,
        registry: Optional[ToolRegistry] = None,
    ):
        self._context = ToolContext(
            pool=pool,
            guard=guard or KeywordStatementGuard(),
            max_rows=max_rows,
        )
        self._registry = registry or build_registry()

    def list_tools(self) -> list[types.Tool]:
        return self._registry.definitions()

    async def dispatch(self, request: ToolRequest) -> ToolResponse:
        spec = self._registry.get(request.name)
        if spec is None:
            raise method_not_found(request.name)

        arguments = {} if request.arguments is None else request.arguments
        if not isinstance(arguments, Mapping):
            raise invalid_params("Invalid parameters: arguments must be an object")
        try:
            params = spec.input_model.model_validate(dict(arguments))
        except ValidationError as e:
            raise invalid_params(format_validation_error(e)) from e

        try:
            payload = await spec.handler(self._context, params)
        except McpError:
            raise
        except Exception as e:
            logger.error(f"Error executing tool {request.name}: {e}")
            raise internal_error(request.name, e) from e

        return ToolResponse(content=[text_content(payload)])
