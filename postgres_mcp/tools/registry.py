"""Tool registration: name -> (input model, handler, MCP metadata)."""
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Protocol

from mcp import types
from pydantic import BaseModel

from postgres_mcp.guard.statement_guard import StatementGuard

READ_ONLY_ANNOTATIONS = types.ToolAnnotations(
    readOnlyHint=True,
    destructiveHint=False,
    idempotentHint=True,
    openWorldHint=False,
)


class ConnectionProvider(Protocol):
    """Anything with an async ``connection()`` context manager yielding an
    object with ``async execute(query, params=None, tool_name=None)``."""

    def connection(self) -> Any: ...


@dataclass(frozen=True)
class ToolContext:
    """Collaborators available to every handler for the duration of a call."""

    pool: ConnectionProvider
    guard: StatementGuard
    max_rows: int = 1000


Handler = Callable[[ToolContext, Any], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: type[BaseModel]
    handler: Handler
    title: Optional[str] = None

    def definition(self) -> types.Tool:
        schema = self.input_model.model_json_schema(by_alias=True)
        schema.pop("title", None)
        return types.Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema=schema,
            annotations=READ_ONLY_ANNOTATIONS.model_copy(update={"title": self.title}),
        )


@dataclass
class ToolRegistry:
    tools: dict[str, ToolSpec] = field(default_factory=dict)

    def tool(self, name: str, input_model: type[BaseModel], title: Optional[str] = None):
        """Register the decorated coroutine; its docstring becomes the description."""

        def decorator(fn: Handler) -> Handler:
            description = " ".join((fn.__doc__ or "").split())
            self.tools[name] = ToolSpec(
                name=name,
                description=description,
                input_model=input_model,
                handler=fn,
                title=title,
            )
            return fn

        return decorator

    def get(self, name: str) -> Optional[ToolSpec]:
        return self.tools.get(name)

    def definitions(self) -> list[types.Tool]:
        return [spec.definition() for spec in self.tools.values()]
