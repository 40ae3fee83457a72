"""Unit tests for server wiring."""
import pytest
from mcp import types

from postgres_mcp.config import BridgeConfig
from postgres_mcp.guard.parsed_guard import ParsedStatementGuard
from postgres_mcp.guard.statement_guard import KeywordStatementGuard
from postgres_mcp.main import build_dispatcher, build_server
from postgres_mcp.tools.dispatcher import ToolDispatcher


class TestBuildServer:
    def test_registers_tool_handlers(self, spy_pool):
        server = build_server(ToolDispatcher(spy_pool))
        assert server.name == "postgres-mcp-server"
        assert types.ListToolsRequest in server.request_handlers
        assert types.CallToolRequest in server.request_handlers


class TestBuildDispatcher:
    def test_keyword_guard_by_default(self, spy_pool):
        dispatcher = build_dispatcher(spy_pool, BridgeConfig(guard_mode="keyword", max_rows=25))
        assert isinstance(dispatcher._context.guard, KeywordStatementGuard)
        assert dispatcher._context.max_rows == 25

    def test_parser_guard(self, spy_pool):
        dispatcher = build_dispatcher(spy_pool, BridgeConfig(guard_mode="parser"))
        assert isinstance(dispatcher._context.guard, ParsedStatementGuard)

    def test_invalid_guard_mode(self, spy_pool):
        with pytest.raises(ValueError):
            build_dispatcher(spy_pool, BridgeConfig(guard_mode="strict"))
