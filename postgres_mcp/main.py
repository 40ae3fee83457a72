"""PostgreSQL MCP Server: main entry point.

Opens the connection pool, verifies the database is reachable, and serves the
query_database, list_tables, describe_table and get_table_data tools over
stdio. Logs go to stderr; stdout carries the MCP stream.
"""
import asyncio
import contextlib
import logging
import signal
import sys

import psycopg
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from psycopg_pool import PoolTimeout

from postgres_mcp.config import SERVER_NAME, SERVER_VERSION, BridgeConfig, config
from postgres_mcp.db import PostgresPool
from postgres_mcp.guard.statement_guard import build_statement_guard
from postgres_mcp.tools.dispatcher import ToolDispatcher, ToolRequest

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Read-only access to a PostgreSQL database. Use list_tables and "
    "describe_table to explore the schema, get_table_data to sample rows, "
    "and query_database to run SELECT statements with $1, $2, ... parameters."
)


def build_server(dispatcher: ToolDispatcher) -> Server:
    """Wire the dispatcher into an MCP server's tools/list and tools/call handlers."""
    server = Server(SERVER_NAME, version=SERVER_VERSION, instructions=INSTRUCTIONS)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return dispatcher.list_tools()

    # The dispatcher validates arguments against its own models
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
        response = await dispatcher.dispatch(ToolRequest(name=name, arguments=arguments))
        return response.content

    return server


def build_dispatcher(pool: PostgresPool, cfg: BridgeConfig) -> ToolDispatcher:
    guard = build_statement_guard(cfg.guard_mode, cfg.allow_multi_statement)
    logger.info(
        f"Statement guard: {cfg.guard_mode} "
        f"(multi-statement {'allowed' if cfg.allow_multi_statement else 'rejected'})"
    )
    return ToolDispatcher(pool, guard, max_rows=cfg.max_rows)


async def serve(cfg: BridgeConfig):
    current = asyncio.current_task()
    with contextlib.suppress(NotImplementedError):
        asyncio.get_running_loop().add_signal_handler(signal.SIGTERM, current.cancel)

    pool = PostgresPool(cfg)
    dispatcher = build_dispatcher(pool, cfg)
    await pool.initialize()
    try:
        info = await pool.check_connection()
        logger.info(
            f"Database connection successful: {info.get('database')} as "
            f"{info.get('username')} ({info.get('version')})"
        )
        server = build_server(dispatcher)
        logger.info("PostgreSQL MCP Server running on stdio")
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )
    finally:
        await pool.close()
        logger.info("PostgreSQL MCP Server stopped")


def main():
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        asyncio.run(serve(config))
    except (PoolTimeout, psycopg.OperationalError) as e:
        logger.error(f"Database connection failed: {e}")
        logger.error(
            "Troubleshooting: make sure PostgreSQL is running, check the POSTGRES_* "
            "settings in your environment or .env file, verify the credentials, "
            "and ensure the database exists."
        )
        sys.exit(1)
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Shutting down gracefully...")


if __name__ == "__main__":
    main()
