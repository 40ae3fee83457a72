"""Statement guard using sqlglot AST parsing.

Unlike the keyword guard this classifies what a statement *is* rather than
which words it contains:
- CTEs wrapping writes (WITH ... INSERT INTO) are rejected
- SELECT ... INTO (creates a table) is rejected
- keywords inside literals and comments are irrelevant
"""
import logging
from typing import Optional

import sqlglot
from sqlglot import exp

from postgres_mcp.guard.statement_guard import (
    SELECT_ONLY_REASON,
    GuardDecision,
    check_single_statement,
)

logger = logging.getLogger(__name__)

# Top-level expression types that only read data
_READ_EXPRESSIONS: tuple[type, ...] = (
    exp.Select,
    exp.Union,
    exp.Intersect,
    exp.Except,
)


def _describe(node: exp.Expression) -> str:
    if isinstance(node, exp.Command) and isinstance(node.this, str):
        return node.this.upper()
    return type(node).__name__.upper()


class ParsedStatementGuard:
    """Parses SQL (postgres dialect) and allows read-only statements only."""

    def __init__(self, allow_multi_statement: bool = False):
        self._allow_multi_statement = allow_multi_statement

    def evaluate(self, sql: str) -> GuardDecision:
        if not self._allow_multi_statement:
            rejection = check_single_statement(sql)
            if rejection:
                return rejection

        try:
            statements = [s for s in sqlglot.parse(sql, dialect="postgres") if s is not None]
        except (sqlglot.errors.ParseError, sqlglot.errors.TokenError) as e:
            logger.warning(f"Could not parse SQL, will deny: {sql[:100]}")
            return GuardDecision.reject(f"Could not parse SQL statement: {e}")

        if not statements:
            return GuardDecision.reject("Could not determine SQL statement type.")

        for stmt in statements:
            problem = self._write_problem(stmt)
            if problem:
                return GuardDecision.reject(f"{SELECT_ONLY_REASON} ({problem})")
        return GuardDecision.allow()

    def _write_problem(self, node: exp.Expression) -> Optional[str]:
        """Describe why ``node`` is not a plain read, or None if it is."""
        if not isinstance(node, _READ_EXPRESSIONS):
            return f"statement type '{_describe(node)}' is not a read"
        if node.find(exp.Into):
            return "SELECT ... INTO creates a table"
        # Data-modifying CTEs: WITH d AS (DELETE ... RETURNING *) SELECT ...
        for cte in node.find_all(exp.CTE):
            if not isinstance(cte.this, _READ_EXPRESSIONS):
                return f"CTE '{cte.alias}' is not a read"
        return None
