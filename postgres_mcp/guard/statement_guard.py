"""Keyword-based statement guard.

Blocks obvious mutations without parsing SQL: a statement mentioning DROP,
DELETE, TRUNCATE, ALTER, CREATE, INSERT or UPDATE is rejected unless its
text starts with SELECT. Keywords inside literals or comments of a SELECT are
therefore tolerated, and a statement that does not start with SELECT but
hides its mutation behind other syntax is not caught.
"""
import logging
import re
from dataclasses import dataclass
from typing import Optional, Protocol

import sqlglot
from sqlglot.tokens import TokenType

logger = logging.getLogger(__name__)

MUTATING_KEYWORDS = ("DROP", "DELETE", "TRUNCATE", "ALTER", "CREATE", "INSERT", "UPDATE")

_MUTATION_PATTERN = re.compile(
    r"\b(" + "|".join(MUTATING_KEYWORDS) + r")\s+", re.IGNORECASE
)

SELECT_ONLY_REASON = "Only SELECT queries are allowed for security reasons"
MULTI_STATEMENT_REASON = "Multiple SQL statements are not allowed"
UNSPLITTABLE_REASON = "Could not determine SQL statement boundaries"


@dataclass(frozen=True)
class GuardDecision:
    """Outcome of evaluating a SQL string."""

    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "GuardDecision":
        return cls(allowed=True)

    @classmethod
    def reject(cls, reason: str) -> "GuardDecision":
        return cls(allowed=False, reason=reason)


class StatementGuard(Protocol):
    def evaluate(self, sql: str) -> GuardDecision: ...


def count_statements(sql: str) -> int:
    """Count semicolon-separated statements using the postgres tokenizer.

    Semicolons inside string literals, quoted identifiers and comments do not
    split statements. Empty statements (``;;`` or a trailing ``;``) are not
    counted. Raises ``sqlglot.errors.TokenError`` on untokenizable input.
    """
    count = 0
    in_statement = False
    for token in sqlglot.tokenize(sql, read="postgres"):
        if token.token_type == TokenType.SEMICOLON:
            in_statement = False
        elif not in_statement:
            in_statement = True
            count += 1
    return count


def check_single_statement(sql: str) -> Optional[GuardDecision]:
    """Return a rejection if ``sql`` holds more than one statement, else None."""
    try:
        statements = count_statements(sql)
    except sqlglot.errors.TokenError as e:
        logger.warning(f"Could not tokenize SQL, will deny: {e}")
        return GuardDecision.reject(UNSPLITTABLE_REASON)
    if statements > 1:
        return GuardDecision.reject(MULTI_STATEMENT_REASON)
    return None


class KeywordStatementGuard:
    """Pattern-matching guard: mutation keywords are only tolerated in SELECTs."""

    def __init__(self, allow_multi_statement: bool = False):
        self._allow_multi_statement = allow_multi_statement

    def evaluate(self, sql: str) -> GuardDecision:
        dangerous = _MUTATION_PATTERN.search(sql) is not None
        if dangerous and not sql.lstrip().lower().startswith("select"):
            return GuardDecision.reject(SELECT_ONLY_REASON)
        if not self._allow_multi_statement:
            rejection = check_single_statement(sql)
            if rejection:
                return rejection
        return GuardDecision.allow()


def build_statement_guard(mode: str = "keyword", allow_multi_statement: bool = False):
    """Build the guard selected by ``POSTGRES_GUARD_MODE``."""
    if mode == "keyword":
        return KeywordStatementGuard(allow_multi_statement=allow_multi_statement)
    if mode == "parser":
        from postgres_mcp.guard.parsed_guard import ParsedStatementGuard

        return ParsedStatementGuard(allow_multi_statement=allow_multi_statement)
    raise ValueError(f"Unknown guard mode: {mode!r} (expected 'keyword' or 'parser')")
