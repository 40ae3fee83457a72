"""SQL statement guards for the query_database tool.

Two interchangeable implementations of the ``StatementGuard`` protocol:
- keyword guard (default): case-insensitive mutation keywords + SELECT prefix
- parser guard: sqlglot AST classification with a read-only allow-list
"""
