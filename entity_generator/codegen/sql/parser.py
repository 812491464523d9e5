"""
DDL parser boundary.

Wraps sqlglot's PostgreSQL dialect so that the rest of the pipeline only
ever sees a ``CREATE TABLE`` expression, or one of our own errors.
"""

import re
from dataclasses import dataclass

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from ..core.errors import DDLSyntaxError, NotATableStatementError
from ...logging_config import get_logger

logger = get_logger(__name__)

DIALECT = "postgres"

_PARTITION_CLAUSE = re.compile(r"\bPARTITION\s+BY\b", re.IGNORECASE)


@dataclass(frozen=True)
class ParseResult:
    """The parsed table statement and whether a PARTITION BY clause was cut off."""

    ast: exp.Create
    is_partition: bool = False

    # DDL text the statement was parsed from, without the partition clause
    source: str = ""


def strip_partition_clause(ddl: str) -> tuple:
    """
    Remove a trailing ``PARTITION BY ...`` clause.

    Returns:
        (ddl without the clause, whether the clause was present)
    """
    match = _PARTITION_CLAUSE.search(ddl)
    if match is None:
        return ddl, False
    return ddl[: match.start()].rstrip(), True


def parse_table(ddl: str) -> ParseResult:
    """
    Parse the first statement of ``ddl`` as a CREATE TABLE.

    Raises:
        DDLSyntaxError: The text is not valid SQL for the dialect.
        NotATableStatementError: The first statement is something else.
    """
    table_ddl, is_partition = strip_partition_clause(ddl)

    try:
        parsed = sqlglot.parse(table_ddl, read=DIALECT)
        statements = [s for s in parsed if s is not None]
    except SqlglotError as e:
        raise DDLSyntaxError(f"Invalid DDL: {e}") from e

    if not statements:
        raise DDLSyntaxError("No SQL statement found")

    statement = statements[0]
    if not is_create_table(statement):
        kind = statement.args.get("kind") if isinstance(statement, exp.Create) else None
        raise NotATableStatementError(
            f"{statement.key} {kind}".lower() if kind else statement.key
        )

    logger.debug(
        "Parsed table %s (partition clause: %s)",
        statement.this.find(exp.Table).name,
        is_partition,
    )
    return ParseResult(ast=statement, is_partition=is_partition, source=table_ddl)


def tokenize(ddl: str) -> list:
    try:
        return sqlglot.tokenize(ddl, read=DIALECT)
    except SqlglotError as e:
        raise DDLSyntaxError(f"Invalid DDL: {e}") from e


def is_create_table(node) -> bool:
    return (
        isinstance(node, exp.Create)
        and str(node.args.get("kind", "")).upper() == "TABLE"
        and node.this is not None
        and node.this.find(exp.Table) is not None
    )
