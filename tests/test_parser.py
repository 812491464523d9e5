"""Tests for the DDL parser boundary."""

import pytest
from sqlglot import exp

from entity_generator.codegen.core.errors import (
    DDLSyntaxError,
    NotATableStatementError,
)
from entity_generator.codegen.sql import parse_table, strip_partition_clause


def test_parse_create_table(users_ddl):
    result = parse_table(users_ddl)

    assert isinstance(result.ast, exp.Create)
    assert result.ast.this.find(exp.Table).name == "users"
    assert result.is_partition is False


def test_partition_clause_is_stripped(orders_ddl):
    result = parse_table(orders_ddl)

    assert result.is_partition is True
    assert result.ast.this.find(exp.Table).name == "sales_order"
    assert result.source.endswith(")")
    assert "PARTITION" not in result.source


def test_strip_partition_clause_is_case_insensitive():
    ddl, found = strip_partition_clause(
        "CREATE TABLE t (a int) partition  by range (a);"
    )

    assert found is True
    assert ddl == "CREATE TABLE t (a int)"


def test_strip_partition_clause_without_clause():
    ddl = "CREATE TABLE t (a int);"

    assert strip_partition_clause(ddl) == (ddl, False)


@pytest.mark.parametrize(
    "ddl",
    [
        "SELECT 1;",
        "CREATE VIEW v AS SELECT 1;",
        "CREATE INDEX idx ON t (a);",
    ],
)
def test_non_table_statement(ddl):
    with pytest.raises(NotATableStatementError):
        parse_table(ddl)


def test_syntax_error():
    with pytest.raises(DDLSyntaxError):
        parse_table("CREATE TABLE users (id int PRIMARY KEY")


def test_empty_input():
    with pytest.raises(DDLSyntaxError):
        parse_table("   ")
