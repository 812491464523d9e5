"""Tests for table metadata extraction."""

from dataclasses import replace

import pytest
import sqlglot

from entity_generator.codegen.core.errors import TableMetadataError
from entity_generator.codegen.sql import TableMetadataAdapter, parse_table


def _adapter(ddl, config):
    return TableMetadataAdapter.from_parse_result(parse_table(ddl), config)


def test_users_table_meta(users_ddl, users_config):
    table = _adapter(users_ddl, users_config).table_meta

    assert table.table_name == "users"
    assert table.primary_keys == ("user_id_",)
    assert [c.name for c in table.columns] == ["user_id_", "age_", "balance_"]

    user_id = table.column("user_id_")
    assert user_id.sql_type == "varchar"
    assert user_id.length == 40
    assert user_id.is_primary_key
    assert not user_id.nullable


def test_length_and_precision_gating(users_ddl, users_config):
    table = _adapter(users_ddl, users_config).table_meta

    balance = table.column("balance_")
    assert (balance.precision, balance.scale, balance.length) == (16, 2, None)
    age = table.column("age_")
    assert (age.precision, age.scale, age.length) == (None, None, None)


def test_numeric_without_scale_keeps_precision(config):
    ddl = "CREATE TABLE t (id_ bigint PRIMARY KEY, n_ numeric(10) NOT NULL);"

    n = _adapter(ddl, config).table_meta.column("n_")

    assert (n.precision, n.scale, n.length) == (10, None, None)


def test_declared_type_spelling_is_looked_up_first(config):
    ddl = (
        "CREATE TABLE t (id_ int8 PRIMARY KEY, a_ decimal(5,2), b_ int4, "
        "c_ bool, d_ character varying(10), e_ integer, "
        "f_ timestamp with time zone);"
    )
    custom = replace(
        config,
        data_type_map={
            **config.data_type_map,
            "decimal": "Double",
            "int4": "Short",
            "bool": "Flag",
        },
    )

    meta = _adapter(ddl, custom).entity_meta

    assert {f.name: f.field_type for f in meta.fields} == {
        "id_": "Long",
        "a_": "Double",
        "b_": "Short",
        "c_": "Flag",
        "d_": "String",
        "e_": "Integer",
        "f_": "Instant",
    }
    a, _, _, d, _, f = meta.fields[1:]
    assert (a.sql_type, a.declared_type) == ("numeric", "decimal")
    assert (a.precision, a.scale) == (5, 2)
    assert (d.sql_type, d.declared_type, d.length) == (
        "varchar",
        "character varying",
        10,
    )
    assert f.declared_type == "timestamp with time zone"
    assert f.imports == ("java.time.Instant",)


def test_text_column_has_no_size(config):
    ddl = "CREATE TABLE notes (id_ bigint PRIMARY KEY, body_ text);"

    body = _adapter(ddl, config).table_meta.column("body_")

    assert body.length is None
    assert body.precision is None


def test_nullable_only_with_explicit_null(users_ddl, users_config):
    table = _adapter(users_ddl, users_config).table_meta

    assert table.column("balance_").nullable is True
    assert table.column("age_").nullable is False


def test_entity_meta_names(users_ddl, users_config):
    meta = _adapter(users_ddl, users_config).entity_meta

    assert meta.entity_name == "Users"
    assert [f.field_name for f in meta.fields] == ["userId", "age", "balance"]
    assert [f.field_type for f in meta.fields] == ["String", "Integer", "BigDecimal"]
    assert meta.primary_keys == ("userId",)
    assert not meta.is_partitioned
    assert meta.entity_package == users_config.entity_package


def test_partitioned_table(orders_ddl, config):
    adapter = _adapter(orders_ddl, config)
    meta = adapter.entity_meta

    assert adapter.is_partitioned
    assert meta.is_partitioned
    assert meta.entity_name == "SalesOrder"
    assert meta.entity_package == config.partition_entity_package
    assert meta.entity_super_class == config.partition_entity_super_class
    assert meta.vo_super_class == config.partition_vo_super_class
    assert [f.field_name for f in meta.id_fields] == ["salesOrderId"]
    assert meta.partition_field.field_name == "dealerPartition"
    assert adapter.warnings == []


def test_audit_columns_omitted(orders_ddl, config):
    meta = _adapter(orders_ddl, config).entity_meta

    assert "update_author_" not in [f.name for f in meta.fields]


def test_json_column(orders_ddl, config):
    meta = _adapter(orders_ddl, config).entity_meta

    extra = next(f for f in meta.fields if f.name == "extra_")
    assert extra.is_json
    assert extra.column_definition == "jsonb"
    assert extra.field_type == "String"
    assert "org.hibernate.annotations.Type" in extra.imports


def test_partition_clause_without_partition_key(config):
    ddl = (
        "CREATE TABLE logs (id_ bigint PRIMARY KEY, msg_ text) "
        "PARTITION BY RANGE (id_);"
    )

    adapter = _adapter(ddl, config)

    assert not adapter.is_partitioned
    assert len(adapter.warnings) == 1


def test_partition_key_outside_primary_key_is_plain_column(config):
    ddl = "CREATE TABLE t (id_ bigint PRIMARY KEY, dealer_partition_ varchar(20));"

    meta = _adapter(ddl, config).entity_meta

    assert not meta.is_partitioned
    assert meta.partition_field is None


def test_table_level_primary_key(config):
    ddl = "CREATE TABLE t (a_ bigint, b_ varchar(10), PRIMARY KEY (b_, a_));"

    assert _adapter(ddl, config).table_meta.primary_keys == ("b_", "a_")


def test_array_column_skipped(config):
    ddl = "CREATE TABLE t (id_ bigint PRIMARY KEY, tags_ text[]);"

    adapter = _adapter(ddl, config)

    assert [c.name for c in adapter.table_meta.columns] == ["id_"]
    assert any("tags_" in w for w in adapter.warnings)


def test_unmapped_type_falls_back(config):
    ddl = "CREATE TABLE t (id_ bigint PRIMARY KEY, ip_ inet);"

    adapter = _adapter(ddl, config)

    ip = next(f for f in adapter.entity_meta.fields if f.name == "ip_")
    assert ip.field_type == config.fallback_type
    assert adapter.warnings


def test_custom_partition_key(config):
    ddl = (
        "CREATE TABLE t (id_ bigint, dealer_partition varchar(20), "
        "PRIMARY KEY (id_, dealer_partition));"
    )

    meta = _adapter(ddl, replace(config, partition_key="dealer_partition")).entity_meta

    assert meta.is_partitioned
    assert meta.partition_key == "dealer_partition"


def test_unknown_primary_key_column(config):
    ddl = "CREATE TABLE t (id_ bigint, PRIMARY KEY (missing_));"

    with pytest.raises(TableMetadataError):
        _adapter(ddl, config)


def test_rejects_non_table_ast(config):
    with pytest.raises(TableMetadataError):
        TableMetadataAdapter(sqlglot.parse_one("SELECT 1"), config)
