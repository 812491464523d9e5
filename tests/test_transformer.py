"""Tests for deriving entity, key, repository and VO units."""

from dataclasses import replace

import pytest

from entity_generator.codegen.core.errors import NoPrimaryKeyError, TableMetadataError
from entity_generator.codegen.core.schema import EntityFieldMeta, EntityMeta
from entity_generator.codegen.languages.java import (
    PartitionTransformer,
    SimpleTransformer,
    create_transformer,
)
from entity_generator.codegen.languages.java.generator import render_node
from entity_generator.codegen.sql import TableMetadataAdapter, parse_table


def _meta(ddl, config):
    return TableMetadataAdapter.from_parse_result(parse_table(ddl), config).entity_meta


def _annotations(member):
    return [a.id.name for a in member.annotations]


def _field(declaration, name):
    return next(f for f in declaration.fields if f.id.name == name)


def _method(declaration, name):
    return next(m for m in declaration.methods if m.id.name == name)


@pytest.fixture
def users_meta(users_ddl, users_config):
    return _meta(users_ddl, users_config)


@pytest.fixture
def orders_meta(orders_ddl, config):
    return _meta(orders_ddl, config)


def test_transformer_selection(users_meta, orders_meta, context):
    assert isinstance(create_transformer(users_meta, context), SimpleTransformer)
    assert isinstance(create_transformer(orders_meta, context), PartitionTransformer)


def test_simple_entity(users_meta, context):
    unit = SimpleTransformer(users_meta, context).transform_entity()
    declaration = unit.type_declaration

    assert unit.package_name == "com.a1stream.domain.entity"
    assert _annotations(declaration) == ["Entity", "Getter", "Setter", "Table"]
    assert declaration.super_class.name == "BaseEntity"
    assert [i.name for i in declaration.implements] == ["Persistable"]
    assert declaration.implements[0].generics[0].name == "String"
    assert [f.id.name for f in declaration.fields] == [
        "serialVersionUID",
        "userId",
        "age",
        "balance",
        "isNew",
    ]

    user_id = _field(declaration, "userId")
    assert _annotations(user_id) == ["Id", "Column"]
    assert _annotations(_field(declaration, "age")) == ["Column"]
    assert _field(declaration, "balance").initializer.value == "BigDecimal.ZERO"
    assert _method(declaration, "getId").body.statements[0].value == "return userId;"
    assert unit.imports.count("java.math.BigDecimal") == 1
    assert unit.doc.lines == ("@author Test Author",)


def test_column_annotation_attributes(users_meta, context):
    declaration = SimpleTransformer(users_meta, context).transform_entity()

    lines = {f.id.name: render_node(f) for f in declaration.type_declaration.fields}
    assert (
        '@Column(name = "user_id_", length = 40, nullable = false)' in lines["userId"]
    )
    assert (
        '@Column(name = "balance_", precision = 16, scale = 2, nullable = true)'
        in lines["balance"]
    )


def test_generated_long_id(config, context):
    meta = _meta("CREATE TABLE item (item_id_ bigint PRIMARY KEY, name_ text);", config)

    unit = SimpleTransformer(meta, context).transform_entity()

    item_id = _field(unit.type_declaration, "itemId")
    assert _annotations(item_id) == ["Id", "SnowflakeGenerator", "Column"]
    assert "com.ymsl.solid.jpa.uuid.annotation.SnowflakeGenerator" in unit.imports


def test_string_id_has_no_generator(users_meta, context):
    unit = SimpleTransformer(users_meta, context).transform_entity()

    assert not any("SnowflakeGenerator" in name for name in unit.imports)


def test_simple_repository(users_meta, context):
    unit = SimpleTransformer(users_meta, context).transform_repository()
    declaration = unit.type_declaration

    assert declaration.kind == "interface"
    assert declaration.id.name == "UsersRepository"
    (base,) = declaration.extends
    assert base.name == "Repo"
    assert [g.name for g in base.generics] == ["Users", "String"]
    assert "com.example.Repo" in unit.imports
    assert "com.a1stream.domain.entity.Users" in unit.imports


def test_simple_vo(users_meta, context):
    unit = SimpleTransformer(users_meta, context).transform_vo()
    declaration = unit.type_declaration

    assert declaration.id.name == "UsersVO"
    assert declaration.super_class.name == "BaseVO"
    assert _annotations(_field(declaration, "balance")) == ["Builder.Default"]
    assert _field(declaration, "age").initializer.value == (
        "CommonConstants.INTEGER_ZERO"
    )
    assert [m.id.name for m in declaration.methods] == [
        "builderWithId",
        "builderWithDefault",
    ]
    with_id = _method(declaration, "builderWithId")
    assert with_id.return_type.name == "UsersVOBuilder"
    assert with_id.body.statements[0].value == (
        "return UsersVO.builder().userId(String.valueOf(Ids.worker().nextId()));"
    )
    assert "com.example.Ids" in unit.imports


def test_vo_without_builder_helpers_for_other_id_types(config, context):
    meta = _meta("CREATE TABLE t (code_ integer PRIMARY KEY, name_ text);", config)

    unit = SimpleTransformer(meta, context).transform_vo()

    assert unit.type_declaration.methods == ()
    assert "com.example.Ids" not in unit.imports


def test_partitioned_entity(orders_meta, context):
    unit = PartitionTransformer(orders_meta, context).transform_entity()
    declaration = unit.type_declaration

    assert _annotations(declaration) == [
        "Entity",
        "Getter",
        "Setter",
        "IdClass",
        "Table",
    ]
    assert declaration.super_class.name == "BasePartitionEntity"
    assert declaration.implements[0].generics[0].name == "SalesOrderKey"
    assert "Id" in _annotations(_field(declaration, "salesOrderId"))
    assert "Id" not in _annotations(_field(declaration, "dealerPartition"))
    assert _annotations(_field(declaration, "extra")) == ["Type", "Column"]
    assert _method(declaration, "getId").body.statements[0].value == (
        "return new SalesOrderKey(salesOrderId, dealerPartition);"
    )
    assert "jakarta.persistence.IdClass" in unit.imports


def test_entity_key(orders_meta, context):
    unit = PartitionTransformer(orders_meta, context).transform_entity_key()
    declaration = unit.type_declaration

    assert declaration.id.name == "SalesOrderKey"
    assert [i.name for i in declaration.implements] == ["Serializable"]
    assert [f.id.name for f in declaration.fields] == [
        "serialVersionUID",
        "salesOrderId",
        "dealerPartition",
    ]

    (constructor,) = declaration.constructors
    assert [p.id.name for p in constructor.params] == ["salesOrderId"]
    assert [s.value for s in constructor.body.statements] == [
        "this.salesOrderId = salesOrderId;",
        "this.dealerPartition = PartitionContext.current();",
    ]

    factory = _method(declaration, "of")
    assert [m.name for m in factory.modifiers] == ["public", "static"]
    assert factory.body.statements[0].value == "return new SalesOrderKey(salesOrderId);"
    assert "com.example.PartitionContext" in unit.imports


def test_partitioned_repository_keyed_by_key_class(orders_meta, context):
    unit = PartitionTransformer(orders_meta, context).transform_repository()

    (base,) = unit.type_declaration.extends
    assert [g.name for g in base.generics] == ["SalesOrder", "SalesOrderKey"]
    assert unit.package_name == "com.a1stream.domain.repository.partition"


def test_partitioned_vo_sets_partition(orders_meta, context):
    unit = PartitionTransformer(orders_meta, context).transform_vo()
    declaration = unit.type_declaration

    assert declaration.super_class.name == "BasePartitionVO"
    assert _method(declaration, "builderWithDefault").body.statements[0].value == (
        "return SalesOrderVO.builder().salesOrderId(Ids.worker().nextId())"
        ".dealerPartition(PartitionContext.current());"
    )
    assert not any("hibernate" in name for name in unit.imports)


def test_units_order(orders_meta, context):
    units = create_transformer(orders_meta, context).transform().units()

    assert [u.type_name for u in units] == [
        "SalesOrder",
        "SalesOrderKey",
        "SalesOrderRepository",
        "SalesOrderVO",
    ]


def _without_id(meta: EntityMeta) -> EntityMeta:
    fields = tuple(
        replace(f, is_primary_key=False) if not f.is_partition_key else f
        for f in meta.fields
    )
    return replace(meta, fields=fields)


def test_no_primary_key_simple(users_meta, context):
    transformer = SimpleTransformer(_without_id(users_meta), context)

    for transform in (
        transformer.transform_entity,
        transformer.transform_repository,
        transformer.transform_vo,
    ):
        with pytest.raises(NoPrimaryKeyError, match="users"):
            transform()


def test_no_primary_key_besides_partition(orders_meta, context):
    transformer = PartitionTransformer(_without_id(orders_meta), context)

    with pytest.raises(NoPrimaryKeyError):
        transformer.transform_vo()
    with pytest.raises(NoPrimaryKeyError):
        transformer.transform_repository()


def test_composite_key_without_partition_uses_first_id(config, context):
    meta = _meta(
        "CREATE TABLE t (a_ varchar(10), b_ bigint, PRIMARY KEY (a_, b_));", config
    )

    unit = SimpleTransformer(meta, context).transform_repository()

    (base,) = unit.type_declaration.extends
    assert base.generics[1].name == "String"


def test_transform_is_pure(orders_meta, context):
    first = create_transformer(orders_meta, context).transform()
    second = create_transformer(orders_meta, context).transform()

    assert first == second


def test_field_meta_is_hashable():
    field = EntityFieldMeta(name="a_", sql_type="text", field_name="a")

    assert {field: 1}[field] == 1


def test_numeric_precision_without_scale(config, context):
    meta = _meta(
        "CREATE TABLE t (id_ bigint PRIMARY KEY, n_ numeric(10) NOT NULL);", config
    )

    unit = SimpleTransformer(meta, context).transform_entity()

    lines = render_node(_field(unit.type_declaration, "n"))
    assert '@Column(name = "n_", precision = 10, nullable = false)' in lines


def test_shared_column_type_imported_once(config, context):
    meta = _meta(
        "CREATE TABLE t (id_ bigint PRIMARY KEY, price_ numeric(10,2), "
        "cost_ numeric(10,2), paid_ decimal(12,2));",
        config,
    )

    jpa = SimpleTransformer(meta, context).transform()

    assert jpa.entity.imports.count("java.math.BigDecimal") == 1
    assert jpa.vo.imports.count("java.math.BigDecimal") == 1


def test_partition_column_required(orders_ddl, config, context):
    omitted = replace(
        config, omit_columns=config.omit_columns + ("dealer_partition_",)
    )
    transformer = PartitionTransformer(_meta(orders_ddl, omitted), context)

    for transform in (
        transformer.transform_entity,
        transformer.transform_entity_key,
        transformer.transform_vo,
    ):
        with pytest.raises(TableMetadataError, match="dealer_partition_"):
            transform()


def test_entity_key_imports_partition_type(config, context):
    ddl = (
        "CREATE TABLE daily_stock (stock_id_ bigint, business_date_ date, "
        "PRIMARY KEY (stock_id_, business_date_));"
    )
    meta = _meta(ddl, replace(config, partition_key="business_date_"))

    unit = PartitionTransformer(meta, context).transform_entity_key()

    assert "java.time.LocalDate" in unit.imports
    assert _field(unit.type_declaration, "businessDate").type.name == "LocalDate"
