"""Shared fixtures for the entity generator tests."""

from dataclasses import replace

import pytest

from entity_generator.codegen.core.config import GeneratorConfig, reset_config
from entity_generator.codegen.core.schema import SuperClassRef
from entity_generator.codegen.languages.java import (
    SnowflakeIdGenerator,
    TransformContext,
)

USERS_DDL = (
    "CREATE TABLE users (user_id_ varchar(40) NOT NULL, age_ integer NOT NULL, "
    "balance_ numeric(16,2) NULL, CONSTRAINT users_pk PRIMARY KEY (user_id_));"
)

ORDERS_DDL = """
CREATE TABLE public.sales_order (
    sales_order_id_ bigint NOT NULL,
    dealer_partition_ varchar(20) NOT NULL,
    order_no_ varchar(40) NOT NULL,
    amount_ numeric(18,2),
    extra_ jsonb,
    update_author_ varchar(60),
    CONSTRAINT sales_order_pk PRIMARY KEY (sales_order_id_, dealer_partition_)
) PARTITION BY LIST (dealer_partition_);
"""


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the process-wide config away from the user's home directory."""
    monkeypatch.setenv("ENTITY_GENERATOR_CONFIG", str(tmp_path / "missing.ini"))
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    """Default configuration with a short repository base class."""
    return replace(
        GeneratorConfig(),
        repository_super_class=SuperClassRef("Repo", "com.example.Repo"),
    )


@pytest.fixture
def users_config(config):
    """Configuration from the users example: three mapped types, nothing omitted."""
    return replace(
        config,
        data_type_map={
            "varchar": "String",
            "integer": "Integer",
            "numeric": "BigDecimal",
        },
        omit_columns=(),
    )


@pytest.fixture
def context():
    """Transform context with fixed, recognizable runtime expressions."""
    return TransformContext(
        partition_context_provider=lambda: "PartitionContext.current()",
        partition_context_imports=("com.example.PartitionContext",),
        id_generator=SnowflakeIdGenerator("Ids.worker()", ("com.example.Ids",)),
        author="Test Author",
    )


@pytest.fixture
def users_ddl():
    return USERS_DDL


@pytest.fixture
def orders_ddl():
    return ORDERS_DDL
