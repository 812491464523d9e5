"""
Entity Generator Code Generation Module

Generates JPA entity, key, repository and value object sources from
PostgreSQL CREATE TABLE statements.
"""

import re
from typing import Optional

from .core.config import GeneratorConfig, ConfigManager, get_config, load_config
from .core.errors import GeneratorError
from .core.generator import CodeGenerator, GeneratedFile, GenerationResult
from .core.schema import EntityMeta, TableMeta
from .languages.java import (
    JavaGenerator,
    TransformContext,
    create_transformer,
)
from .sql import TableMetadataAdapter, parse_table
from ..logging_config import get_logger

logger = get_logger(__name__)

# Version info
__version__ = "0.1.0"

_TABLE_NAME = re.compile(
    r"create\s+table\s+(?:if\s+not\s+exists\s+)?([\w.\"]+)", re.IGNORECASE
)


def guess_table_name(ddl: str) -> str:
    """Best-effort table name for reporting, before the DDL has been parsed."""
    match = _TABLE_NAME.search(ddl)
    if match is None:
        return "<unknown>"
    return match.group(1).split(".")[-1].strip('"')


def extract_metadata(
    ddl: str, config: Optional[GeneratorConfig] = None
) -> TableMetadataAdapter:
    """
    Parse one CREATE TABLE statement and extract its metadata.

    Args:
        ddl: DDL text of a single table
        config: Generator configuration (process config when omitted)

    Returns:
        Adapter exposing table_meta, entity_meta and collected warnings
    """
    config = config or get_config()
    return TableMetadataAdapter.from_parse_result(parse_table(ddl), config)


def generate_from_ddl(
    ddl: str,
    config: Optional[GeneratorConfig] = None,
    context: Optional[TransformContext] = None,
) -> GenerationResult:
    """
    Generate every source file for one table.

    Args:
        ddl: DDL text of a single CREATE TABLE statement
        config: Generator configuration (process config when omitted)
        context: Id generator, partition context and author to use
            (derived from the configuration when omitted)

    Returns:
        GenerationResult with one GeneratedFile per compilation unit, or a
        failed result carrying the error
    """
    config = config or get_config()
    context = context or TransformContext.from_config(config)
    table_name = guess_table_name(ddl)

    try:
        adapter = extract_metadata(ddl, config)
        meta = adapter.entity_meta
        table_name = meta.table_name

        jpa_unit = create_transformer(meta, context).transform()
        generator = JavaGenerator(config)
        files = [
            GeneratedFile(
                package=unit.package_name,
                type_name=unit.type_name,
                code=generator.generate(unit),
                extension=generator.file_extension,
            )
            for unit in jpa_unit.units()
        ]
    except GeneratorError as e:
        logger.error("Generation failed for table %s: %s", table_name, e)
        return GenerationResult.error(table_name, str(e), e)

    logger.info("Generated %d files for table %s", len(files), table_name)
    return GenerationResult(
        table_name=table_name,
        files=files,
        warnings=list(adapter.warnings),
        metadata={
            "entity_name": meta.entity_name,
            "partitioned": meta.is_partitioned,
            "primary_keys": list(meta.primary_keys),
        },
    )


# Export main interfaces
__all__ = [
    "CodeGenerator",
    "GeneratedFile",
    "GenerationResult",
    "GeneratorConfig",
    "ConfigManager",
    "EntityMeta",
    "TableMeta",
    "JavaGenerator",
    "TransformContext",
    "extract_metadata",
    "generate_from_ddl",
    "guess_table_name",
    "load_config",
]
