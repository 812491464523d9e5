"""
Java code generator module.

Builds JPA entity, entity key, repository and value object sources from
table metadata.
"""

from .formatter import JavaFormatter
from .generator import JavaGenerator, render_node
from .naming import create_java_sanitizer
from .transformer import (
    IdGenerator,
    JpaUnit,
    PartitionTransformer,
    SimpleTransformer,
    SnowflakeIdGenerator,
    TransformContext,
    TransformPolicy,
    create_transformer,
)
from .types import JavaType, JavaTypeMapper

__all__ = [
    "JavaGenerator",
    "JavaFormatter",
    "render_node",
    "create_java_sanitizer",
    "JavaType",
    "JavaTypeMapper",
    # Transformation
    "IdGenerator",
    "SnowflakeIdGenerator",
    "TransformContext",
    "TransformPolicy",
    "JpaUnit",
    "SimpleTransformer",
    "PartitionTransformer",
    "create_transformer",
    # Factory functions
    "create_generator",
]


def create_generator(config=None, **format_overrides):
    """
    Create a Java generator.

    Args:
        config: GeneratorConfig to use (process config when omitted)
        **format_overrides: FormatOptions fields to override

    Returns:
        Configured JavaGenerator instance
    """
    from dataclasses import replace

    from ...core.config import get_config

    config = config or get_config()
    formatter = None
    if format_overrides:
        formatter = JavaFormatter(replace(config.format_options, **format_overrides))
    return JavaGenerator(config, formatter=formatter)
