"""
Core code generation components.

Provides base classes and utilities used by all language generators.
"""

from .config import (
    ConfigError,
    ConfigManager,
    FormatOptions,
    GeneratorConfig,
    get_config,
    init_config_file,
    load_config,
)
from .errors import (
    AstBuildError,
    CollaboratorError,
    GeneratorError,
    MetadataError,
    NoPrimaryKeyError,
    TemplateError,
)
from .generator import CodeGenerator, GeneratedFile, GenerationResult
from .naming import NameSanitizer, NamingCase
from .schema import ColumnMeta, EntityFieldMeta, EntityMeta, SuperClassRef, TableMeta
from .templates import TemplateEngine

__all__ = [
    # Base generator interface
    "CodeGenerator",
    "GeneratedFile",
    "GenerationResult",
    # Errors
    "GeneratorError",
    "AstBuildError",
    "MetadataError",
    "NoPrimaryKeyError",
    "CollaboratorError",
    "TemplateError",
    # Table and entity metadata
    "ColumnMeta",
    "TableMeta",
    "EntityFieldMeta",
    "EntityMeta",
    "SuperClassRef",
    # Naming utilities - language-agnostic
    "NameSanitizer",
    "NamingCase",
    # Configuration system
    "GeneratorConfig",
    "FormatOptions",
    "ConfigManager",
    "ConfigError",
    "get_config",
    "init_config_file",
    "load_config",
    # Template system
    "TemplateEngine",
]
