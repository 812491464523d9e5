"""
Java-specific type system for code generation.

Maps PostgreSQL column types to Java types, their imports and the
default initializers configured for entities and value objects.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from ...core.config import GeneratorConfig

# Column types whose declared size ends up in @Column
LENGTH_TYPES = frozenset({"character varying", "varchar"})
PRECISION_TYPES = frozenset({"numeric"})

# Column types stored through the JSON user type
JSON_TYPES = frozenset({"json", "jsonb"})

ID_GENERATED_TYPE = "Long"
STRING_TYPE = "String"


@dataclass(frozen=True)
class JavaType:
    """A mapped Java type with the imports it needs."""

    name: str
    imports: Tuple[str, ...] = ()
    is_fallback: bool = False


@dataclass(frozen=True)
class DefaultValue:
    """A field initializer expression with the imports it needs."""

    expression: Optional[str] = None
    imports: Tuple[str, ...] = ()


def as_imports(value: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    """Normalize a configured import entry (single name or list) to a tuple."""
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _first_key(mapping, names: Tuple[str, ...]) -> Optional[str]:
    return next((name for name in names if name in mapping), None)


class JavaTypeMapper:
    """
    Resolves SQL types against the configured maps.

    Every lookup takes one or more type names, most specific first: the
    spelling declared in the DDL (``int4``, ``decimal``) and then the
    normalized PostgreSQL name (``integer``, ``numeric``). The first name a
    map knows wins.
    """

    def __init__(self, config: GeneratorConfig):
        self.config = config

    def map_sql_type(self, *type_names: str) -> JavaType:
        key = _first_key(self.config.data_type_map, type_names)
        if key is None:
            import_key = _first_key(self.config.data_import_map, type_names)
            return JavaType(
                name=self.config.fallback_type,
                imports=as_imports(self.config.data_import_map.get(import_key)),
                is_fallback=True,
            )
        return JavaType(
            name=self.config.data_type_map[key],
            imports=as_imports(self.config.data_import_map.get(key)),
        )

    def entity_default(self, *type_names: str) -> DefaultValue:
        key = _first_key(self.config.default_value_map, type_names)
        if key is None:
            return DefaultValue()
        return DefaultValue(
            self.config.default_value_map[key],
            as_imports(self.config.default_import_map.get(key)),
        )

    def vo_default(self, *type_names: str) -> DefaultValue:
        key = _first_key(self.config.default_vo_value_map, type_names)
        if key is None:
            return DefaultValue()
        return DefaultValue(
            self.config.default_vo_value_map[key],
            as_imports(self.config.default_vo_import_map.get(key)),
        )


def has_length(sql_type: str) -> bool:
    return sql_type in LENGTH_TYPES


def has_precision(sql_type: str) -> bool:
    return sql_type in PRECISION_TYPES


def is_json_type(sql_type: str) -> bool:
    return sql_type in JSON_TYPES
