"""
Core table representation for code generation.

Normalizes what the DDL parser produced into immutable structures
that the transformers can work with without touching the SQL AST.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class SuperClassRef:
    """A configured base type: simple name plus its fully-qualified import."""

    name: str
    package: str


@dataclass(frozen=True)
class ColumnMeta:
    """Represents a single column of a CREATE TABLE statement."""

    name: str
    sql_type: str
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    nullable: bool = False
    is_primary_key: bool = False
    is_partition_key: bool = False

    # Set to the SQL type name for json/jsonb columns
    column_definition: Optional[str] = None

    # Type as spelled in the DDL ("int4" where sql_type is "integer")
    declared_type: Optional[str] = None

    @property
    def is_json(self) -> bool:
        return self.column_definition is not None

    @property
    def type_names(self) -> Tuple[str, ...]:
        """Names to resolve the column type by, declared spelling first."""
        if self.declared_type and self.declared_type != self.sql_type:
            return (self.declared_type, self.sql_type)
        return (self.sql_type,)


@dataclass(frozen=True)
class TableMeta:
    """Table name, primary keys and the retained columns, in DDL order."""

    table_name: str
    primary_keys: Tuple[str, ...] = ()
    columns: Tuple[ColumnMeta, ...] = ()

    def column(self, name: str) -> Optional[ColumnMeta]:
        for column in self.columns:
            if column.name == name:
                return column
        return None


@dataclass(frozen=True)
class EntityFieldMeta(ColumnMeta):
    """A column projected onto the Java side."""

    field_name: str = ""
    field_type: str = "Object"
    imports: Tuple[str, ...] = ()

    # Entity field initializer
    default_value: Optional[str] = None
    default_imports: Tuple[str, ...] = ()

    # VO field initializer
    vo_default_value: Optional[str] = None
    vo_default_imports: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EntityMeta:
    """
    Everything the transformers need to derive the output units of one table.

    Built once per DDL statement by the table metadata adapter and never
    mutated afterwards.
    """

    table_name: str
    entity_name: str
    entity_package: str
    entity_super_class: SuperClassRef
    repository_package: str
    repository_super_class: SuperClassRef
    vo_package: str
    vo_super_class: SuperClassRef
    entity_key_package: str = ""
    is_partitioned: bool = False
    partition_key: Optional[str] = None
    primary_keys: Tuple[str, ...] = ()
    fields: Tuple[EntityFieldMeta, ...] = field(default_factory=tuple)

    @property
    def id_fields(self) -> Tuple[EntityFieldMeta, ...]:
        """Primary-key fields, excluding the partition key."""
        return tuple(
            f for f in self.fields if f.is_primary_key and not f.is_partition_key
        )

    @property
    def partition_field(self) -> Optional[EntityFieldMeta]:
        for f in self.fields:
            if f.is_partition_key:
                return f
        return None

    @property
    def entity_key_name(self) -> str:
        return f"{self.entity_name}Key"

    @property
    def repository_name(self) -> str:
        return f"{self.entity_name}Repository"

    @property
    def vo_name(self) -> str:
        return f"{self.entity_name}VO"
