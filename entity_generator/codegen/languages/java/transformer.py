"""
Entity, entity key, repository and value object derivation.

Turns one :class:`EntityMeta` into the Java compilation units for a
table. Simple and partitioned tables share the helpers below and differ
only through a :class:`TransformPolicy`; :func:`create_transformer`
picks the transformer that matches the metadata.

Everything the generated code needs from its runtime environment (the
current partition, identifier generation) is passed in through a
:class:`TransformContext`, so a transform is a pure function of its
inputs.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, ClassVar, List, Optional, Tuple

from ...core.config import GeneratorConfig
from ...core.errors import NoPrimaryKeyError, TableMetadataError
from ...core.schema import EntityFieldMeta, EntityMeta
from ...core.templates import TemplateEngine
from ....logging_config import get_logger
from .ast import CompilationUnit, FieldDeclaration, MethodDeclaration
from .builder import (
    ClassBuilder,
    CompilationUnitBuilder,
    ConstructorBuilder,
    FieldBuilder,
    InterfaceBuilder,
    MethodBuilder,
    create_annotation,
    create_type_reference,
)
from .types import ID_GENERATED_TYPE, STRING_TYPE

logger = get_logger(__name__)

STATEMENT_TEMPLATES = {
    "author_doc": "@author {{ author }}",
    "assign_field": "this.{{ name }} = {{ value }};",
    "return": "return {{ value }};",
    "new_instance": "new {{ type_name }}({{ args | join(', ') }})",
    "builder_chain": (
        "{{ type_name }}.builder()"
        "{% for name, value in calls %}.{{ name }}({{ value }}){% endfor %}"
    ),
}

ENTITY_IMPORTS = (
    "jakarta.persistence.Column",
    "jakarta.persistence.Entity",
    "jakarta.persistence.Id",
    "jakarta.persistence.PostLoad",
    "jakarta.persistence.PostPersist",
    "jakarta.persistence.Table",
    "jakarta.persistence.Transient",
    "lombok.Getter",
    "lombok.Setter",
    "org.springframework.data.domain.Persistable",
)
ID_CLASS_IMPORT = "jakarta.persistence.IdClass"
SNOWFLAKE_IMPORT = "com.ymsl.solid.jpa.uuid.annotation.SnowflakeGenerator"

ENTITY_KEY_IMPORTS = (
    "java.io.Serializable",
    "lombok.AllArgsConstructor",
    "lombok.Data",
    "lombok.NoArgsConstructor",
)

REPOSITORY_IMPORTS = ("org.springframework.stereotype.Repository",)

VO_IMPORTS = (
    "lombok.AllArgsConstructor",
    "lombok.Builder",
    "lombok.Data",
    "lombok.EqualsAndHashCode",
    "lombok.NoArgsConstructor",
)

SERIAL_VERSION_UID = "serialVersionUID"
IS_NEW_FIELD = "isNew"

_templates = TemplateEngine()
_templates.add_templates(STATEMENT_TEMPLATES)


def render_statement(template_name: str, **context) -> str:
    return _templates.render_template(template_name, context)


# Injected capabilities


class IdGenerator(ABC):
    """Produces Java expressions that yield a fresh identifier."""

    imports: Tuple[str, ...] = ()

    @abstractmethod
    def next_id(self) -> str:
        """Expression of type long."""
        pass

    @abstractmethod
    def next_id_as_string(self) -> str:
        """Expression of type String."""
        pass


class SnowflakeIdGenerator(IdGenerator):
    """Identifiers from the application's snowflake worker."""

    def __init__(
        self,
        worker_expression: str = "IdUtils.getSnowflakeIdWorker()",
        imports: Tuple[str, ...] = ("com.ymsl.solid.base.util.IdUtils",),
    ):
        self.worker_expression = worker_expression
        self.imports = tuple(imports)

    def next_id(self) -> str:
        return f"{self.worker_expression}.nextId()"

    def next_id_as_string(self) -> str:
        return f"String.valueOf({self.next_id()})"

    def __eq__(self, other):
        return (
            isinstance(other, SnowflakeIdGenerator)
            and other.worker_expression == self.worker_expression
            and other.imports == self.imports
        )

    def __hash__(self):
        return hash((self.worker_expression, self.imports))


@dataclass(frozen=True)
class TransformContext:
    """
    Caller-supplied inputs of a transform besides the table metadata.

    ``partition_context_provider`` returns the Java expression that reads
    the current partition at runtime.
    """

    partition_context_provider: Callable[[], str]
    partition_context_imports: Tuple[str, ...] = ()
    id_generator: IdGenerator = field(default_factory=SnowflakeIdGenerator)
    author: str = "Entity Generator G3"

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> "TransformContext":
        expression = config.partition_context_expression
        return cls(
            partition_context_provider=lambda: expression,
            partition_context_imports=(
                (config.partition_context_import,)
                if config.partition_context_import
                else ()
            ),
            id_generator=SnowflakeIdGenerator(
                config.id_generator_expression,
                (config.id_generator_import,) if config.id_generator_import else (),
            ),
            author=config.author,
        )


@dataclass(frozen=True)
class TransformPolicy:
    """What sets the partitioned path apart from the simple one."""

    # Entity is keyed by a companion <Entity>Key class (@IdClass)
    composite_key_class: bool = False

    # Partition column gets no @Id; identity lives in the key class
    identity_excludes_partition: bool = False

    # builderWithDefault() also fills the partition column
    vo_sets_partition: bool = False


SIMPLE_POLICY = TransformPolicy()
PARTITION_POLICY = TransformPolicy(
    composite_key_class=True,
    identity_excludes_partition=True,
    vo_sets_partition=True,
)


@dataclass(frozen=True)
class JpaUnit:
    """The compilation units generated for one table."""

    entity: CompilationUnit
    repository: CompilationUnit
    vo: CompilationUnit
    entity_key: Optional[CompilationUnit] = None

    def units(self) -> List[CompilationUnit]:
        units = [self.entity]
        if self.entity_key is not None:
            units.append(self.entity_key)
        units.extend([self.repository, self.vo])
        return units


# Shared helpers


def require_id_fields(meta: EntityMeta) -> Tuple[EntityFieldMeta, ...]:
    """Primary-key fields other than the partition key; at least one is required."""
    id_fields = meta.id_fields
    if not id_fields:
        raise NoPrimaryKeyError(meta.table_name)
    return id_fields


def require_partition_field(meta: EntityMeta) -> EntityFieldMeta:
    partition = meta.partition_field
    if partition is None:
        raise TableMetadataError(
            f"Partition column {meta.partition_key} of {meta.table_name} "
            "is not among the generated fields"
        )
    return partition


def id_type_name(meta: EntityMeta, policy: TransformPolicy) -> str:
    """Type argument of Persistable and the repository."""
    if policy.composite_key_class:
        return meta.entity_key_name
    id_fields = require_id_fields(meta)
    if len(id_fields) > 1:
        logger.warning(
            "Table %s has a composite primary key without partitioning; "
            "keying the entity by %s",
            meta.table_name,
            id_fields[0].name,
        )
    return id_fields[0].field_type


def _unit(context: TransformContext, package: str) -> CompilationUnitBuilder:
    unit = CompilationUnitBuilder().package(package)
    unit.doc_comment([render_statement("author_doc", author=context.author)])
    return unit


def _import_if_foreign(
    unit: CompilationUnitBuilder, own_package: str, package: str, name: str
):
    if package and package != own_package:
        unit.add_import(f"{package}.{name}")


def private_field(name: str, type_name: str) -> FieldDeclaration:
    return FieldBuilder(name, type_name).modifiers("private").build()


def serial_version_uid() -> FieldDeclaration:
    return (
        FieldBuilder(SERIAL_VERSION_UID, "long")
        .modifiers("private", "static", "final")
        .initializer("1L")
        .build()
    )


def column_annotation(f: EntityFieldMeta):
    return create_annotation(
        "Column",
        name=f.name,
        length=f.length,
        precision=f.precision,
        scale=f.scale,
        nullable=f.nullable,
        columnDefinition=f.column_definition,
    )


def is_identity(f: EntityFieldMeta, policy: TransformPolicy) -> bool:
    if not f.is_primary_key:
        return False
    return not (policy.identity_excludes_partition and f.is_partition_key)


def entity_field(
    f: EntityFieldMeta, policy: TransformPolicy, generated_id: bool
) -> FieldDeclaration:
    builder = FieldBuilder(f.field_name, f.field_type).modifiers("private")
    if is_identity(f, policy):
        builder.annotate("Id")
        if generated_id:
            builder.annotate("SnowflakeGenerator")
    if f.is_json:
        builder.annotate("Type", value=create_type_reference("StringJsonUserType"))
    builder.annotate(column_annotation(f))
    builder.initializer(f.default_value)
    return builder.build()


def has_generated_id(meta: EntityMeta) -> bool:
    id_fields = meta.id_fields
    return len(id_fields) == 1 and id_fields[0].field_type == ID_GENERATED_TYPE


def lifecycle_members(id_type: str, id_expression: str) -> List:
    """isNew flag plus the Persistable methods and the lifecycle hook."""
    return [
        FieldBuilder(IS_NEW_FIELD, "boolean")
        .modifiers("private")
        .annotate("Transient")
        .initializer("true")
        .build(),
        MethodBuilder("getId", id_type)
        .modifiers("public")
        .annotate("Override")
        .statement(render_statement("return", value=id_expression))
        .build(),
        MethodBuilder("isNew", "boolean")
        .modifiers("public")
        .annotate("Override")
        .statement(render_statement("return", value=IS_NEW_FIELD))
        .build(),
        MethodBuilder("markAsNotNew", "void")
        .modifiers("public")
        .annotate("PostPersist")
        .annotate("PostLoad")
        .statement(render_statement("assign_field", name=IS_NEW_FIELD, value="false"))
        .build(),
    ]


def build_entity(
    meta: EntityMeta, context: TransformContext, policy: TransformPolicy
) -> CompilationUnit:
    id_fields = require_id_fields(meta)
    id_type = id_type_name(meta, policy)
    generated_id = has_generated_id(meta)

    unit = _unit(context, meta.entity_package)
    unit.add_imports(ENTITY_IMPORTS)
    unit.add_import(meta.entity_super_class.package)

    declaration = (
        ClassBuilder(meta.entity_name)
        .modifiers("public")
        .annotate("Entity")
        .annotate("Getter")
        .annotate("Setter")
    )

    if policy.composite_key_class:
        unit.add_import(ID_CLASS_IMPORT)
        _import_if_foreign(
            unit, meta.entity_package, meta.entity_key_package, meta.entity_key_name
        )
        key_type = create_type_reference(meta.entity_key_name)
        declaration.annotate("IdClass", value=key_type)
        partition = require_partition_field(meta)
        key_args = [f.field_name for f in id_fields] + [partition.field_name]
        id_expression = render_statement(
            "new_instance", type_name=meta.entity_key_name, args=key_args
        )
    else:
        id_expression = id_fields[0].field_name

    declaration.annotate("Table", name=meta.table_name)
    declaration.super_class(meta.entity_super_class.name)
    declaration.implements(create_type_reference("Persistable", [id_type]))

    if generated_id:
        unit.add_import(SNOWFLAKE_IMPORT)

    declaration.member(serial_version_uid())
    for f in meta.fields:
        unit.add_imports(f.imports)
        unit.add_imports(f.default_imports)
        declaration.member(entity_field(f, policy, generated_id))

    declaration.members(lifecycle_members(id_type, id_expression))
    return unit.class_declaration(declaration.build()).build()


def build_entity_key(meta: EntityMeta, context: TransformContext) -> CompilationUnit:
    id_fields = require_id_fields(meta)
    key_name = meta.entity_key_name
    partition = require_partition_field(meta)

    unit = _unit(context, meta.entity_key_package)
    unit.add_imports(ENTITY_KEY_IMPORTS)
    unit.add_imports(context.partition_context_imports)

    declaration = (
        ClassBuilder(key_name)
        .modifiers("public")
        .annotate("Data")
        .annotate("NoArgsConstructor")
        .annotate("AllArgsConstructor")
        .implements("Serializable")
        .member(serial_version_uid())
    )

    constructor = ConstructorBuilder(key_name).modifiers("private")
    factory = MethodBuilder("of", key_name).modifiers("public", "static")

    for f in id_fields:
        if not f.is_json:
            unit.add_imports(f.imports)
        declaration.member(private_field(f.field_name, f.field_type))
        constructor.param(f.field_name, f.field_type)
        constructor.statement(
            render_statement("assign_field", name=f.field_name, value=f.field_name)
        )
        factory.param(f.field_name, f.field_type)

    if not partition.is_json:
        unit.add_imports(partition.imports)
    declaration.member(private_field(partition.field_name, partition.field_type))
    constructor.statement(
        render_statement(
            "assign_field",
            name=partition.field_name,
            value=context.partition_context_provider(),
        )
    )
    factory.statement(
        render_statement(
            "return",
            value=render_statement(
                "new_instance",
                type_name=key_name,
                args=[f.field_name for f in id_fields],
            ),
        )
    )

    declaration.member(constructor.build()).member(factory.build())
    return unit.class_declaration(declaration.build()).build()


def build_repository(
    meta: EntityMeta, context: TransformContext, policy: TransformPolicy
) -> CompilationUnit:
    id_fields = require_id_fields(meta)
    id_type = id_type_name(meta, policy)
    super_class = meta.repository_super_class

    unit = _unit(context, meta.repository_package)
    unit.add_imports(REPOSITORY_IMPORTS)
    _import_if_foreign(
        unit, meta.repository_package, meta.entity_package, meta.entity_name
    )
    if policy.composite_key_class:
        _import_if_foreign(
            unit, meta.repository_package, meta.entity_key_package, meta.entity_key_name
        )
    else:
        id_field = id_fields[0]
        if not id_field.is_json:
            unit.add_imports(id_field.imports)
    unit.add_import(super_class.package)

    declaration = (
        InterfaceBuilder(meta.repository_name)
        .modifiers("public")
        .annotate("Repository")
        .extends(create_type_reference(super_class.name, [meta.entity_name, id_type]))
    )
    return unit.interface_declaration(declaration.build()).build()


def vo_field(f: EntityFieldMeta) -> FieldDeclaration:
    builder = FieldBuilder(f.field_name, f.field_type).modifiers("private")
    if f.vo_default_value is not None:
        builder.annotate("Builder.Default")
        builder.initializer(f.vo_default_value)
    return builder.build()


def vo_builder_methods(
    meta: EntityMeta, context: TransformContext, policy: TransformPolicy
) -> List[MethodDeclaration]:
    """builderWithId() and builderWithDefault(), for a single Long or String id."""
    id_fields = meta.id_fields
    if len(id_fields) != 1:
        return []

    id_field = id_fields[0]
    if id_field.field_type == ID_GENERATED_TYPE:
        next_id = context.id_generator.next_id()
    elif id_field.field_type == STRING_TYPE:
        next_id = context.id_generator.next_id_as_string()
    else:
        return []

    builder_type = f"{meta.vo_name}Builder"
    with_id = [(id_field.field_name, next_id)]
    with_default = list(with_id)
    if policy.vo_sets_partition:
        partition = require_partition_field(meta)
        partition_value = context.partition_context_provider()
        with_default.append((partition.field_name, partition_value))

    def factory(name, calls):
        chain = render_statement("builder_chain", type_name=meta.vo_name, calls=calls)
        return (
            MethodBuilder(name, builder_type)
            .modifiers("public", "static")
            .statement(render_statement("return", value=chain))
            .build()
        )

    return [
        factory("builderWithId", with_id),
        factory("builderWithDefault", with_default),
    ]


def build_vo(
    meta: EntityMeta, context: TransformContext, policy: TransformPolicy
) -> CompilationUnit:
    require_id_fields(meta)
    if policy.vo_sets_partition:
        require_partition_field(meta)

    unit = _unit(context, meta.vo_package)
    unit.add_imports(VO_IMPORTS)
    unit.add_import(meta.vo_super_class.package)

    declaration = (
        ClassBuilder(meta.vo_name)
        .modifiers("public")
        .annotate("Data")
        .annotate("Builder")
        .annotate("AllArgsConstructor")
        .annotate("NoArgsConstructor")
        .annotate("EqualsAndHashCode", callSuper=True)
        .super_class(meta.vo_super_class.name)
        .member(serial_version_uid())
    )

    for f in meta.fields:
        # JSON columns map to String; their imports are entity annotations
        if not f.is_json:
            unit.add_imports(f.imports)
        unit.add_imports(f.vo_default_imports)
        declaration.member(vo_field(f))

    methods = vo_builder_methods(meta, context, policy)
    if methods:
        unit.add_imports(context.id_generator.imports)
        if policy.vo_sets_partition:
            unit.add_imports(context.partition_context_imports)
        declaration.members(methods)

    return unit.class_declaration(declaration.build()).build()


# Transformers


class JpaTransformer(ABC):
    """Derives the compilation units of one table."""

    policy: ClassVar[TransformPolicy] = SIMPLE_POLICY

    def __init__(self, meta: EntityMeta, context: TransformContext):
        self.meta = meta
        self.context = context

    def transform_entity(self) -> CompilationUnit:
        return build_entity(self.meta, self.context, self.policy)

    def transform_repository(self) -> CompilationUnit:
        return build_repository(self.meta, self.context, self.policy)

    def transform_vo(self) -> CompilationUnit:
        return build_vo(self.meta, self.context, self.policy)

    @abstractmethod
    def transform(self) -> JpaUnit:
        pass


class SimpleTransformer(JpaTransformer):
    """Entity, repository and VO for a table without partitioning."""

    policy = SIMPLE_POLICY

    def transform(self) -> JpaUnit:
        logger.debug("Transforming %s (simple)", self.meta.table_name)
        return JpaUnit(
            entity=self.transform_entity(),
            repository=self.transform_repository(),
            vo=self.transform_vo(),
        )


class PartitionTransformer(JpaTransformer):
    """Adds the composite key class for tables keyed by the partition column."""

    policy = PARTITION_POLICY

    def transform_entity_key(self) -> CompilationUnit:
        return build_entity_key(self.meta, self.context)

    def transform(self) -> JpaUnit:
        logger.debug("Transforming %s (partitioned)", self.meta.table_name)
        return JpaUnit(
            entity=self.transform_entity(),
            entity_key=self.transform_entity_key(),
            repository=self.transform_repository(),
            vo=self.transform_vo(),
        )


def create_transformer(meta: EntityMeta, context: TransformContext) -> JpaTransformer:
    """Pick the transformer matching the table's partitioning."""
    if meta.is_partitioned:
        return PartitionTransformer(meta, context)
    return SimpleTransformer(meta, context)
