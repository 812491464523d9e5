"""
Table metadata adapter.

Walks a sqlglot ``CREATE TABLE`` expression once and produces the
immutable :class:`TableMeta` and :class:`EntityMeta` the transformers
work from. Nothing downstream touches the SQL AST.
"""

from typing import Dict, Iterable, List, Optional

from sqlglot import exp
from sqlglot.tokens import TokenType

from ..core.config import GeneratorConfig
from ..core.errors import TableMetadataError
from ..core.naming import NamingCase
from ..core.schema import ColumnMeta, EntityFieldMeta, EntityMeta, TableMeta
from ..languages.java.naming import create_java_sanitizer
from ..languages.java.types import (
    JavaTypeMapper,
    has_length,
    has_precision,
    is_json_type,
)
from ...logging_config import get_logger
from .parser import ParseResult, is_create_table, tokenize

logger = get_logger(__name__)

# sqlglot type names mapped back to PostgreSQL spelling
SQL_TYPE_NAMES = {
    "INT": "integer",
    "BIGINT": "bigint",
    "SMALLINT": "smallint",
    "TINYINT": "smallint",
    "VARCHAR": "varchar",
    "NVARCHAR": "varchar",
    "CHAR": "char",
    "NCHAR": "char",
    "BPCHAR": "bpchar",
    "TEXT": "text",
    "DECIMAL": "numeric",
    "BOOLEAN": "boolean",
    "DATE": "date",
    "TIME": "time",
    "TIMETZ": "timetz",
    "TIMESTAMP": "timestamp",
    "TIMESTAMPTZ": "timestamptz",
    "JSON": "json",
    "JSONB": "jsonb",
    "VARBINARY": "bytea",
    "BINARY": "bytea",
    "DOUBLE": "double precision",
    "FLOAT": "real",
    "UUID": "uuid",
    "SERIAL": "integer",
    "BIGSERIAL": "bigint",
    "SMALLSERIAL": "smallint",
}


def normalize_type_name(data_type: exp.DataType) -> str:
    """PostgreSQL name for a parsed column type (``VARCHAR`` -> ``varchar``)."""
    kind = data_type.this
    if kind == exp.DataType.Type.USERDEFINED and data_type.args.get("kind"):
        return str(data_type.args["kind"]).lower()
    value = kind.value if isinstance(kind, exp.DataType.Type) else str(kind)
    return SQL_TYPE_NAMES.get(value, value.lower())


# Words that continue a multi-word type name ("timestamp with time zone")
_TYPE_NAME_WORDS = frozenset(
    {"varying", "precision", "with", "without", "time", "zone"}
)


def declared_type_names(source: str, column_names: Iterable[str]) -> Dict[str, str]:
    """
    Column types as spelled in the DDL text (``int4``, ``decimal``, ``bool``).

    sqlglot folds aliases into one canonical type, so the spelling is read
    back from the tokens that follow each column name in the column list.
    """
    names = {name.lower(): name for name in column_names}
    tokens = tokenize(source)
    declared: Dict[str, str] = {}

    depth = 0
    at_definition = False
    for index, token in enumerate(tokens):
        if token.token_type == TokenType.L_PAREN:
            depth += 1
            at_definition = depth == 1
            continue
        if token.token_type == TokenType.R_PAREN:
            depth -= 1
            continue
        if depth == 1 and token.token_type == TokenType.COMMA:
            at_definition = True
            continue
        if not at_definition:
            continue

        at_definition = False
        name = names.get(token.text.lower())
        if name is None or name in declared or index + 1 >= len(tokens):
            continue

        words = [tokens[index + 1].text.lower()]
        for follower in tokens[index + 2 :]:
            if follower.text.lower() not in _TYPE_NAME_WORDS:
                break
            words.append(follower.text.lower())
        declared[name] = " ".join(" ".join(words).split())

    return declared


def _identifier_name(node: exp.Expression) -> str:
    if isinstance(node, exp.Identifier):
        return node.name
    identifier = node.find(exp.Identifier)
    return identifier.name if identifier is not None else node.name


def _type_params(data_type: exp.DataType) -> List[Optional[int]]:
    params = []
    for param in data_type.expressions:
        try:
            params.append(int(param.name))
        except (TypeError, ValueError):
            params.append(None)
    return params


def _constraint_kinds(column: exp.ColumnDef) -> List[exp.Expression]:
    return [
        c.args.get("kind")
        for c in column.args.get("constraints") or []
        if isinstance(c, exp.ColumnConstraint)
    ]


class TableMetadataAdapter:
    """
    Extracts table and entity metadata from a parsed CREATE TABLE.

    Args:
        ast: The sqlglot expression returned by the parser
        config: Generator configuration
        has_partition_clause: Whether the DDL carried a PARTITION BY clause
        source: DDL text of the statement, used to recover declared type names
    """

    def __init__(
        self,
        ast: exp.Expression,
        config: GeneratorConfig,
        has_partition_clause: bool = False,
        source: Optional[str] = None,
    ):
        if not is_create_table(ast):
            raise TableMetadataError(
                f"Expected a CREATE TABLE statement, got {type(ast).__name__}"
            )

        self.config = config
        self.has_partition_clause = has_partition_clause
        self.source = source
        self.sanitizer = create_java_sanitizer()
        self.type_mapper = JavaTypeMapper(config)
        self.warnings: List[str] = []

        self.table_meta = self._extract_table_meta(ast)
        self.is_partitioned = config.partition_key in self.table_meta.primary_keys
        if has_partition_clause and not self.is_partitioned:
            self._warn(
                f"Table {self.table_meta.table_name} has a PARTITION BY clause but "
                f"{config.partition_key} is not part of its primary key; "
                "generating a simple entity"
            )
        self.entity_meta = self._build_entity_meta()

    @classmethod
    def from_parse_result(
        cls, result: ParseResult, config: GeneratorConfig
    ) -> "TableMetadataAdapter":
        return cls(
            result.ast,
            config,
            has_partition_clause=result.is_partition,
            source=result.source,
        )

    def _warn(self, message: str):
        logger.warning(message)
        self.warnings.append(message)

    def _extract_table_meta(self, ast: exp.Create) -> TableMeta:
        schema = ast.this
        table = schema.find(exp.Table)
        table_name = table.name
        if not table_name:
            raise TableMetadataError("CREATE TABLE statement has no table name")

        primary_keys: List[str] = []
        columns: List[ColumnMeta] = []
        definitions = schema.expressions if isinstance(schema, exp.Schema) else []

        for definition in definitions:
            if isinstance(definition, exp.ColumnDef):
                kinds = _constraint_kinds(definition)
                if any(isinstance(k, exp.PrimaryKeyColumnConstraint) for k in kinds):
                    primary_keys.append(definition.name)
            elif isinstance(definition, exp.PrimaryKey):
                primary_keys.extend(_identifier_name(e) for e in definition.expressions)
            elif isinstance(definition, exp.Constraint):
                for constraint in definition.expressions:
                    if isinstance(constraint, exp.PrimaryKey):
                        primary_keys.extend(
                            _identifier_name(e) for e in constraint.expressions
                        )

        # Deduplicate, keeping declaration order
        primary_keys = list(dict.fromkeys(primary_keys))

        column_names = {d.name for d in definitions if isinstance(d, exp.ColumnDef)}
        declared = (
            declared_type_names(self.source, column_names) if self.source else {}
        )
        unknown = [pk for pk in primary_keys if pk not in column_names]
        if unknown:
            raise TableMetadataError(
                f"Primary key of {table_name} names unknown columns: "
                f"{', '.join(unknown)}"
            )

        for definition in definitions:
            if isinstance(definition, exp.ColumnDef):
                column = self._column_meta(
                    table_name, definition, primary_keys, declared.get(definition.name)
                )
                if column is not None:
                    columns.append(column)

        logger.debug(
            "Table %s: primary keys %s, %d columns",
            table_name,
            primary_keys,
            len(columns),
        )
        return TableMeta(table_name, tuple(primary_keys), tuple(columns))

    def _column_meta(
        self,
        table_name: str,
        column: exp.ColumnDef,
        primary_keys: List[str],
        declared_type: Optional[str] = None,
    ) -> Optional[ColumnMeta]:
        name = column.name
        data_type = column.args.get("kind")

        if not isinstance(data_type, exp.DataType):
            self._warn(f"Skipping column {table_name}.{name}: no data type")
            return None
        if data_type.is_type(exp.DataType.Type.ARRAY) or data_type.args.get("nested"):
            self._warn(f"Skipping array column {table_name}.{name}")
            return None

        sql_type = normalize_type_name(data_type)
        params = _type_params(data_type)
        kinds = _constraint_kinds(column)

        length = precision = scale = None
        if has_length(sql_type) and params and params[0]:
            length = params[0]
        if has_precision(sql_type) and params and params[0]:
            precision = params[0]
            scale = params[1] if len(params) > 1 else None

        # Only an explicit NULL makes a column nullable
        nullable = any(
            isinstance(k, exp.NotNullColumnConstraint)
            and bool(k.args.get("allow_null"))
            for k in kinds
        )

        return ColumnMeta(
            name=name,
            sql_type=sql_type,
            length=length,
            precision=precision,
            scale=scale,
            nullable=nullable,
            is_primary_key=name in primary_keys,
            column_definition=sql_type if is_json_type(sql_type) else None,
            declared_type=declared_type,
        )

    def _build_entity_meta(self) -> EntityMeta:
        config = self.config
        table = self.table_meta

        fields = []
        for column in table.columns:
            if column.name in config.omit_columns:
                logger.debug("Omitting column %s.%s", table.table_name, column.name)
                continue
            fields.append(self._field_meta(column))

        entity_name = self.sanitizer.sanitize_name(
            table.table_name, NamingCase.PASCAL_CASE
        )

        if self.is_partitioned:
            entity_package = config.partition_entity_package
            entity_super_class = config.partition_entity_super_class
            repository_package = config.partition_repository_package
            vo_package = config.partition_vo_package
            vo_super_class = config.partition_vo_super_class
        else:
            entity_package = config.entity_package
            entity_super_class = config.simple_entity_super_class
            repository_package = config.repository_package
            vo_package = config.vo_package
            vo_super_class = config.vo_super_class

        return EntityMeta(
            table_name=table.table_name,
            entity_name=entity_name,
            entity_package=entity_package,
            entity_super_class=entity_super_class,
            repository_package=repository_package,
            repository_super_class=config.repository_super_class,
            vo_package=vo_package,
            vo_super_class=vo_super_class,
            entity_key_package=config.entity_key_package,
            is_partitioned=self.is_partitioned,
            partition_key=config.partition_key if self.is_partitioned else None,
            primary_keys=tuple(
                self.sanitizer.sanitize_name(pk, NamingCase.CAMEL_CASE)
                for pk in table.primary_keys
            ),
            fields=tuple(fields),
        )

    def _field_meta(self, column: ColumnMeta) -> EntityFieldMeta:
        type_names = column.type_names
        java_type = self.type_mapper.map_sql_type(*type_names)
        if java_type.is_fallback:
            self._warn(
                f"No Java type configured for {type_names[0]} "
                f"({self.table_meta.table_name}.{column.name}); using {java_type.name}"
            )

        default = self.type_mapper.entity_default(*type_names)
        vo_default = self.type_mapper.vo_default(*type_names)

        return EntityFieldMeta(
            name=column.name,
            sql_type=column.sql_type,
            length=column.length,
            precision=column.precision,
            scale=column.scale,
            nullable=column.nullable,
            is_primary_key=column.is_primary_key,
            is_partition_key=(
                self.is_partitioned and column.name == self.config.partition_key
            ),
            column_definition=column.column_definition,
            declared_type=column.declared_type,
            field_name=self.sanitizer.sanitize_name(column.name, NamingCase.CAMEL_CASE),
            field_type=java_type.name,
            imports=java_type.imports,
            default_value=default.expression,
            default_imports=default.imports,
            vo_default_value=vo_default.expression,
            vo_default_imports=vo_default.imports,
        )
