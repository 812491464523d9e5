"""
Java syntax tree for generated sources.

Every node is an immutable value with a ``kind`` tag; the serializer
dispatches on that tag. Nodes are normally created through the
factories and builders in :mod:`.builder`, which enforce the structural
rules (non-empty names, one package, one type declaration per unit).
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

MODIFIER_NAMES = ("public", "protected", "private", "abstract", "static", "final")


@dataclass(frozen=True)
class Identifier:
    kind: ClassVar[str] = "identifier"

    name: str


@dataclass(frozen=True)
class Expression:
    """Already-rendered Java source, emitted as-is."""

    kind: ClassVar[str] = "expression"

    value: str


@dataclass(frozen=True)
class DocComment:
    kind: ClassVar[str] = "doc_comment"

    lines: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LineComment:
    kind: ClassVar[str] = "line_comment"

    text: str


@dataclass(frozen=True)
class BlockComment:
    kind: ClassVar[str] = "block_comment"

    lines: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Modifier:
    kind: ClassVar[str] = "modifier"

    name: str


AttributeValue = Union[Expression, Tuple[Expression, ...]]


@dataclass(frozen=True)
class Attribute:
    """``key = value`` inside an annotation; tuples render as ``{a, b}``."""

    kind: ClassVar[str] = "attribute"

    key: Identifier
    value: AttributeValue


@dataclass(frozen=True)
class Annotation:
    kind: ClassVar[str] = "annotation"

    id: Identifier
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class TypeReference:
    kind: ClassVar[str] = "type_reference"

    id: Identifier
    generics: Optional[Tuple["TypeReference", ...]] = None

    @property
    def name(self) -> str:
        return self.id.name


@dataclass(frozen=True)
class PackageDeclaration:
    kind: ClassVar[str] = "package"

    id: Identifier


@dataclass(frozen=True)
class ImportDeclaration:
    kind: ClassVar[str] = "import"

    id: Identifier


@dataclass(frozen=True)
class FieldDeclaration:
    kind: ClassVar[str] = "field"

    id: Identifier
    type: TypeReference
    modifiers: Tuple[Modifier, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    initializer: Optional[Expression] = None


@dataclass(frozen=True)
class Parameter:
    kind: ClassVar[str] = "parameter"

    id: Identifier
    type: TypeReference


@dataclass(frozen=True)
class Block:
    kind: ClassVar[str] = "block"

    statements: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class ConstructorDeclaration:
    kind: ClassVar[str] = "constructor"

    id: Identifier
    modifiers: Tuple[Modifier, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    params: Tuple[Parameter, ...] = ()
    body: Block = Block()


@dataclass(frozen=True)
class MethodDeclaration:
    """A method; ``body`` of None renders as a ``;``-terminated signature."""

    kind: ClassVar[str] = "method"

    id: Identifier
    return_type: TypeReference
    modifiers: Tuple[Modifier, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    params: Tuple[Parameter, ...] = ()
    body: Optional[Block] = None


Member = Union[
    FieldDeclaration,
    ConstructorDeclaration,
    MethodDeclaration,
    LineComment,
    BlockComment,
]


@dataclass(frozen=True)
class ClassDeclaration:
    kind: ClassVar[str] = "class"

    id: Identifier
    modifiers: Tuple[Modifier, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    super_class: Optional[TypeReference] = None
    implements: Tuple[TypeReference, ...] = ()
    members: Tuple[Member, ...] = ()

    @property
    def fields(self) -> Tuple[FieldDeclaration, ...]:
        return tuple(m for m in self.members if m.kind == "field")

    @property
    def methods(self) -> Tuple[MethodDeclaration, ...]:
        return tuple(m for m in self.members if m.kind == "method")

    @property
    def constructors(self) -> Tuple[ConstructorDeclaration, ...]:
        return tuple(m for m in self.members if m.kind == "constructor")


@dataclass(frozen=True)
class InterfaceDeclaration:
    kind: ClassVar[str] = "interface"

    id: Identifier
    modifiers: Tuple[Modifier, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    extends: Tuple[TypeReference, ...] = ()
    members: Tuple[Member, ...] = ()


TypeDeclaration = Union[ClassDeclaration, InterfaceDeclaration]

UnitNode = Union[PackageDeclaration, ImportDeclaration, DocComment, TypeDeclaration]


@dataclass(frozen=True)
class CompilationUnit:
    """One output file: package, imports, optional doc and one type."""

    kind: ClassVar[str] = "compilation_unit"

    body: Tuple[UnitNode, ...] = ()

    @property
    def package(self) -> Optional[PackageDeclaration]:
        return next((n for n in self.body if n.kind == "package"), None)

    @property
    def imports(self) -> Tuple[str, ...]:
        return tuple(n.id.name for n in self.body if n.kind == "import")

    @property
    def doc(self) -> Optional[DocComment]:
        return next((n for n in self.body if n.kind == "doc_comment"), None)

    @property
    def type_declaration(self) -> Optional[TypeDeclaration]:
        return next(
            (n for n in self.body if n.kind in ("class", "interface")), None
        )

    @property
    def package_name(self) -> str:
        package = self.package
        return package.id.name if package else ""

    @property
    def type_name(self) -> str:
        declaration = self.type_declaration
        return declaration.id.name if declaration else ""
