"""
Factories and builders for Java syntax trees.

The ``create_*`` functions build leaf and small nodes directly; the
builder classes accumulate the parts of larger declarations and check
the structural rules when ``build()`` is called. Every violation raises
a subclass of :class:`AstBuildError`.
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from ...core.errors import (
    AstBuildError,
    ConflictingTypeDeclarationError,
    DuplicateDeclarationError,
    DuplicateSuperclassError,
    EmptyIdentifierError,
    EmptyModifierError,
    InvalidTypeReferenceError,
    MissingPackageError,
    MissingTypeDeclarationError,
)
from .ast import (
    MODIFIER_NAMES,
    Annotation,
    Attribute,
    AttributeValue,
    Block,
    BlockComment,
    ClassDeclaration,
    CompilationUnit,
    ConstructorDeclaration,
    DocComment,
    Expression,
    FieldDeclaration,
    Identifier,
    ImportDeclaration,
    InterfaceDeclaration,
    LineComment,
    Member,
    MethodDeclaration,
    Modifier,
    PackageDeclaration,
    Parameter,
    TypeReference,
)
from .naming import is_qualified_name

TypeLike = Union[TypeReference, str]
ExpressionLike = Union[Expression, str]

_TYPE_NAME = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*(\[\])*$")

# Members of a type are emitted fields first, then constructors, then methods
_MEMBER_ORDER = {"field": 0, "constructor": 1, "method": 2}


# Leaf factories


def create_identifier(name: str) -> Identifier:
    if not isinstance(name, str) or not name.strip():
        raise EmptyIdentifierError("Identifier name must not be empty")
    return Identifier(name.strip())


def create_expression(value: ExpressionLike) -> Expression:
    if isinstance(value, Expression):
        return value
    return Expression(value)


def create_doc_comment(lines: Iterable[str]) -> DocComment:
    return DocComment(tuple(lines))


def create_line_comment(text: str) -> LineComment:
    return LineComment(text)


def create_block_comment(lines: Iterable[str]) -> BlockComment:
    return BlockComment(tuple(lines))


def create_modifier(name: str) -> Modifier:
    if not name:
        raise EmptyModifierError("Modifier name must not be empty")
    if name not in MODIFIER_NAMES:
        raise AstBuildError(f"Unknown modifier: {name}")
    return Modifier(name)


def create_modifiers(names: Iterable[str]) -> tuple:
    """Build a modifier tuple, ignoring repeats of the same keyword."""
    modifiers = []
    for name in names:
        modifier = create_modifier(name)
        if modifier not in modifiers:
            modifiers.append(modifier)
    return tuple(modifiers)


def create_type_reference(
    name: str, generics: Optional[Sequence[TypeLike]] = None
) -> TypeReference:
    """
    Build a possibly-generic type reference.

    Generic arguments may be given as references or plain type names.
    """
    identifier = create_identifier(name)
    if not _TYPE_NAME.match(identifier.name):
        raise InvalidTypeReferenceError(f"Invalid type name: {name!r}")

    if generics is None:
        return TypeReference(identifier)

    arguments = []
    for argument in generics:
        if isinstance(argument, TypeReference):
            arguments.append(argument)
        elif isinstance(argument, str):
            arguments.append(create_type_reference(argument))
        else:
            raise InvalidTypeReferenceError(
                f"Generic argument of {name} is not a type: {argument!r}"
            )
    if not arguments:
        raise InvalidTypeReferenceError(f"Empty generic argument list for {name}")
    return TypeReference(identifier, tuple(arguments))


def as_type_reference(value: TypeLike) -> TypeReference:
    if isinstance(value, TypeReference):
        return value
    if isinstance(value, str):
        return create_type_reference(value)
    raise InvalidTypeReferenceError(f"Not a type: {value!r}")


def create_package_declaration(name: str) -> PackageDeclaration:
    identifier = create_identifier(name)
    if not is_qualified_name(identifier.name):
        raise AstBuildError(f"Invalid package name: {name!r}")
    return PackageDeclaration(identifier)


def create_import_declaration(name: str) -> ImportDeclaration:
    identifier = create_identifier(name)
    if not is_qualified_name(identifier.name):
        raise AstBuildError(f"Invalid import: {name!r}")
    return ImportDeclaration(identifier)


def create_parameter(name: str, type_ref: TypeLike) -> Parameter:
    return Parameter(create_identifier(name), as_type_reference(type_ref))


def create_block(statements: Iterable[ExpressionLike] = ()) -> Block:
    return Block(tuple(_statement(s) for s in statements))


def _statement(value: ExpressionLike) -> Expression:
    expression = create_expression(value)
    if not expression.value.strip():
        raise AstBuildError("Statement must not be empty")
    return expression


# Annotations


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def _attribute_scalar(value: Any) -> Expression:
    if isinstance(value, Expression):
        return value
    if isinstance(value, TypeReference):
        return Expression(f"{value.name}.class")
    # bool before int: True is an int too
    if isinstance(value, bool):
        return Expression("true" if value else "false")
    if isinstance(value, (int, float)):
        return Expression(str(value))
    if isinstance(value, str):
        return Expression(_quote(value))
    raise AstBuildError(f"Unsupported annotation value: {value!r}")


def to_attribute_value(value: Any) -> AttributeValue:
    if isinstance(value, (list, tuple)):
        return tuple(_attribute_scalar(v) for v in value)
    return _attribute_scalar(value)


def create_attribute(key: str, value: Any) -> Attribute:
    if value is None:
        raise AstBuildError(f"Annotation attribute {key!r} has no value")
    return Attribute(create_identifier(key), to_attribute_value(value))


def create_annotation(annotation_name: str, /, **attributes: Any) -> Annotation:
    """
    Build an annotation from keyword attributes, in the order given.

    Attributes whose value is None are left out, so optional settings
    can be passed unconditionally. Other falsy values (0, False, "")
    are kept.
    """
    return Annotation(
        create_identifier(annotation_name),
        tuple(
            create_attribute(key, value)
            for key, value in attributes.items()
            if value is not None
        ),
    )


# Builders


class _DeclarationBuilder:
    """Shared modifier/annotation handling for the member and type builders."""

    def __init__(self, name: str):
        self._id = create_identifier(name)
        self._modifiers: List[Modifier] = []
        self._annotations: List[Annotation] = []

    def modifiers(self, *names: str):
        for modifier in create_modifiers(names):
            if modifier not in self._modifiers:
                self._modifiers.append(modifier)
        return self

    def annotate(self, annotation: Union[Annotation, str], /, **attributes: Any):
        if isinstance(annotation, str):
            annotation = create_annotation(annotation, **attributes)
        self._annotations.append(annotation)
        return self

    def _require_modifiers(self):
        if not self._modifiers:
            raise EmptyModifierError(f"{self._id.name} has no modifiers")


class FieldBuilder(_DeclarationBuilder):
    def __init__(self, name: str, type_ref: TypeLike):
        super().__init__(name)
        self._type = as_type_reference(type_ref)
        self._initializer: Optional[Expression] = None

    def initializer(self, value: Optional[ExpressionLike]) -> "FieldBuilder":
        self._initializer = _statement(value) if value is not None else None
        return self

    def build(self) -> FieldDeclaration:
        self._require_modifiers()
        return FieldDeclaration(
            id=self._id,
            type=self._type,
            modifiers=tuple(self._modifiers),
            annotations=tuple(self._annotations),
            initializer=self._initializer,
        )


class _CallableBuilder(_DeclarationBuilder):
    def __init__(self, name: str):
        super().__init__(name)
        self._params: List[Parameter] = []
        self._statements: Optional[List[Expression]] = None

    def param(self, name: str, type_ref: TypeLike):
        parameter = create_parameter(name, type_ref)
        if any(p.id == parameter.id for p in self._params):
            raise DuplicateDeclarationError(
                f"Parameter {name} declared twice in {self._id.name}"
            )
        self._params.append(parameter)
        return self

    def statement(self, value: ExpressionLike):
        if self._statements is None:
            self._statements = []
        self._statements.append(_statement(value))
        return self

    def statements(self, values: Iterable[ExpressionLike]):
        for value in values:
            self.statement(value)
        return self


class ConstructorBuilder(_CallableBuilder):
    def build(self) -> ConstructorDeclaration:
        self._require_modifiers()
        return ConstructorDeclaration(
            id=self._id,
            modifiers=tuple(self._modifiers),
            annotations=tuple(self._annotations),
            params=tuple(self._params),
            body=Block(tuple(self._statements or ())),
        )


class MethodBuilder(_CallableBuilder):
    """Builds a method; without statements (or ``empty_body()``) it has no body."""

    def __init__(self, name: str, return_type: TypeLike = "void"):
        super().__init__(name)
        self._return_type = as_type_reference(return_type)

    def empty_body(self) -> "MethodBuilder":
        if self._statements is None:
            self._statements = []
        return self

    def build(self) -> MethodDeclaration:
        self._require_modifiers()
        body = None
        if self._statements is not None:
            body = Block(tuple(self._statements))
        return MethodDeclaration(
            id=self._id,
            return_type=self._return_type,
            modifiers=tuple(self._modifiers),
            annotations=tuple(self._annotations),
            params=tuple(self._params),
            body=body,
        )


class _TypeBuilder(_DeclarationBuilder):
    def __init__(self, name: str):
        super().__init__(name)
        self._members: List[Member] = []

    def member(self, member: Member):
        self._members.append(member)
        return self

    def members(self, members: Iterable[Member]):
        for member in members:
            self.member(member)
        return self

    def _ordered_members(self) -> tuple:
        # Comments move with the declaration that follows them
        groups = []
        pending: List[Member] = []
        for member in self._members:
            pending.append(member)
            if member.kind in _MEMBER_ORDER:
                groups.append((_MEMBER_ORDER[member.kind], pending))
                pending = []
        if pending:
            groups.append((len(_MEMBER_ORDER), pending))

        groups.sort(key=lambda group: group[0])
        return tuple(member for _, group in groups for member in group)


class ClassBuilder(_TypeBuilder):
    def __init__(self, name: str):
        super().__init__(name)
        self._super_class: Optional[TypeReference] = None
        self._implements: List[TypeReference] = []

    def super_class(self, type_ref: TypeLike) -> "ClassBuilder":
        if self._super_class is not None:
            raise DuplicateSuperclassError(
                f"{self._id.name} already extends {self._super_class.name}"
            )
        self._super_class = as_type_reference(type_ref)
        return self

    def implements(self, *type_refs: TypeLike) -> "ClassBuilder":
        for type_ref in type_refs:
            self._implements.append(as_type_reference(type_ref))
        return self

    def build(self) -> ClassDeclaration:
        self._require_modifiers()
        return ClassDeclaration(
            id=self._id,
            modifiers=tuple(self._modifiers),
            annotations=tuple(self._annotations),
            super_class=self._super_class,
            implements=tuple(self._implements),
            members=self._ordered_members(),
        )


class InterfaceBuilder(_TypeBuilder):
    def __init__(self, name: str):
        super().__init__(name)
        self._extends: List[TypeReference] = []

    def extends(self, *type_refs: TypeLike) -> "InterfaceBuilder":
        for type_ref in type_refs:
            self._extends.append(as_type_reference(type_ref))
        return self

    def build(self) -> InterfaceDeclaration:
        self._require_modifiers()
        return InterfaceDeclaration(
            id=self._id,
            modifiers=tuple(self._modifiers),
            annotations=tuple(self._annotations),
            extends=tuple(self._extends),
            members=self._ordered_members(),
        )


class CompilationUnitBuilder:
    """
    Assembles one output file.

    Imports are kept in first-insertion order and de-duplicated by their
    fully-qualified name.
    """

    def __init__(self):
        self._package: Optional[PackageDeclaration] = None
        self._imports: Dict[str, ImportDeclaration] = {}
        self._doc: Optional[DocComment] = None
        self._class: Optional[ClassDeclaration] = None
        self._interface: Optional[InterfaceDeclaration] = None

    def package(self, name: str) -> "CompilationUnitBuilder":
        if self._package is not None:
            raise DuplicateDeclarationError(
                f"Package already set to {self._package.id.name}"
            )
        self._package = create_package_declaration(name)
        return self

    def add_import(self, name: str) -> "CompilationUnitBuilder":
        declaration = create_import_declaration(name)
        self._imports.setdefault(declaration.id.name, declaration)
        return self

    def add_imports(self, names: Iterable[str]) -> "CompilationUnitBuilder":
        for name in names:
            self.add_import(name)
        return self

    def doc_comment(self, lines: Iterable[str]) -> "CompilationUnitBuilder":
        if self._doc is not None:
            raise DuplicateDeclarationError("Doc comment already set")
        self._doc = create_doc_comment(lines)
        return self

    def class_declaration(
        self, declaration: ClassDeclaration
    ) -> "CompilationUnitBuilder":
        if self._interface is not None:
            raise ConflictingTypeDeclarationError(
                f"Unit already declares interface {self._interface.id.name}"
            )
        if self._class is not None:
            raise DuplicateDeclarationError(
                f"Unit already declares class {self._class.id.name}"
            )
        self._class = declaration
        return self

    def interface_declaration(
        self, declaration: InterfaceDeclaration
    ) -> "CompilationUnitBuilder":
        if self._class is not None:
            raise ConflictingTypeDeclarationError(
                f"Unit already declares class {self._class.id.name}"
            )
        if self._interface is not None:
            raise DuplicateDeclarationError(
                f"Unit already declares interface {self._interface.id.name}"
            )
        self._interface = declaration
        return self

    @property
    def imports(self) -> tuple:
        return tuple(self._imports)

    def build(self) -> CompilationUnit:
        if self._package is None:
            raise MissingPackageError("Compilation unit has no package")
        if self._class is not None and self._interface is not None:
            raise ConflictingTypeDeclarationError(
                "Compilation unit declares both a class and an interface"
            )
        declaration = self._class or self._interface
        if declaration is None:
            raise MissingTypeDeclarationError(
                "Compilation unit has no class or interface"
            )

        body = [self._package, *self._imports.values()]
        if self._doc is not None:
            body.append(self._doc)
        body.append(declaration)
        return CompilationUnit(tuple(body))
