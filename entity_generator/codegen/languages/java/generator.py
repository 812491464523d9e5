"""
Java code generator implementation.

Renders Java syntax trees to source lines. Rendering is purely
structural: one line per annotation, header, brace and statement, with
no indentation. Layout is left to :class:`JavaFormatter`.
"""

from typing import Callable, Dict, List, Optional, Sequence

from ...core.config import GeneratorConfig
from ...core.generator import CodeGenerator
from ....logging_config import get_logger
from .ast import (
    MODIFIER_NAMES,
    Annotation,
    Attribute,
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
    MethodDeclaration,
    Modifier,
    PackageDeclaration,
    Parameter,
    TypeReference,
)
from .formatter import JavaFormatter

logger = get_logger(__name__)

# Order of nodes in a compilation unit; unknown kinds go last
UNIT_PRIORITY = {
    "package": 0,
    "import": 1,
    "doc_comment": 2,
    "class": 3,
    "interface": 3,
}

_MODIFIER_RANK = {name: rank for rank, name in enumerate(MODIFIER_NAMES)}


def render_identifier(node: Identifier) -> List[str]:
    return [node.name]


def render_expression(node: Expression) -> List[str]:
    return [node.value]


def render_doc_comment(node: DocComment) -> List[str]:
    return ["/**", *(f" * {line}" for line in node.lines), " */"]


def render_line_comment(node: LineComment) -> List[str]:
    return [f"// {node.text}"]


def render_block_comment(node: BlockComment) -> List[str]:
    return ["/*", *(f" * {line}" for line in node.lines), " */"]


def render_modifiers(modifiers: Sequence[Modifier]) -> str:
    """Space-joined modifiers in canonical order, whatever the insertion order."""
    last = len(_MODIFIER_RANK)
    ordered = sorted(modifiers, key=lambda m: _MODIFIER_RANK.get(m.name, last))
    return " ".join(m.name for m in ordered)


def render_type(node: TypeReference) -> str:
    if node.generics:
        return f"{node.name}<{', '.join(render_type(g) for g in node.generics)}>"
    return node.name


def render_attribute(node: Attribute) -> str:
    key = "" if node.key.name == "value" else f"{node.key.name} = "
    if isinstance(node.value, tuple):
        return f"{key}{{{', '.join(v.value for v in node.value)}}}"
    return f"{key}{node.value.value}"


def render_annotation(node: Annotation) -> List[str]:
    if not node.attributes:
        return [f"@{node.id.name}"]
    attributes = ", ".join(render_attribute(a) for a in node.attributes)
    return [f"@{node.id.name}({attributes})"]


def _annotation_lines(annotations: Sequence[Annotation]) -> List[str]:
    return [line for a in annotations for line in render_annotation(a)]


def _header(*parts: str) -> str:
    return " ".join(part for part in parts if part)


def render_parameter(node: Parameter) -> str:
    return f"{render_type(node.type)} {node.id.name}"


def _parameters(params: Sequence[Parameter]) -> str:
    return ", ".join(render_parameter(p) for p in params)


def render_block(node: Block) -> List[str]:
    return ["{", *(s.value for s in node.statements), "}"]


def render_package(node: PackageDeclaration) -> List[str]:
    return [f"package {node.id.name};"]


def render_import(node: ImportDeclaration) -> List[str]:
    return [f"import {node.id.name};"]


def render_field(node: FieldDeclaration) -> List[str]:
    declaration = _header(
        render_modifiers(node.modifiers), render_type(node.type), node.id.name
    )
    if node.initializer is not None:
        declaration = f"{declaration} = {node.initializer.value}"
    return [*_annotation_lines(node.annotations), f"{declaration};"]


def render_constructor(node: ConstructorDeclaration) -> List[str]:
    signature = _header(
        render_modifiers(node.modifiers), f"{node.id.name}({_parameters(node.params)})"
    )
    return [*_annotation_lines(node.annotations), signature, *render_block(node.body)]


def render_method(node: MethodDeclaration) -> List[str]:
    signature = _header(
        render_modifiers(node.modifiers),
        render_type(node.return_type),
        f"{node.id.name}({_parameters(node.params)})",
    )
    if node.body is None:
        return [*_annotation_lines(node.annotations), f"{signature};"]
    return [*_annotation_lines(node.annotations), signature, *render_block(node.body)]


def _members(members) -> List[str]:
    return [line for member in members for line in render_node(member)]


def render_class(node: ClassDeclaration) -> List[str]:
    header = _header(
        render_modifiers(node.modifiers),
        "class",
        node.id.name,
        f"extends {render_type(node.super_class)}" if node.super_class else "",
        (
            f"implements {', '.join(render_type(t) for t in node.implements)}"
            if node.implements
            else ""
        ),
    )
    return [
        *_annotation_lines(node.annotations),
        header,
        "{",
        *_members(node.members),
        "}",
    ]


def render_interface(node: InterfaceDeclaration) -> List[str]:
    header = _header(
        render_modifiers(node.modifiers),
        "interface",
        node.id.name,
        (
            f"extends {', '.join(render_type(t) for t in node.extends)}"
            if node.extends
            else ""
        ),
    )
    return [
        *_annotation_lines(node.annotations),
        header,
        "{",
        *_members(node.members),
        "}",
    ]


def render_compilation_unit(node: CompilationUnit) -> List[str]:
    # sorted() is stable: imports keep their insertion order
    body = sorted(node.body, key=lambda n: UNIT_PRIORITY.get(n.kind, 100))
    return [line for child in body for line in render_node(child)]


_RENDERERS: Dict[str, Callable[..., List[str]]] = {
    "identifier": render_identifier,
    "expression": render_expression,
    "doc_comment": render_doc_comment,
    "line_comment": render_line_comment,
    "block_comment": render_block_comment,
    "modifier": lambda node: [render_modifiers([node])],
    "annotation": render_annotation,
    "attribute": lambda node: [render_attribute(node)],
    "type_reference": lambda node: [render_type(node)],
    "package": render_package,
    "import": render_import,
    "field": render_field,
    "parameter": lambda node: [render_parameter(node)],
    "block": render_block,
    "constructor": render_constructor,
    "method": render_method,
    "class": render_class,
    "interface": render_interface,
    "compilation_unit": render_compilation_unit,
}


def render_node(node) -> List[str]:
    """Render any node to source lines; unknown kinds render nothing."""
    renderer = _RENDERERS.get(getattr(node, "kind", None))
    if renderer is None:
        logger.debug("No renderer for node %r", node)
        return []
    return renderer(node)


class JavaGenerator(CodeGenerator):
    """Code generator for Java compilation units."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        formatter: Optional[JavaFormatter] = None,
    ):
        """Initialize Java generator with configuration."""
        super().__init__(config)
        self.formatter = formatter or JavaFormatter(self.config.format_options)

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "java"

    @property
    def file_extension(self) -> str:
        """Return Java file extension."""
        return ".java"

    def render(self, unit: CompilationUnit) -> List[str]:
        """Render a unit to unformatted source lines."""
        return render_node(unit)

    def format_code(self, code: str) -> str:
        """Lay out raw source; raises FormatError on malformed input."""
        return self.formatter.format(code)

    def generate(self, unit: CompilationUnit) -> str:
        """Render and format one compilation unit."""
        lines = self.render(unit)
        logger.debug("Rendered %s: %d raw lines", unit.type_name, len(lines))
        return self.format_code("\n".join(lines))
