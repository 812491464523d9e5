"""
Java-specific naming utilities and sanitization.

Handles Java reserved words and the camelCase/PascalCase conventions
used for generated fields and types.
"""

import re

from ...core.naming import NameSanitizer, NamingCase

# Java reserved words and literals
JAVA_RESERVED_WORDS = {
    "abstract",
    "assert",
    "boolean",
    "break",
    "byte",
    "case",
    "catch",
    "char",
    "class",
    "const",
    "continue",
    "default",
    "do",
    "double",
    "else",
    "enum",
    "extends",
    "false",
    "final",
    "finally",
    "float",
    "for",
    "goto",
    "if",
    "implements",
    "import",
    "instanceof",
    "int",
    "interface",
    "long",
    "native",
    "new",
    "null",
    "package",
    "private",
    "protected",
    "public",
    "return",
    "short",
    "static",
    "strictfp",
    "super",
    "switch",
    "synchronized",
    "this",
    "throw",
    "throws",
    "transient",
    "true",
    "try",
    "void",
    "volatile",
    "while",
}

# Conventional spellings for keywords that show up as column names
JAVA_KEYWORD_RENAMES = {
    "class": "clazz",
}

_QUALIFIED_NAME = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")


def create_java_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for Java."""
    return NameSanitizer(JAVA_RESERVED_WORDS, JAVA_KEYWORD_RENAMES)


def java_field_name(column_name: str) -> str:
    """camelCase field name for a single column, without duplicate tracking."""
    return create_java_sanitizer().sanitize_name(column_name, NamingCase.CAMEL_CASE)


def java_class_name(table_name: str) -> str:
    """PascalCase type name for a table."""
    return create_java_sanitizer().sanitize_name(table_name, NamingCase.PASCAL_CASE)


def is_qualified_name(name: str) -> bool:
    """True for dotted Java names such as ``java.math.BigDecimal``."""
    return bool(_QUALIFIED_NAME.match(name))
