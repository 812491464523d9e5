"""
Exception hierarchy for the code generation pipeline.

Three families share a common base so the batch driver can skip a single
table on any of them:

- AstBuildError: a builder was asked to produce a malformed tree. These
  always point at a defect in the transformer, never at user input.
- MetadataError: the DDL cannot satisfy the transformer's preconditions.
- CollaboratorError: the parser, formatter or template engine rejected
  its input.
"""


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


# AST construction


class AstBuildError(GeneratorError):
    """Raised when an AST node cannot be built."""

    pass


class EmptyIdentifierError(AstBuildError):
    pass


class EmptyModifierError(AstBuildError):
    pass


class InvalidTypeReferenceError(AstBuildError):
    pass


class DuplicateSuperclassError(AstBuildError):
    pass


class DuplicateDeclarationError(AstBuildError):
    """A single-valued slot (package, doc comment) was set twice."""

    pass


class MissingPackageError(AstBuildError):
    pass


class MissingTypeDeclarationError(AstBuildError):
    pass


class ConflictingTypeDeclarationError(AstBuildError):
    pass


# Table metadata


class MetadataError(GeneratorError):
    """Raised when table metadata cannot drive generation."""

    pass


class TableMetadataError(MetadataError):
    pass


class NoPrimaryKeyError(MetadataError):
    def __init__(self, table_name: str):
        super().__init__(f"Id field not found in table {table_name}.")
        self.table_name = table_name


# External collaborators


class CollaboratorError(GeneratorError):
    """Raised by the parser, formatter or template boundary."""

    pass


class DDLSyntaxError(CollaboratorError):
    pass


class NotATableStatementError(CollaboratorError):
    def __init__(self, statement_type: str = "unknown"):
        super().__init__(
            f"DDL is not a create table statement (got {statement_type})"
        )
        self.statement_type = statement_type


class FormatError(CollaboratorError):
    pass


class TemplateError(CollaboratorError):
    """Exception raised for template-related errors."""

    pass
