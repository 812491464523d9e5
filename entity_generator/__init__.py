"""Generate JPA entity, repository and value object sources from PostgreSQL DDL."""

from .codegen import __version__, generate_from_ddl

__all__ = ["__version__", "generate_from_ddl"]
