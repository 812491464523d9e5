"""
Base generator interface for all code generation targets.

Defines the contract that language generators implement and the result
containers handed back to callers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import GeneratorConfig, get_config


class CodeGenerator(ABC):
    """Abstract base class for all code generators."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize generator with optional configuration."""
        self.config = config or get_config()

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'java')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated files (e.g., '.java')."""
        pass

    @abstractmethod
    def generate(self, unit: Any) -> str:
        """
        Generate source text for one compilation unit.

        Args:
            unit: Root node of the tree to render

        Returns:
            Generated code as a string
        """
        pass

    def format_code(self, code: str) -> str:
        """
        Apply language-specific formatting to generated code.

        Args:
            code: Raw generated code

        Returns:
            Formatted code
        """
        lines = [line.rstrip() for line in code.split("\n")]
        return "\n".join(lines)


@dataclass(frozen=True)
class GeneratedFile:
    """One generated source file: a single top-level type in a package."""

    package: str
    type_name: str
    code: str
    extension: str = ".java"

    @property
    def filename(self) -> str:
        return f"{self.type_name}{self.extension}"

    def path(self, root: Union[str, Path]) -> Path:
        """Output location: <root>/<package as path>/<TypeName><ext>."""
        return Path(root).joinpath(*self.package.split("."), self.filename)


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        table_name: str,
        files: List[GeneratedFile] = None,
        warnings: List[str] = None,
        metadata: Dict[str, Any] = None,
    ):
        """
        Initialize generation result.

        Args:
            table_name: Source table the files were generated from
            files: Generated files, entity first
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.table_name = table_name
        self.files = files or []
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message: Optional[str] = None
        self.exception: Optional[Exception] = None

    @classmethod
    def error(
        cls, table_name: str, message: str, exception: Exception = None
    ) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(table_name=table_name)
        result.success = False
        result.error_message = message
        result.exception = exception
        return result

    def __repr__(self) -> str:
        status = "ok" if self.success else f"failed: {self.error_message}"
        files = len(self.files)
        return f"GenerationResult({self.table_name!r}, {files} files, {status})"
