"""Utility functions for loading DDL and writing generated sources.

This module provides functions for reading SQL files, splitting them into
table statements and managing the output directory, with proper error
handling and logging.
"""

import re
import shutil
from pathlib import Path

from .codegen.core.generator import GeneratedFile
from .logging_config import get_logger

logger = get_logger(__name__)

_CREATE_TABLE = re.compile(r"create\s+table.*?;", re.IGNORECASE | re.DOTALL)


class DDLLoaderError(Exception):
    """Custom exception for DDL loading errors."""

    pass


class OutputError(Exception):
    """Raised when generated sources cannot be written."""

    pass


def load_ddl_file(file_path: str | Path) -> str:
    """Load SQL text from a local file.

    Args:
        file_path: Path to the SQL file.

    Returns:
        The file contents.

    Raises:
        FileNotFoundError: If file doesn't exist.
        DDLLoaderError: If file cannot be read.
    """
    file_path = Path(file_path)
    logger.debug(f"Attempting to load DDL from file: {file_path}")

    if not file_path.exists():
        logger.error(f"File not found: {file_path}")
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() != ".sql":
        logger.warning(f"File does not have .sql extension: {file_path}")

    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading file {file_path}: {e}", exc_info=True)
        raise DDLLoaderError(f"Error reading file {file_path}: {e}") from e

    logger.info(f"Successfully loaded DDL from {file_path}")
    return text


def split_create_table_statements(sql: str) -> list[str]:
    """Find every ``CREATE TABLE ...;`` statement in a SQL script.

    Args:
        sql: Script text, possibly holding other statements too.

    Returns:
        Table statements in file order.
    """
    statements = [match.group(0) for match in _CREATE_TABLE.finditer(sql)]
    logger.debug(f"Detected {len(statements)} CREATE TABLE statement(s)")
    return statements


def prepare_output_dir(output_dir: str | Path, keep: bool = False) -> Path:
    """Clear and recreate the output directory.

    Args:
        output_dir: Root directory for generated sources.
        keep: Leave existing contents in place.

    Returns:
        The output directory path.

    Raises:
        OutputError: If the directory cannot be cleared or created.
    """
    output_dir = Path(output_dir)
    try:
        if output_dir.exists() and not keep:
            if not output_dir.is_dir():
                raise OutputError(f"Output path is not a directory: {output_dir}")
            logger.info(f"Removing previous output in {output_dir}")
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Cannot prepare output directory {output_dir}: {e}")
        raise OutputError(f"Cannot prepare output directory {output_dir}: {e}") from e
    return output_dir


def write_generated_file(generated: GeneratedFile, output_dir: str | Path) -> Path:
    """Write one generated source below the output root.

    Args:
        generated: The file to write.
        output_dir: Root directory; the package becomes the subdirectory path.

    Returns:
        Path of the written file.

    Raises:
        OutputError: If the file cannot be written.
    """
    target = generated.path(output_dir)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(generated.code, encoding="utf-8")
    except OSError as e:
        logger.error(f"Error writing {target}: {e}")
        raise OutputError(f"Error writing {target}: {e}") from e
    logger.debug(f"Wrote {target}")
    return target
