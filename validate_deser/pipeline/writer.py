"""
Atomic file writer for expanded code.

Ensures that an interrupted write never leaves a half-written module behind.
"""

from __future__ import annotations

import ast
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import GenerationError

logger = logging.getLogger(__name__)


def check_python(content: str) -> None:
    """Raise GenerationError unless ``content`` parses as Python."""
    try:
        ast.parse(content)
    except SyntaxError as e:
        raise GenerationError(f"Generated Python code is not valid: {e}") from e


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(self, validate_python: Callable[[str], None] | None = None):
        self._validate_python = validate_python or check_python

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Raises:
            GenerationError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate:
                self._validate_python(content)

            temp_path.replace(path)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise

        logger.info("Wrote %s", path)
