"""
Base class for code generation backends.

Defines the interface that language-specific backends implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

import jinja2

from ..config import GeneratorConfig
from ..shape.ir_nodes import DecodeOperation, FieldBinding


def format_bindings(bindings: Iterable[FieldBinding]) -> str:
    """Render bindings as call or pattern arguments."""
    return ", ".join(f"{b.target}={b.source}" if b.target is not None else b.source for b in bindings)


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    def __init__(self, config: GeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        # Add custom filters
        self.jinja_env.filters["bindings"] = format_bindings

        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.staging_template = self.jinja_env.get_template(f"staging.{self.FILE_EXTENSION}.jinja2")
        self.conversion_template = self.jinja_env.get_template(f"conversion.{self.FILE_EXTENSION}.jinja2")

    @abstractmethod
    def reserved_names(self) -> set[str]:
        """Names the rendered code binds for its own use."""

    @abstractmethod
    def render_prefix(self, generation_comment: str = "") -> str:
        """
        Render the module prefix (comment and imports).

        Args:
            generation_comment: Optional comment placed first

        Returns:
            Prefix code
        """

    @abstractmethod
    def render_body(self, operation: DecodeOperation) -> str:
        """
        Render the staging declaration, conversion and wiring of one operation.

        Args:
            operation: The wired decode operation

        Returns:
            Body code
        """

    def generate(self, operation: DecodeOperation, generation_comment: str = "") -> str:
        """
        Generate a complete module for one operation.

        Args:
            operation: The wired decode operation
            generation_comment: Optional comment placed first

        Returns:
            Generated code as a string
        """
        return self.render_prefix(generation_comment) + "\n\n" + self.render_body(operation)
