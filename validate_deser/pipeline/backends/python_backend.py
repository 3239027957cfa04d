"""
Python code generation backend.

Renders staging declarations, conversions and their wiring as Python source.
"""

from __future__ import annotations

import re

from ..config import GeneratorConfig
from ..shape.ir_nodes import DecodeOperation, StagingDecl
from .base import CodeBackend


class PythonBackend(CodeBackend):
    """Python code generation backend."""

    TEMPLATE_LANG = "python"
    FILE_EXTENSION = "py"

    def __init__(self, config: GeneratorConfig):
        super().__init__(config)
        prefix = config.internal_prefix
        # Module aliases used by the generated code
        self.imports = {
            "dataclasses": f"{prefix}dataclasses",
            "typing": f"{prefix}typing",
            "runtime": f"{prefix}runtime",
        }

    def reserved_names(self) -> set[str]:
        return set(self.imports.values())

    def render_prefix(self, generation_comment: str = "") -> str:
        comment = generation_comment if self.config.add_generation_comment else ""
        return self.prefix_template.render(generation_comment=comment, imports=self.imports)

    def render_body(self, operation: DecodeOperation) -> str:
        staging = self.staging_template.render(
            staging=operation.staging,
            generic_base=self.generic_base(operation.staging),
            imports=self.imports,
        )
        conversion = self.conversion_template.render(
            conversion=operation.conversion,
            finish_name=operation.finish_name,
            imports=self.imports,
        )
        return self._post_process_code(staging + "\n\n" + conversion)

    def generic_base(self, staging: StagingDecl) -> str:
        """``Generic[...]`` base re-attaching the declaration's parameters, if any."""
        if not staging.generics:
            return ""
        params = ", ".join(p.subscript for p in staging.generics)
        return f"{self.imports['typing']}.Generic[{params}]"

    def _post_process_code(self, code: str) -> str:
        """Strip trailing whitespace and collapse runs of blank lines."""
        code = "\n".join(line.rstrip() for line in code.splitlines())
        code = re.sub(r"\n{4,}", "\n\n\n", code)
        return code.strip("\n") + "\n"
