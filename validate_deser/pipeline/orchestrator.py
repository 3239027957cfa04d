"""
Orchestrator.

Phase 4 of the pipeline: wire decode, conversion and validation into a
single operation per declaration, carrying the propagated bound set.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .bounds import propagate_bounds
from .config import GeneratorConfig
from .shape.ir_nodes import ConversionMap, DecodeOperation, StagingDecl, TypeDecl
from .synthesis.naming import declaration_names, fresh_name

logger = logging.getLogger(__name__)


class Orchestrator:
    """Builds the DecodeOperation of a declaration."""

    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()

    def wire(self, decl: TypeDecl, staging: StagingDecl, conversion: ConversionMap, reserved: Iterable[str] = ()) -> DecodeOperation:
        """
        Wire ``staging`` and ``conversion`` into the decode operation of ``decl``.

        The operation, per invocation:
        decode staging (may fail) -> convert (infallible) -> validate (may fail).

        Args:
            decl: The extracted declaration
            staging: Its staging declaration
            conversion: The staging -> real conversion
            reserved: Names visible in the declaring scope

        Returns:
            The decode operation
        """
        taken = set(reserved) | declaration_names(decl) | {staging.name, conversion.function_name}
        finish_name = fresh_name(f"{self.config.internal_prefix}finish_{decl.name}", taken)

        bounds = propagate_bounds(decl)
        logger.debug("Wired %s with %d bound predicate(s)", decl.qualname, len(bounds))

        return DecodeOperation(
            decl=decl,
            staging=staging,
            conversion=conversion,
            bounds=bounds,
            finish_name=finish_name,
        )
