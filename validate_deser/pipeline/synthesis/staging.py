"""
Staging-type synthesizer.

Phase 2 of the pipeline: derive the declaration the decode capability
fills in directly. It has the same topology as the original shape, carries
the same generic parameters and requires every type parameter to be
decodable.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from ..bounds import propagate_bounds
from ..config import GeneratorConfig
from ..shape.ir_nodes import (
    RecordShape,
    ShapeKind,
    StagingDecl,
    TypeDecl,
    TypeShape,
    UnionShape,
    VariantShape,
)
from .naming import declaration_names, fresh_name

logger = logging.getLogger(__name__)


class StagingSynthesizer:
    """Builds the StagingDecl of a TypeDecl."""

    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()

    def synthesize(self, decl: TypeDecl, reserved: Iterable[str] = ()) -> StagingDecl:
        """
        Synthesize the staging declaration of ``decl``.

        Args:
            decl: The extracted declaration
            reserved: Names visible in the declaring scope

        Returns:
            The staging declaration
        """
        taken = set(reserved) | declaration_names(decl)
        name = fresh_name(f"{self.config.staging_prefix}{decl.name}", taken)
        staging = StagingDecl(
            name=name,
            original=decl.name,
            shape=self.stage_shape(decl.shape),
            generics=decl.generics,
            predicates=propagate_bounds(decl),
        )
        logger.debug("Synthesized staging declaration %s for %s", name, decl.qualname)
        return staging

    def stage_shape(self, shape: TypeShape) -> TypeShape:
        if isinstance(shape, UnionShape):
            return UnionShape(variants=tuple(VariantShape(name=v.name, payload=self.stage_record(v.payload)) for v in shape.variants))
        return self.stage_record(shape)

    def stage_record(self, shape: RecordShape) -> RecordShape:
        if shape.kind == ShapeKind.POSITIONAL:
            prefix = self.config.positional_field_prefix
            return RecordShape(
                kind=ShapeKind.POSITIONAL,
                fields=tuple(replace(f, name=f"{prefix}{i}") for i, f in enumerate(shape.fields)),
            )
        return RecordShape(kind=shape.kind, fields=shape.fields)
