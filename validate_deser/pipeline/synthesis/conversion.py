"""
Conversion synthesizer.

Phase 3 of the pipeline: describe the total mapping from a staging value to
a real value. Records are copied field by field; unions get exactly one
case arm per variant and no catch-all arm.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ...errors import ExhaustivenessError
from ..config import GeneratorConfig
from ..shape.ir_nodes import (
    ConversionArm,
    ConversionMap,
    FieldBinding,
    RecordShape,
    ShapeKind,
    StagingDecl,
    TypeDecl,
    TypeShape,
    UnionShape,
)
from .naming import declaration_names, fresh_name

logger = logging.getLogger(__name__)

STAGING_ARGUMENT = "staging"


class ConversionSynthesizer:
    """Builds the ConversionMap between a TypeDecl and its StagingDecl."""

    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()

    def build(self, decl: TypeDecl, staging: StagingDecl, reserved: Iterable[str] = ()) -> ConversionMap:
        """
        Build the conversion from ``staging`` to ``decl``.

        Raises:
            ExhaustivenessError: If a field or a variant is not covered exactly once
        """
        taken = set(reserved) | declaration_names(decl) | {staging.name}
        function_name = fresh_name(f"{self.config.internal_prefix}convert_{decl.name}", taken)

        if isinstance(decl.shape, UnionShape):
            # Captures must not shadow the classes the arm body refers to
            arm_reserved = {decl.name, staging.name, "_"}
            arms = tuple(
                self._arm(variant.name, staged.payload, arm_reserved) for variant, staged in zip(decl.shape.variants, staging.shape.variants, strict=True)
            )
            conversion = ConversionMap(
                function_name=function_name,
                original_name=decl.name,
                staging_name=staging.name,
                kind=ShapeKind.UNION,
                arms=arms,
            )
        else:
            conversion = ConversionMap(
                function_name=function_name,
                original_name=decl.name,
                staging_name=staging.name,
                kind=decl.shape.kind,
                bindings=self._record_bindings(decl.shape),
            )

        verify_coverage(conversion, decl.shape)
        logger.debug("Built %s conversion %s for %s", conversion.kind.value, function_name, decl.qualname)
        return conversion

    def _record_bindings(self, shape: RecordShape) -> tuple[FieldBinding, ...]:
        if shape.kind == ShapeKind.NAMED:
            return tuple(FieldBinding(target=f.name, source=f"{STAGING_ARGUMENT}.{f.name}") for f in shape.fields)
        if shape.kind == ShapeKind.POSITIONAL:
            return tuple(FieldBinding(source=f"{STAGING_ARGUMENT}[{i}]") for i in range(len(shape.fields)))
        return ()

    def _arm(self, variant: str, staged: RecordShape, reserved: set[str]) -> ConversionArm:
        used = set(reserved)
        pattern = []
        arguments = []

        for i, f in enumerate(staged.fields):
            if staged.kind == ShapeKind.NAMED:
                capture = fresh_name(f.name if f.name not in used else f"{self.config.placeholder_prefix}{i}", used)
                pattern.append(FieldBinding(target=f.name, source=capture))
                arguments.append(FieldBinding(target=f.name, source=capture))
            else:
                capture = fresh_name(f"{self.config.placeholder_prefix}{i}", used)
                pattern.append(FieldBinding(source=capture))
                arguments.append(FieldBinding(source=capture))
            used.add(capture)

        return ConversionArm(variant=variant, kind=staged.kind, pattern=tuple(pattern), arguments=tuple(arguments))


def _verify_bindings(where: str, shape: RecordShape, bindings: tuple[FieldBinding, ...]) -> None:
    if shape.kind == ShapeKind.NAMED:
        targets = [b.target for b in bindings]
        missing = [n for n in shape.field_names if n not in targets]
        duplicated = sorted({t for t in targets if targets.count(t) > 1})
        unknown = [t for t in targets if t not in shape.field_names]
        if missing or duplicated or unknown:
            raise ExhaustivenessError(f"{where}: fields not covered exactly once (missing={missing}, duplicated={duplicated}, unknown={unknown})")
    elif len(bindings) != len(shape.fields) or any(b.target is not None for b in bindings):
        raise ExhaustivenessError(f"{where}: expected {len(shape.fields)} positional binding(s), got {len(bindings)}")


def verify_coverage(conversion: ConversionMap, shape: TypeShape) -> None:
    """
    Check that ``conversion`` covers ``shape`` exactly once per field and per variant.

    Raises:
        ExhaustivenessError: On any missing, duplicated or unknown field or variant
    """
    where = conversion.original_name
    if isinstance(shape, UnionShape):
        if conversion.kind != ShapeKind.UNION:
            raise ExhaustivenessError(f"{where}: declaration became a union after its conversion was generated")
        covered = [arm.variant for arm in conversion.arms]
        if covered != list(shape.variant_names):
            raise ExhaustivenessError(f"{where}: conversion arms {covered} do not match declared variants {list(shape.variant_names)}")
        for arm, variant in zip(conversion.arms, shape.variants):
            if arm.kind != variant.payload.kind:
                raise ExhaustivenessError(f"{where}.{variant.name}: payload kind changed from {arm.kind.value} to {variant.payload.kind.value}")
            _verify_bindings(f"{where}.{variant.name}", variant.payload, arm.arguments)
        return

    if conversion.kind != shape.kind:
        raise ExhaustivenessError(f"{where}: conversion kind {conversion.kind.value} does not match shape kind {shape.kind.value}")
    _verify_bindings(where, shape, conversion.bindings)
