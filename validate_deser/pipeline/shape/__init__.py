"""
Shape module.

Contains the IR nodes and the shape extractor.
"""

from __future__ import annotations

from .extractor import ShapeExtractor, is_namedtuple
from .ir_nodes import (
    BoundKind,
    BoundPredicate,
    ConversionArm,
    ConversionMap,
    DecodeOperation,
    FieldBinding,
    FieldDef,
    GenericParam,
    ParamKind,
    RecordShape,
    ShapeKind,
    StagingDecl,
    TypeDecl,
    TypeRef,
    TypeShape,
    UnionShape,
    VariantShape,
)

__all__ = [
    "BoundKind",
    "BoundPredicate",
    "ConversionArm",
    "ConversionMap",
    "DecodeOperation",
    "FieldBinding",
    "FieldDef",
    "GenericParam",
    "ParamKind",
    "RecordShape",
    "ShapeExtractor",
    "ShapeKind",
    "StagingDecl",
    "TypeDecl",
    "TypeRef",
    "TypeShape",
    "UnionShape",
    "VariantShape",
    "is_namedtuple",
]
