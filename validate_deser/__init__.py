"""Validated deserialization

Give a data type a decoder that cannot skip validation: input is decoded
into an isomorphic staging value, converted into the real type, then checked
by the type's own ``validate()``. Malformed and invalid input fail alike.
"""

__version__ = "0.4.0"

from .decorator import decode_validated, expanded_source, validate_deser
from .errors import (
    DecodeError,
    ExhaustivenessError,
    GenerationError,
    UnsatisfiedBoundError,
    UnsupportedShapeError,
)
from .pipeline import FormatterConfig, GeneratorConfig, PipelineGenerator
from .protocol import TaggedUnion, Validate, validated

__all__ = [
    "validate_deser",
    "decode_validated",
    "expanded_source",
    "validated",
    "Validate",
    "TaggedUnion",
    "DecodeError",
    "GenerationError",
    "UnsupportedShapeError",
    "ExhaustivenessError",
    "UnsatisfiedBoundError",
    "GeneratorConfig",
    "FormatterConfig",
    "PipelineGenerator",
]
