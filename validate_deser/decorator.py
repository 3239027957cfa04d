"""
The ``@validate_deser`` class decorator and the public decode entry points.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from typing import Any, TypeVar, get_args, get_origin

from .decoder import ValidatedDecoder
from .errors import GenerationError
from .pipeline import GeneratorConfig, PipelineGenerator
from .runtime import own_decoder

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _core_schema_hook(cls, source, handler):
    return own_decoder(cls).core_schema(source, handler)


def _decode_classmethod(cls, source):
    """Decode ``source`` into a validated instance of this class."""
    return own_decoder(cls).decode(source)


def _attach(cls: type, config: GeneratorConfig | None, localns: Mapping[str, Any]) -> type:
    if not isinstance(cls, type):
        raise GenerationError(f"@validate_deser applies to classes, got {cls!r}")
    if not callable(getattr(cls, "validate", None)):
        raise GenerationError(f"{cls.__qualname__} must define a validate() method")
    if "__get_pydantic_core_schema__" in vars(cls):
        raise GenerationError(f"{cls.__qualname__} already defines how it is decoded")

    module = sys.modules.get(cls.__module__)
    globalns = vars(module) if module is not None else {}

    generator = PipelineGenerator(config)
    unit = generator.generate(cls, reserved={*globalns, *localns})

    cls.__validated_decode__ = ValidatedDecoder(cls, generator, unit, globalns, localns)
    cls.__get_pydantic_core_schema__ = classmethod(_core_schema_hook)
    cls.decode_validated = classmethod(_decode_classmethod)

    logger.debug("Attached validated decoder to %s", cls.__qualname__)
    return cls


def validate_deser(cls: type | None = None, /, *, config: GeneratorConfig | None = None):
    """
    Give a class a validated decoder.

    Usable bare (``@validate_deser``) or with options
    (``@validate_deser(config=GeneratorConfig(...))``). Apply it above
    ``@dataclass``. The class must define ``validate()``.

    Raises:
        GenerationError: If no decoder can be generated for the class
    """
    if cls is not None:
        return _attach(cls, config, sys._getframe(1).f_locals)

    def wrap(cls: type) -> type:
        return _attach(cls, config, sys._getframe(1).f_locals)

    return wrap


def decoder_of(tp: Any) -> ValidatedDecoder:
    decoder = own_decoder(get_origin(tp) or tp)
    if not isinstance(decoder, ValidatedDecoder):
        raise GenerationError(f"{tp!r} is not declared with @validate_deser")
    return decoder


def decode_validated(tp: type[T], source: Any) -> T:
    """
    Decode ``source`` into a validated value of ``tp``.

    ``tp`` may be a parametrized generic (``Pair[int]``), whose arguments are
    checked against the declaration's bounds first.

    Raises:
        DecodeError: If the input is malformed or the value is invalid
        UnsatisfiedBoundError: If a type argument violates a bound
    """
    return decoder_of(tp).decode(source, get_args(tp) if get_origin(tp) is not None else ())


def expanded_source(tp: Any) -> str:
    """Python source generated for a validated type."""
    return decoder_of(tp).source
