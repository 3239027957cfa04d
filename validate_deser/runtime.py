"""
Run-time support imported by generated code.

Bridges staging declarations to the decode capability (pydantic core
schemas) and translates validation failures into decode errors.
"""

from __future__ import annotations

import inspect
import types
from typing import Annotated, Any, ClassVar, TypeVar, Union, get_args, get_origin

from pydantic import GetCoreSchemaHandler
from pydantic_core import PydanticCustomError, core_schema

from .errors import GenerationError
from .protocol import error_type

VALIDATION_FAILED = "validation_failed"


def validation_failure(reason: str) -> PydanticCustomError:
    """A decode error carrying the description of a validation error."""
    return PydanticCustomError(VALIDATION_FAILED, "{reason}", {"reason": reason})


def validate_value(value: Any) -> Any:
    """Run ``value.validate()``, reporting its domain error as a decode error."""
    try:
        value.validate()
    except error_type(type(value)) as e:
        raise validation_failure(str(e)) from e
    return value


class ValidatedAlias:
    """``Annotated`` marker routing a parametrized validated type to its decoder.

    Parametrized dataclasses and NamedTuples do not expose the origin's
    ``__get_pydantic_core_schema__`` to pydantic, so their aliases are
    wrapped with this marker instead.
    """

    def __get_pydantic_core_schema__(self, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return own_decoder(get_origin(source) or source).core_schema(source, handler)

    def __repr__(self) -> str:
        return "ValidatedAlias()"


def own_decoder(cls: Any) -> Any:
    """The decoder declared on ``cls`` itself.

    A subclass of a validated class is not decoded by its base's decoder:
    that would build base instances and skip the subclass' ``validate``.

    Raises:
        GenerationError: If ``cls`` was not declared with ``@validate_deser``
    """
    decoder = vars(cls).get("__validated_decode__") if isinstance(cls, type) else None
    if decoder is not None:
        return decoder
    if getattr(cls, "__validated_decode__", None) is not None:
        raise GenerationError(f"{cls.__qualname__} inherits a validated decoder from a base class; declare it with @validate_deser too")
    raise GenerationError(f"{cls!r} is not declared with @validate_deser")


def is_validated(tp: Any) -> bool:
    return getattr(get_origin(tp) or tp, "__validated_decode__", None) is not None


def staged(tp: Any) -> Any:
    """Return ``tp`` with every parametrized validated type routed to its decoder."""
    origin = get_origin(tp)
    if origin is None:
        return tp

    args = get_args(tp)
    if origin is Annotated:
        inner = staged(tp.__origin__)
        return tp if inner is tp.__origin__ else Annotated[(inner, *tp.__metadata__)]

    if is_validated(tp):
        return Annotated[tp, ValidatedAlias()]

    new_args = tuple(staged(a) for a in args)
    if all(n is a for n, a in zip(new_args, args)):
        return tp
    if origin in (Union, types.UnionType):
        return Union[new_args]
    if hasattr(tp, "copy_with"):
        return tp.copy_with(new_args)
    return origin[new_args]


def _is_newtype(tp: Any) -> bool:
    origin = get_origin(tp) or tp
    fields = getattr(origin, "_fields", None)
    return isinstance(origin, type) and issubclass(origin, tuple) and fields is not None and len(fields) == 1


def _substitute(annotation: Any, arguments: dict[Any, Any]) -> Any:
    if isinstance(annotation, TypeVar):
        return arguments.get(annotation, annotation)
    params = getattr(annotation, "__parameters__", ())
    if params and not isinstance(annotation, type):
        return annotation[tuple(arguments.get(p, p) for p in params)]
    return annotation


def _newtype_field(tp: Any) -> Any:
    """Type of the single field of a (possibly parametrized) positional record."""
    origin = get_origin(tp) or tp
    (name,) = origin._fields
    annotation = inspect.get_annotations(origin).get(name, Any)
    arguments = dict(zip(getattr(origin, "__parameters__", ()), get_args(tp)))
    return _substitute(annotation, arguments)


def payload_schema(tp: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
    """Core schema of a staged record; a one-field positional record is its bare field."""
    if _is_newtype(tp):
        # The field is validated in the input's own mode, then wrapped
        return core_schema.no_info_after_validator_function(get_origin(tp) or tp, handler.generate_schema(_newtype_field(tp)))
    return handler.generate_schema(tp)


class UnitStaging:
    """Staged unit record: decoded from ``null``."""

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(lambda _: cls(), core_schema.none_schema())

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}()"


def external_tag(value: Any) -> str | None:
    """Tag of an externally tagged union value ``{"Variant": payload}``."""
    if isinstance(value, dict) and len(value) == 1:
        tag = next(iter(value))
        if isinstance(tag, str):
            return tag
    return None


def _unwrap(tagged: dict[str, Any]) -> Any:
    (payload,) = tagged.values()
    return payload


class UnionStaging:
    """Staged tagged union.

    Subclasses declare one nested staging class per variant and list them,
    in declaration order, in ``__variants__``. A decoded value is an
    instance of the staging class of the variant named by the input's tag.
    """

    __variants__: ClassVar[dict[str, type]] = {}

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        args = get_args(source)
        choices: dict[str, core_schema.CoreSchema] = {}
        for tag, payload in cls.__variants__.items():
            payload_type = payload[args] if args and getattr(payload, "__parameters__", ()) else payload
            choices[tag] = core_schema.typed_dict_schema(
                {tag: core_schema.typed_dict_field(payload_schema(payload_type, handler))},
                extra_behavior="forbid",
            )
        tagged = core_schema.tagged_union_schema(
            choices,
            discriminator=external_tag,
            custom_error_type="union_tag_invalid",
            custom_error_message=f"Expected a single-key object tagged with one of: {', '.join(cls.__variants__)}",
        )
        return core_schema.no_info_after_validator_function(_unwrap, tagged)
