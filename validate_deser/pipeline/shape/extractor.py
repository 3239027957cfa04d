"""
Shape extractor.

Phase 1 of the pipeline: read an annotated class and classify it as a named
record, positional record, unit record or tagged union, together with its
generic parameters and their bounds.
"""

from __future__ import annotations

import builtins
import dataclasses
import enum
import inspect
import logging
from typing import Any, ForwardRef, ParamSpec, TypeVar, TypeVarTuple

from ...errors import UnsupportedShapeError
from ...protocol import TaggedUnion, declared_variants
from ..config import GeneratorConfig
from .ir_nodes import (
    BoundKind,
    BoundPredicate,
    FieldDef,
    GenericParam,
    ParamKind,
    RecordShape,
    ShapeKind,
    TypeDecl,
    TypeRef,
    TypeShape,
    UnionShape,
    VariantShape,
)

logger = logging.getLogger(__name__)


def is_namedtuple(cls: type) -> bool:
    return issubclass(cls, tuple) and hasattr(cls, "_fields")


class ShapeExtractor:
    """Builds a TypeDecl from a live class."""

    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()

        # Reset for each extraction
        self._params: dict[int, Any] = {}
        self._bindings: dict[str, Any] = {}
        self._aliases: dict[int, str] = {}
        self._defaults = 0

    def extract(self, cls: Any) -> TypeDecl:
        """
        Extract the declaration of ``cls``.

        Args:
            cls: The annotated class

        Returns:
            The declaration with its shape, generics and bound predicates

        Raises:
            UnsupportedShapeError: If ``cls`` is not one of the four supported kinds
        """
        if not isinstance(cls, type):
            raise UnsupportedShapeError(repr(cls), "only classes can be annotated")

        self._params = {}
        self._bindings = {}
        self._aliases = {}
        self._defaults = 0

        generics = self._extract_generics(cls)
        shape = self._extract_shape(cls, cls.__qualname__, allow_union=True)
        predicates = self._extract_predicates(generics)

        logger.debug("Extracted %s as %s with %d generic parameter(s)", cls.__qualname__, shape.kind.value, len(generics))

        return TypeDecl(
            name=cls.__name__,
            qualname=cls.__qualname__,
            module=cls.__module__,
            shape=shape,
            generics=generics,
            predicates=predicates,
            bindings=dict(self._bindings),
        )

    def _extract_generics(self, cls: type) -> tuple[GenericParam, ...]:
        generics = []
        for param in getattr(cls, "__parameters__", ()):
            self._params[id(param)] = param
            self._bindings[param.__name__] = param

        for param in getattr(cls, "__parameters__", ()):
            if isinstance(param, TypeVar):
                bound = self._type_ref(param.__bound__) if param.__bound__ is not None else None
                constraints = tuple(self._type_ref(c) for c in param.__constraints__)
                generics.append(GenericParam(name=param.__name__, kind=ParamKind.TYPE, bound=bound, constraints=constraints))
            elif isinstance(param, ParamSpec):
                generics.append(GenericParam(name=param.__name__, kind=ParamKind.PARAM_SPEC))
            elif isinstance(param, TypeVarTuple):
                generics.append(GenericParam(name=param.__name__, kind=ParamKind.TYPE_VAR_TUPLE))
            else:
                raise UnsupportedShapeError(cls.__qualname__, f"unknown generic parameter {param!r}")
        return tuple(generics)

    def _extract_predicates(self, generics: tuple[GenericParam, ...]) -> tuple[BoundPredicate, ...]:
        predicates = []
        for param in generics:
            if param.bound is not None:
                predicates.append(BoundPredicate(param=param.name, kind=BoundKind.SUBCLASS, targets=(param.bound,)))
            if param.constraints:
                predicates.append(BoundPredicate(param=param.name, kind=BoundKind.CONSTRAINTS, targets=param.constraints))
        return tuple(predicates)

    def _extract_shape(self, cls: type, where: str, allow_union: bool) -> TypeShape:
        if getattr(cls, "__del__", None) is not None:
            raise UnsupportedShapeError(where, "types with a __del__ finalizer are not supported")

        if issubclass(cls, enum.Enum):
            raise UnsupportedShapeError(where, "enum members are bare discriminants; declare a TaggedUnion with nested variant classes")

        if issubclass(cls, TaggedUnion):
            if not allow_union:
                raise UnsupportedShapeError(where, "a union variant cannot itself be a TaggedUnion; wrap it in a field")
            return self._extract_union(cls, where)

        if is_namedtuple(cls):
            # Subclasses of a NamedTuple inherit its annotated fields
            annotations = {}
            for klass in reversed(cls.__mro__):
                annotations.update(inspect.get_annotations(klass))
            defaults = cls._field_defaults
            fields = tuple(
                FieldDef(
                    name=name,
                    type_ref=self._type_ref(annotations.get(name, Any)),
                    default=self._default_ref(defaults[name]) if name in defaults else None,
                )
                for name in cls._fields
            )
            return RecordShape(kind=ShapeKind.POSITIONAL, fields=fields)

        if dataclasses.is_dataclass(cls):
            fields = tuple(self._dataclass_field(f) for f in dataclasses.fields(cls) if f.init)
            return RecordShape(kind=ShapeKind.NAMED, fields=fields)

        if inspect.get_annotations(cls):
            raise UnsupportedShapeError(where, "annotated fields need @dataclass or NamedTuple (apply @validate_deser above @dataclass)")

        return RecordShape(kind=ShapeKind.UNIT)

    def _extract_union(self, cls: type, where: str) -> UnionShape:
        if inspect.get_annotations(cls):
            names = ", ".join(inspect.get_annotations(cls))
            raise UnsupportedShapeError(where, f"union arms must be nested classes, found bare annotations: {names}")

        variants = declared_variants(cls)
        if not variants:
            raise UnsupportedShapeError(where, "a TaggedUnion must declare at least one variant")

        return UnionShape(
            variants=tuple(VariantShape(name=name, payload=self._extract_shape(member, f"{where}.{name}", allow_union=False)) for name, member in variants.items())
        )

    def _dataclass_field(self, f: dataclasses.Field) -> FieldDef:
        if f.default is not dataclasses.MISSING:
            return FieldDef(name=f.name, type_ref=self._type_ref(f.type), default=self._default_ref(f.default))
        if f.default_factory is not dataclasses.MISSING:
            return FieldDef(name=f.name, type_ref=self._type_ref(f.type), default=self._default_ref(f.default_factory), default_factory=True)
        return FieldDef(name=f.name, type_ref=self._type_ref(f.type))

    def _default_ref(self, value: Any) -> TypeRef:
        """Bind a default value (or factory) under a fresh alias."""
        alias = f"{self.config.internal_prefix}default_{self._defaults}"
        self._defaults += 1
        self._bindings[alias] = value
        return TypeRef(expr=alias, value=value)

    def _type_ref(self, annotation: Any) -> TypeRef:
        """Render an annotation as an expression resolvable in the generated namespace."""
        if isinstance(annotation, str):
            return TypeRef(expr=annotation.strip())

        if isinstance(annotation, ForwardRef):
            return TypeRef(expr=annotation.__forward_arg__)

        if annotation is None:
            return TypeRef(expr="None", value=None)

        if id(annotation) in self._params:
            return TypeRef(expr=annotation.__name__, value=annotation)

        name = getattr(annotation, "__name__", None)
        if isinstance(annotation, type) and name and getattr(builtins, name, None) is annotation:
            return TypeRef(expr=name, value=annotation)

        alias = self._aliases.get(id(annotation))
        if alias is None:
            alias = f"{self.config.internal_prefix}ann_{len(self._aliases)}"
            self._aliases[id(annotation)] = alias
            self._bindings[alias] = annotation
        return TypeRef(expr=alias, value=annotation)
