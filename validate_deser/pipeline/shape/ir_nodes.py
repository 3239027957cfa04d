"""
IR (Intermediate Representation) node definitions.

These nodes describe a declaration and everything derived from it: the
extracted shape, the staging declaration, the conversion map and the wired
decode operation. All nodes are immutable; every phase reads one description
and produces a new one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ShapeKind(Enum):
    """Structural kind of a declaration or of a union variant payload."""

    NAMED = "named"  # dataclass: fields addressed by name
    POSITIONAL = "positional"  # NamedTuple: fields addressed by index
    UNIT = "unit"  # no fields at all
    UNION = "union"  # TaggedUnion: closed set of named variants


class ParamKind(Enum):
    """Kind of generic parameter."""

    TYPE = "type"  # TypeVar
    PARAM_SPEC = "param_spec"  # ParamSpec
    TYPE_VAR_TUPLE = "type_var_tuple"  # TypeVarTuple


class BoundKind(Enum):
    """Kind of bound predicate attached to a generic parameter."""

    SUBCLASS = "subclass"  # TypeVar(bound=...)
    CONSTRAINTS = "constraints"  # TypeVar("T", A, B)
    DECODABLE = "decodable"  # argument must itself be decodable


@dataclass(frozen=True)
class TypeRef:
    """A type expression as it is rendered in generated code."""

    expr: str = ""

    # Live object the expression denotes, when known (not used for equality)
    value: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class FieldDef:
    """A field of a record shape."""

    name: str = ""
    type_ref: TypeRef = field(default_factory=TypeRef)

    # Default value (or factory) the field falls back to when absent from the input
    default: TypeRef | None = None
    default_factory: bool = False


@dataclass(frozen=True)
class RecordShape:
    """Named, positional or unit record."""

    kind: ShapeKind = ShapeKind.UNIT
    fields: tuple[FieldDef, ...] = ()

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)


@dataclass(frozen=True)
class VariantShape:
    """A named union variant with its record payload."""

    name: str = ""
    payload: RecordShape = field(default_factory=RecordShape)


@dataclass(frozen=True)
class UnionShape:
    """A tagged union of record-shaped variants."""

    variants: tuple[VariantShape, ...] = ()
    kind: ShapeKind = field(default=ShapeKind.UNION, init=False)

    @property
    def variant_names(self) -> tuple[str, ...]:
        return tuple(v.name for v in self.variants)


TypeShape = RecordShape | UnionShape


@dataclass(frozen=True)
class GenericParam:
    """A generic parameter of a declaration."""

    name: str = ""
    kind: ParamKind = ParamKind.TYPE
    bound: TypeRef | None = None
    constraints: tuple[TypeRef, ...] = ()

    @property
    def subscript(self) -> str:
        """How the parameter appears inside ``Generic[...]``."""
        if self.kind == ParamKind.TYPE_VAR_TUPLE:
            return f"*{self.name}"
        return self.name


@dataclass(frozen=True)
class BoundPredicate:
    """A requirement on the argument bound to a generic parameter."""

    param: str = ""
    kind: BoundKind = BoundKind.DECODABLE
    targets: tuple[TypeRef, ...] = ()


@dataclass(frozen=True)
class TypeDecl:
    """An annotated declaration as read by the shape extractor."""

    name: str = ""
    qualname: str = ""
    module: str = ""
    shape: TypeShape = field(default_factory=RecordShape)
    generics: tuple[GenericParam, ...] = ()
    predicates: tuple[BoundPredicate, ...] = ()

    # Names referenced by rendered type expressions -> live objects
    bindings: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def type_params(self) -> tuple[GenericParam, ...]:
        return tuple(p for p in self.generics if p.kind == ParamKind.TYPE)


@dataclass(frozen=True)
class StagingDecl:
    """Declaration mirroring a TypeDecl, decoded directly by the decode capability."""

    name: str = ""
    original: str = ""
    shape: TypeShape = field(default_factory=RecordShape)
    generics: tuple[GenericParam, ...] = ()
    predicates: tuple[BoundPredicate, ...] = ()


@dataclass(frozen=True)
class FieldBinding:
    """One argument of a reconstruction call.

    ``target`` is the keyword for named fields and ``None`` for positional ones.
    """

    target: str | None = None
    source: str = ""


@dataclass(frozen=True)
class ConversionArm:
    """One case of the union conversion."""

    variant: str = ""
    kind: ShapeKind = ShapeKind.UNIT
    pattern: tuple[FieldBinding, ...] = ()  # destructuring of the staged payload
    arguments: tuple[FieldBinding, ...] = ()  # reconstruction of the real variant


@dataclass(frozen=True)
class ConversionMap:
    """Total, side-effect free mapping from a staging value to a real value."""

    function_name: str = ""
    original_name: str = ""
    staging_name: str = ""
    kind: ShapeKind = ShapeKind.UNIT
    bindings: tuple[FieldBinding, ...] = ()  # records
    arms: tuple[ConversionArm, ...] = ()  # unions


@dataclass(frozen=True)
class DecodeOperation:
    """decode -> convert -> validate, wired once per declaration."""

    decl: TypeDecl = field(default_factory=TypeDecl)
    staging: StagingDecl = field(default_factory=StagingDecl)
    conversion: ConversionMap = field(default_factory=ConversionMap)
    bounds: tuple[BoundPredicate, ...] = ()
    finish_name: str = ""
