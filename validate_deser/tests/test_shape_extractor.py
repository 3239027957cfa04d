import enum
import unittest
from dataclasses import dataclass, field
from typing import Generic, NamedTuple, Optional, ParamSpec, TypeVar, TypeVarTuple
from unittest import TestCase

from validate_deser import TaggedUnion, UnsupportedShapeError
from validate_deser.pipeline.shape import BoundKind, ParamKind, ShapeExtractor, ShapeKind, TypeRef

T = TypeVar("T", bound=int)
C = TypeVar("C", int, str)
P = ParamSpec("P")
Ts = TypeVarTuple("Ts")


@dataclass
class Named:
    b: str
    a: int
    c: Optional[str] = None
    derived: int = field(default=0, init=False)


class Positional(NamedTuple):
    second: str
    first: int


class Unit:
    pass


class Choices(TaggedUnion):
    @dataclass
    class Z:
        name: str

    class Y(NamedTuple):
        value: int

    class X:
        pass

    class _Private:
        pass


@dataclass
class Bounded(Generic[T, C]):
    value: T
    key: C


@dataclass
class Variadic(Generic[P, *Ts]):
    name: str


class TestShapeExtractor(TestCase):
    def setUp(self):
        self.extractor = ShapeExtractor()

    def test_named_keeps_order(self):
        decl = self.extractor.extract(Named)
        self.assertEqual(decl.shape.kind, ShapeKind.NAMED)
        self.assertEqual(decl.shape.field_names, ("b", "a", "c"))
        self.assertEqual(decl.shape.fields[0].type_ref, TypeRef("str"))
        self.assertEqual(decl.name, "Named")
        self.assertEqual(decl.module, __name__)

    def test_non_builtin_types_are_bound(self):
        decl = self.extractor.extract(Named)
        alias = decl.shape.fields[2].type_ref.expr
        self.assertTrue(alias.startswith("_vd_ann_"))
        self.assertEqual(decl.bindings[alias], Optional[str])

    def test_positional(self):
        decl = self.extractor.extract(Positional)
        self.assertEqual(decl.shape.kind, ShapeKind.POSITIONAL)
        self.assertEqual(decl.shape.field_names, ("second", "first"))

    def test_unit(self):
        decl = self.extractor.extract(Unit)
        self.assertEqual(decl.shape.kind, ShapeKind.UNIT)
        self.assertEqual(decl.shape.fields, ())

    def test_union_variants_in_declaration_order(self):
        decl = self.extractor.extract(Choices)
        self.assertEqual(decl.shape.kind, ShapeKind.UNION)
        self.assertEqual(decl.shape.variant_names, ("Z", "Y", "X"))
        kinds = [v.payload.kind for v in decl.shape.variants]
        self.assertEqual(kinds, [ShapeKind.NAMED, ShapeKind.POSITIONAL, ShapeKind.UNIT])

    def test_generic_bounds(self):
        decl = self.extractor.extract(Bounded)
        self.assertEqual([p.name for p in decl.generics], ["T", "C"])
        self.assertEqual(decl.shape.fields[0].type_ref.expr, "T")
        kinds = [(p.param, p.kind) for p in decl.predicates]
        self.assertEqual(kinds, [("T", BoundKind.SUBCLASS), ("C", BoundKind.CONSTRAINTS)])
        self.assertEqual([t.expr for t in decl.predicates[1].targets], ["int", "str"])

    def test_parameter_kinds(self):
        decl = self.extractor.extract(Variadic)
        self.assertEqual([p.kind for p in decl.generics], [ParamKind.PARAM_SPEC, ParamKind.TYPE_VAR_TUPLE])
        self.assertEqual(decl.type_params, ())
        self.assertEqual(decl.generics[1].subscript, "*Ts")

    def test_string_annotations_kept(self):
        @dataclass
        class Forward:
            other: "list[Forward]"

        decl = self.extractor.extract(Forward)
        self.assertEqual(decl.shape.fields[0].type_ref.expr, "list[Forward]")

    def test_extract_is_pure(self):
        before = dict(vars(Choices))
        self.extractor.extract(Choices)
        self.assertEqual(dict(vars(Choices)), before)

    def test_not_a_class(self):
        with self.assertRaises(UnsupportedShapeError):
            self.extractor.extract(lambda: None)

    def test_enum_unsupported(self):
        class Color(enum.Enum):
            RED = 1

        with self.assertRaises(UnsupportedShapeError) as ctx:
            self.extractor.extract(Color)
        self.assertIn("Color", str(ctx.exception))

    def test_finalizer_unsupported(self):
        @dataclass
        class Handle:
            fd: int

            def __del__(self):
                pass

        with self.assertRaises(UnsupportedShapeError):
            self.extractor.extract(Handle)

    def test_annotated_plain_class_unsupported(self):
        class Plain:
            name: str

        with self.assertRaises(UnsupportedShapeError):
            self.extractor.extract(Plain)

    def test_empty_union_unsupported(self):
        class Empty(TaggedUnion):
            pass

        with self.assertRaises(UnsupportedShapeError):
            self.extractor.extract(Empty)

    def test_primitive_arms_unsupported(self):
        class Bare(TaggedUnion):
            number: int
            text: str

        with self.assertRaises(UnsupportedShapeError):
            self.extractor.extract(Bare)

    def test_nested_union_unsupported(self):
        class Outer(TaggedUnion):
            class Inner(TaggedUnion):
                class Leaf:
                    pass

        with self.assertRaises(UnsupportedShapeError) as ctx:
            self.extractor.extract(Outer)
        self.assertEqual(ctx.exception.declaration, f"{Outer.__qualname__}.Inner")


if __name__ == "__main__":
    unittest.main()
