import unittest
from dataclasses import dataclass
from typing import NamedTuple
from unittest import TestCase

from validate_deser import DecodeError, ExhaustivenessError, TaggedUnion, decode_validated, expanded_source, validate_deser


@validate_deser
class NonEmptyAndNonNegative(TaggedUnion):
    @dataclass
    class String:
        name: str

    class Int(NamedTuple):
        value: int

    class Null:
        pass

    def validate(self) -> None:
        match self.value:
            case NonEmptyAndNonNegative.String(name=""):
                raise ValueError("name cannot be empty")
            case NonEmptyAndNonNegative.Int(value) if value < 0:
                raise ValueError("id cannot be negative")


@validate_deser
class Shape(TaggedUnion):
    class Point(NamedTuple):
        x: int
        y: int

    @dataclass
    class Circle:
        x: int
        y: int
        radius: int

    class Empty(NamedTuple):
        pass

    def validate(self) -> None:
        if isinstance(self.value, Shape.Circle) and self.value.radius <= 0:
            raise ValueError("radius must be positive")


@validate_deser
class Event(TaggedUnion):
    @dataclass(kw_only=True)
    class Resize:
        width: int = 80
        height: int

    class Close:
        pass

    def validate(self) -> None:
        pass


class TestEnum(TestCase):
    def test_named_variant(self):
        value = decode_validated(NonEmptyAndNonNegative, '{"String": {"name": "Lucas"}}')
        self.assertEqual(value, NonEmptyAndNonNegative(NonEmptyAndNonNegative.String(name="Lucas")))
        self.assertEqual(value.tag, "String")

    def test_named_variant_invalid(self):
        with self.assertRaises(DecodeError) as ctx:
            decode_validated(NonEmptyAndNonNegative, '{"String": {"name": ""}}')
        self.assertIn("name cannot be empty", str(ctx.exception))

    def test_newtype_variant(self):
        value = decode_validated(NonEmptyAndNonNegative, '{"Int": 1}')
        self.assertEqual(value, NonEmptyAndNonNegative(NonEmptyAndNonNegative.Int(1)))

    def test_newtype_variant_invalid(self):
        with self.assertRaises(DecodeError) as ctx:
            decode_validated(NonEmptyAndNonNegative, '{"Int": -1}')
        self.assertIn("id cannot be negative", str(ctx.exception))

    def test_unit_variant(self):
        value = decode_validated(NonEmptyAndNonNegative, '{"Null": null}')
        self.assertIsInstance(value.value, NonEmptyAndNonNegative.Null)
        self.assertEqual(value.tag, "Null")

    def test_rejects_bad_tags(self):
        for source in ['{"Float": 1.0}', '{"Int": 1, "Null": null}', "{}", '"Null"', "[1]"]:
            with self.subTest(source=source):
                with self.assertRaises(DecodeError):
                    decode_validated(NonEmptyAndNonNegative, source)

    def test_rejects_bad_payload(self):
        for source in ['{"Int": "x"}', '{"String": {}}', '{"Null": 1}']:
            with self.subTest(source=source):
                with self.assertRaises(DecodeError):
                    decode_validated(NonEmptyAndNonNegative, source)

    def test_positional_variant(self):
        self.assertEqual(decode_validated(Shape, '{"Point": [1, 2]}'), Shape(Shape.Point(1, 2)))
        self.assertEqual(decode_validated(Shape, '{"Empty": []}'), Shape(Shape.Empty()))

    def test_variant_with_shared_field_names(self):
        self.assertEqual(
            decode_validated(Shape, '{"Circle": {"x": 0, "y": 0, "radius": 3}}'),
            Shape(Shape.Circle(0, 0, 3)),
        )
        with self.assertRaises(DecodeError):
            decode_validated(Shape, '{"Circle": {"x": 0, "y": 0, "radius": 0}}')

    def test_keyword_only_variant(self):
        self.assertEqual(decode_validated(Event, '{"Resize": {"height": 24}}'), Event(Event.Resize(height=24)))
        with self.assertRaises(DecodeError):
            decode_validated(Event, '{"Resize": {"width": 10}}')
        self.assertIn("    @_vd_dataclasses.dataclass(kw_only=True)\n    class Resize:\n", expanded_source(Event))

    def test_conversion_has_one_arm_per_variant(self):
        source = expanded_source(NonEmptyAndNonNegative)
        self.assertEqual(source.count("case "), 3)
        self.assertNotIn("case _", source)
        self.assertIn("case __ValidDeserializeNonEmptyAndNonNegative.String(name=name):", source)
        self.assertIn("case __ValidDeserializeNonEmptyAndNonNegative.Int(value_0):", source)
        self.assertIn("case __ValidDeserializeNonEmptyAndNonNegative.Null():", source)
        self.assertIn('"Int": Int,', source)

    def test_variant_added_after_generation(self):
        @validate_deser
        class Growing(TaggedUnion):
            class A:
                pass

            def validate(self) -> None:
                pass

        class B:
            pass

        B.__qualname__ = f"{Growing.__qualname__}.B"
        Growing.B = B

        with self.assertRaises(ExhaustivenessError):
            decode_validated(Growing, '{"A": null}')


if __name__ == "__main__":
    unittest.main()
