import unittest
from dataclasses import dataclass
from typing import Generic, NamedTuple, TypeVar
from unittest import TestCase

from validate_deser import GeneratorConfig, TaggedUnion
from validate_deser.pipeline.shape import BoundKind, BoundPredicate, ShapeExtractor, ShapeKind
from validate_deser.pipeline.synthesis import StagingSynthesizer, fresh_name

T = TypeVar("T", bound=int)
U = TypeVar("U")


@dataclass
class Named(Generic[T, U]):
    name: str
    id: T
    other: U


class Positional(NamedTuple):
    name: str
    id: int


class Either(TaggedUnion):
    class Pair(NamedTuple):
        left: int
        right: int

    @dataclass
    class Label:
        text: str


class TestStaging(TestCase):
    def setUp(self):
        self.extractor = ShapeExtractor()
        self.synthesizer = StagingSynthesizer()

    def test_named_keeps_fields(self):
        decl = self.extractor.extract(Named)
        staging = self.synthesizer.synthesize(decl)
        self.assertEqual(staging.name, "__ValidDeserializeNamed")
        self.assertEqual(staging.original, "Named")
        self.assertEqual(staging.shape, decl.shape)

    def test_generics_carried_with_decodable_bounds(self):
        decl = self.extractor.extract(Named)
        staging = self.synthesizer.synthesize(decl)
        self.assertEqual(staging.generics, decl.generics)
        self.assertEqual(
            staging.predicates,
            (
                decl.predicates[0],
                BoundPredicate(param="T", kind=BoundKind.DECODABLE),
                BoundPredicate(param="U", kind=BoundKind.DECODABLE),
            ),
        )

    def test_positional_fields_renamed(self):
        staging = self.synthesizer.synthesize(self.extractor.extract(Positional))
        self.assertEqual(staging.shape.kind, ShapeKind.POSITIONAL)
        self.assertEqual(staging.shape.field_names, ("field_0", "field_1"))
        self.assertEqual([f.type_ref.expr for f in staging.shape.fields], ["str", "int"])

    def test_union_variants(self):
        staging = self.synthesizer.synthesize(self.extractor.extract(Either))
        self.assertEqual(staging.shape.variant_names, ("Pair", "Label"))
        self.assertEqual(staging.shape.variants[0].payload.field_names, ("field_0", "field_1"))
        self.assertEqual(staging.shape.variants[1].payload.field_names, ("text",))

    def test_name_avoids_reserved(self):
        decl = self.extractor.extract(Positional)
        staging = self.synthesizer.synthesize(decl, reserved={"__ValidDeserializePositional", "__ValidDeserializePositional_"})
        self.assertEqual(staging.name, "__ValidDeserializePositional__")

    def test_configured_prefixes(self):
        config = GeneratorConfig(staging_prefix="Raw", positional_field_prefix="item")
        staging = StagingSynthesizer(config).synthesize(self.extractor.extract(Positional))
        self.assertEqual(staging.name, "RawPositional")
        self.assertEqual(staging.shape.field_names, ("item0", "item1"))

    def test_fresh_name(self):
        self.assertEqual(fresh_name("x", []), "x")
        self.assertEqual(fresh_name("x", ["x", "x_"]), "x__")


if __name__ == "__main__":
    unittest.main()
