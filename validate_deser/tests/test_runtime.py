from dataclasses import dataclass
from typing import Annotated, Generic, Optional, TypeVar, get_args

import pytest

from validate_deser import GenerationError, TaggedUnion, Validate, validate_deser, validated
from validate_deser.runtime import ValidatedAlias, external_tag, staged, validate_value

T = TypeVar("T")


@validate_deser
@dataclass
class Box(Generic[T]):
    item: T

    def validate(self) -> None:
        pass


@dataclass
class Plain:
    value: int

    def validate(self) -> None:
        if self.value < 0:
            raise ValueError("negative")


class TestStaged:
    def test_plain_types_unchanged(self):
        for tp in (int, str, list[int], Optional[int], dict[str, list[int]]):
            assert staged(tp) is tp

    def test_parametrized_validated_type_is_routed(self):
        routed = staged(Box[int])
        assert get_args(routed)[0] == Box[int]
        assert isinstance(routed.__metadata__[0], ValidatedAlias)

    def test_routes_inside_containers(self):
        routed = staged(list[Box[int]])
        (inner,) = get_args(routed)
        assert isinstance(inner.__metadata__[0], ValidatedAlias)

        routed = staged(Optional[Box[int]])
        assert any(getattr(a, "__metadata__", None) for a in get_args(routed))

    def test_annotated_metadata_kept(self):
        routed = staged(Annotated[Box[int], "meta"])
        assert "meta" in routed.__metadata__


class TestExternalTag:
    def test_single_key(self):
        assert external_tag({"Int": 1}) == "Int"

    @pytest.mark.parametrize("value", [{}, {"A": 1, "B": 2}, "A", None, [("A", 1)]])
    def test_not_tagged(self, value):
        assert external_tag(value) is None


class TestValidation:
    def test_validate_value(self):
        assert validate_value(Plain(1)) == Plain(1)

    def test_validate_value_failure(self):
        from pydantic_core import PydanticCustomError

        with pytest.raises(PydanticCustomError) as exc_info:
            validate_value(Plain(-1))
        assert exc_info.value.type == "validation_failed"
        assert exc_info.value.message() == "negative"

    def test_validated_helper(self):
        assert validated(Plain(2)) == Plain(2)
        with pytest.raises(ValueError):
            validated(Plain(-2))

    def test_protocol(self):
        assert isinstance(Plain(1), Validate)
        assert not isinstance(object(), Validate)


class TestTaggedUnion:
    def test_value_semantics(self):
        class Sign(TaggedUnion):
            @dataclass(frozen=True)
            class Plus:
                pass

            @dataclass(frozen=True)
            class Minus:
                pass

        assert Sign(Sign.Plus()) == Sign(Sign.Plus())
        assert Sign(Sign.Plus()) != Sign(Sign.Minus())
        assert hash(Sign(Sign.Plus())) == hash(Sign(Sign.Plus()))
        assert Sign(Sign.Minus()).tag == "Minus"
        assert list(Sign.variants()) == ["Plus", "Minus"]
        assert repr(Sign(Sign.Plus())).endswith("Sign(TestTaggedUnion.test_value_semantics.<locals>.Sign.Plus())")


class TestDecorator:
    def test_rejects_existing_schema_hook(self):
        with pytest.raises(GenerationError):

            @validate_deser
            @dataclass
            class Custom:
                value: int

                @classmethod
                def __get_pydantic_core_schema__(cls, source, handler):
                    return handler(source)

                def validate(self) -> None:
                    pass

    def test_with_options(self):
        from validate_deser import GeneratorConfig, expanded_source

        @validate_deser(config=GeneratorConfig(staging_prefix="Raw"))
        @dataclass
        class Configured:
            value: int

            def validate(self) -> None:
                pass

        assert "class RawConfigured:" in expanded_source(Configured)
        assert Configured.decode_validated('{"value": 3}') == Configured(3)
