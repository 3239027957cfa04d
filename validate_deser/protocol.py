"""
The validation capability and the tagged-union base class.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

V = TypeVar("V")


@runtime_checkable
class Validate(Protocol):
    """A value that can check its own validity.

    ``validate`` returns ``None`` when the value is acceptable and raises
    otherwise. The exception class treated as a domain error is the ``Error``
    attribute of the implementing class, ``ValueError`` when absent::

        @validate_deser
        @dataclass
        class Port:
            number: int

            def validate(self) -> None:
                if not 0 < self.number < 65536:
                    raise ValueError("port out of range")
    """

    def validate(self) -> None: ...


def error_type(cls: type) -> type[Exception]:
    """Exception class a validated type reports its domain errors with."""
    return getattr(cls, "Error", ValueError)


def validated(value: V) -> V:
    """Validate ``value`` and hand it back."""
    value.validate()
    return value


def declared_variants(cls: type) -> dict[str, type]:
    """Public classes declared in the body of ``cls``, in declaration order."""
    prefix = f"{cls.__qualname__}."
    variants = {}
    for name, member in vars(cls).items():
        if name.startswith("_") or not isinstance(member, type):
            continue
        if member.__qualname__ == prefix + name:
            variants[name] = member
    return variants


class TaggedUnion:
    """Base class for closed sums.

    Variants are the public classes nested in the subclass body, each a
    dataclass, a NamedTuple or a plain field-less class. A union value wraps
    exactly one variant instance::

        class Shape(TaggedUnion):
            @dataclass
            class Circle:
                radius: float

            class Square(NamedTuple):
                side: float

            class Empty:
                pass

        Shape(Shape.Circle(radius=1.0))
    """

    __slots__ = ("value",)
    __match_args__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    @classmethod
    def variants(cls) -> dict[str, type]:
        return declared_variants(cls)

    @property
    def tag(self) -> str:
        return type(self.value).__name__

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.value == other.value

    def __hash__(self) -> int:
        return hash((type(self), self.value))

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}({self.value!r})"
