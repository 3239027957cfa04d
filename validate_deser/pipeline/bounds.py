"""
Bound propagation.

The bound set of a generated decoder is the original declaration's bound
predicates plus one "decodable" predicate per type parameter. It is
computed once per declaration and checked for every instantiation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar, get_origin

from ..errors import UnsatisfiedBoundError
from .shape.ir_nodes import BoundKind, BoundPredicate, GenericParam, ParamKind, TypeDecl

logger = logging.getLogger(__name__)


def decodable_predicates(generics: Sequence[GenericParam]) -> tuple[BoundPredicate, ...]:
    return tuple(BoundPredicate(param=p.name, kind=BoundKind.DECODABLE) for p in generics if p.kind == ParamKind.TYPE)


def propagate_bounds(decl: TypeDecl) -> tuple[BoundPredicate, ...]:
    """Original predicates unioned with decodable ones, deduplicated, order kept."""
    return tuple(dict.fromkeys(decl.predicates + decodable_predicates(decl.generics)))


def _is_subtype(argument: Any, target: Any) -> bool:
    origin = get_origin(argument) or argument
    if not isinstance(origin, type) or not isinstance(target, type):
        logger.debug("Cannot verify %r against %r, accepting", argument, target)
        return True
    try:
        return issubclass(origin, target)
    except TypeError as e:
        logger.debug("Cannot verify %r against %r (%s), accepting", argument, target, e)
        return True


def check_bounds(
    declaration: str,
    generics: Sequence[GenericParam],
    bounds: Sequence[BoundPredicate],
    arguments: Sequence[Any],
    is_decodable: Callable[[Any], bool],
) -> None:
    """
    Check the arguments of one instantiation against a bound set.

    Unbound type variables and ``Any`` satisfy every predicate.

    Raises:
        UnsatisfiedBoundError: If an argument violates a predicate
    """
    if any(p.kind == ParamKind.TYPE_VAR_TUPLE for p in generics):
        # Variadic parameters absorb a variable number of arguments
        return

    if len(arguments) != len(generics):
        raise UnsatisfiedBoundError(declaration, ", ".join(p.name for p in generics), tuple(arguments), f"expects {len(generics)} argument(s)")

    values = {p.name: arg for p, arg in zip(generics, arguments)}
    for predicate in bounds:
        argument = values.get(predicate.param)
        if argument is None or argument is Any or isinstance(argument, TypeVar):
            continue

        if predicate.kind == BoundKind.SUBCLASS:
            target = predicate.targets[0]
            if not _is_subtype(argument, target.value):
                raise UnsatisfiedBoundError(declaration, predicate.param, argument, f"must be a subtype of {target.expr}")
        elif predicate.kind == BoundKind.CONSTRAINTS:
            if not any(_is_subtype(argument, t.value) for t in predicate.targets):
                choices = ", ".join(t.expr for t in predicate.targets)
                raise UnsatisfiedBoundError(declaration, predicate.param, argument, f"must be one of {choices}")
        elif predicate.kind == BoundKind.DECODABLE:
            if not is_decodable(argument):
                raise UnsatisfiedBoundError(declaration, predicate.param, argument, "must be decodable")
