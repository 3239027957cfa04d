"""
Collision-free names for generated declarations and captures.
"""

from __future__ import annotations

import ast
from collections.abc import Iterable

from ..shape.ir_nodes import TypeDecl, TypeShape, UnionShape


def fresh_name(base: str, reserved: Iterable[str]) -> str:
    """Return ``base``, suffixed with underscores until it is not reserved."""
    taken = set(reserved)
    name = base
    while name in taken:
        name += "_"
    return name


def expression_names(expr: str) -> set[str]:
    """Identifiers referenced by a type expression."""
    try:
        tree = ast.parse(expr, mode="eval")
    except SyntaxError:
        return set()
    return {node.id for node in ast.walk(tree) if isinstance(node, ast.Name)}


def shape_names(shape: TypeShape) -> set[str]:
    """Identifiers referenced by the field types of a shape."""
    names: set[str] = set()
    payloads = [v.payload for v in shape.variants] if isinstance(shape, UnionShape) else [shape]
    for payload in payloads:
        for f in payload.fields:
            names |= expression_names(f.type_ref.expr)
    return names


def declaration_names(decl: TypeDecl) -> set[str]:
    """Every name a declaration's generated code relies on."""
    return {decl.name, *decl.bindings, *(p.name for p in decl.generics), *shape_names(decl.shape)}
