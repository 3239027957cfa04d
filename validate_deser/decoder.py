"""
Run-time decoder attached to every validated class.

The generated source is executed once, on first use, in a namespace built
from the declaring scope. Each instantiation of a generic declaration is
checked against the propagated bound set and gets its own cached
``TypeAdapter``; the generated code itself is shared by all of them.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence
from typing import Annotated, Any

from pydantic import GetCoreSchemaHandler, PydanticSchemaGenerationError, TypeAdapter
from pydantic_core import core_schema

from .pipeline.bounds import check_bounds
from .pipeline.generator import GeneratedUnit, PipelineGenerator
from .pipeline.shape import DecodeOperation, ShapeKind
from .pipeline.synthesis import verify_coverage
from .runtime import ValidatedAlias, payload_schema, staged

logger = logging.getLogger(__name__)


def is_decodable(tp: Any) -> bool:
    """True if the decode capability can build a schema for ``tp``."""
    try:
        TypeAdapter(staged(tp))
    except PydanticSchemaGenerationError as e:
        logger.debug("%r is not decodable: %s", tp, e)
        return False
    return True


class ValidatedDecoder:
    """decode -> convert -> validate for one declaration and all its instantiations."""

    def __init__(
        self,
        cls: type,
        generator: PipelineGenerator,
        unit: GeneratedUnit,
        globalns: Mapping[str, Any],
        localns: Mapping[str, Any] | None = None,
    ):
        self.cls = cls
        self.generator = generator
        self.unit = unit
        self._globalns = globalns
        self._localns = localns if localns is not None and localns is not globalns else {}

        self._lock = threading.RLock()
        self._namespace: dict[str, Any] | None = None
        self._adapters: dict[tuple, TypeAdapter] = {}

    @property
    def operation(self) -> DecodeOperation:
        return self.unit.operation

    @property
    def source(self) -> str:
        """The complete generated module."""
        return self.generator.render_module([self.unit])

    def materialize(self) -> dict[str, Any]:
        """Execute the generated code, once.

        Raises:
            ExhaustivenessError: If the variants of a union changed since generation
        """
        with self._lock:
            if self._namespace is None:
                self._namespace = self._execute()
            return self._namespace

    def _execute(self) -> dict[str, Any]:
        operation = self.operation
        if operation.decl.shape.kind == ShapeKind.UNION:
            current = self.generator.extractor.extract(self.cls)
            verify_coverage(operation.conversion, current.shape)

        namespace = dict(self._globalns)
        namespace.update(self._localns)
        namespace.update(operation.decl.bindings)
        namespace[operation.decl.name] = self.cls
        namespace["__name__"] = self.cls.__module__

        code = compile(self.source, f"<validated decoder of {operation.decl.qualname}>", "exec")
        exec(code, namespace)
        logger.debug("Materialized %s for %s", operation.staging.name, operation.decl.qualname)
        return namespace

    @property
    def staging_type(self) -> type:
        return self.materialize()[self.operation.staging.name]

    def finish(self, staging: Any) -> Any:
        """Convert a staging value and validate the result."""
        return self.materialize()[self.operation.finish_name](staging)

    def check(self, arguments: Sequence[Any]) -> None:
        """Check the arguments of one instantiation against the bound set.

        Raises:
            UnsatisfiedBoundError: If an argument violates a bound
        """
        decl = self.operation.decl
        check_bounds(decl.qualname, decl.generics, self.operation.bounds, arguments, is_decodable)

    def core_schema(self, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        """Pydantic core schema of ``source`` (the class or one of its parametrizations)."""
        arguments = getattr(source, "__args__", ()) if source is not self.cls else ()
        staging = self.staging_type
        if arguments:
            self.check(arguments)
            staging = staging[tuple(staged(a) for a in arguments)]
        return core_schema.no_info_after_validator_function(self.finish, payload_schema(staging, handler))

    def adapter(self, arguments: tuple = ()) -> TypeAdapter:
        """Cached ``TypeAdapter`` of one instantiation."""
        with self._lock:
            adapter = self._adapters.get(arguments)
            if adapter is None:
                tp = self.cls[arguments] if arguments else self.cls
                adapter = TypeAdapter(Annotated[tp, ValidatedAlias()])
                self._adapters[arguments] = adapter
            return adapter

    def decode(self, source: Any, arguments: tuple = ()) -> Any:
        """
        Decode ``source`` into a validated value.

        ``str``, ``bytes`` and ``bytearray`` are JSON text, decoded strictly:
        no string-to-number or float-to-int coercion. Anything else is a
        Python value such as a parsed JSON document, decoded with pydantic's
        lax conversions.

        Raises:
            DecodeError: If the input is malformed or the value is invalid
        """
        adapter = self.adapter(arguments)
        if isinstance(source, (str, bytes, bytearray)):
            return adapter.validate_json(source, strict=True)
        return adapter.validate_python(source)
