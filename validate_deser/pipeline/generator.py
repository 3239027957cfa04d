"""
Pipeline generator for validated decoders.

Orchestrates the phases for one annotated class:
1. Extract the declaration's shape and generic parameters
2. Synthesize the staging declaration
3. Synthesize the staging -> real conversion
4. Wire decode, conversion and validation with the propagated bounds
5. Render the operation as Python source
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .backends import PythonBackend
from .config import GeneratorConfig
from .orchestrator import Orchestrator
from .shape import DecodeOperation, ShapeExtractor
from .synthesis import ConversionSynthesizer, StagingSynthesizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedUnit:
    """The wired operation of one declaration and its rendered body."""

    operation: DecodeOperation
    body: str

    @property
    def name(self) -> str:
        return self.operation.decl.name


class PipelineGenerator:
    """Generates validated decoders for annotated classes."""

    def __init__(self, config: GeneratorConfig | None = None):
        """
        Initialize the generator.

        Args:
            config: Code generation configuration
        """
        self.config = config or GeneratorConfig()
        self.extractor = ShapeExtractor(self.config)
        self.staging_synthesizer = StagingSynthesizer(self.config)
        self.conversion_synthesizer = ConversionSynthesizer(self.config)
        self.orchestrator = Orchestrator(self.config)
        self.backend = PythonBackend(self.config)

    def generate(self, cls: type, reserved: Iterable[str] = ()) -> GeneratedUnit:
        """
        Run every phase for ``cls``.

        Args:
            cls: The annotated class
            reserved: Names visible where the generated code will run

        Returns:
            The generated unit

        Raises:
            UnsupportedShapeError: If ``cls`` is not a supported shape
            ExhaustivenessError: If the conversion does not cover the shape
        """
        taken = set(reserved) | self.backend.reserved_names()

        # Phase 1: Extract
        decl = self.extractor.extract(cls)

        # Phase 2: Staging declaration
        staging = self.staging_synthesizer.synthesize(decl, taken)

        # Phase 3: Conversion
        conversion = self.conversion_synthesizer.build(decl, staging, taken)

        # Phase 4: Wiring
        operation = self.orchestrator.wire(decl, staging, conversion, taken)

        # Phase 5: Render
        body = self.backend.render_body(operation)
        logger.debug("Generated %d line(s) for %s", body.count("\n"), decl.qualname)

        return GeneratedUnit(operation=operation, body=body)

    def render_module(self, units: Sequence[GeneratedUnit], generation_comment: str = "") -> str:
        """
        Render several units as one module sharing a single import prefix.

        Args:
            units: Generated units, in output order
            generation_comment: Optional comment placed first

        Returns:
            Module source
        """
        parts = [self.backend.render_prefix(generation_comment)]
        parts.extend(unit.body for unit in units)
        return "\n\n".join(part.rstrip("\n") + "\n" for part in parts)
