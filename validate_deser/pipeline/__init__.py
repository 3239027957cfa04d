"""
Pipeline - validated decoder generator.

This module turns an annotated class into a validated decode operation in
several phases:

1. Phase 1 (Shape): Classify the declaration and read its generic parameters
2. Phase 2 (Staging): Synthesize the isomorphic staging declaration
3. Phase 3 (Conversion): Synthesize the infallible staging -> real mapping
4. Phase 4 (Orchestrator): Wire decode, convert and validate, propagate bounds
5. Phase 5 (Backend): Render the operation as Python source
6. Phase 6 (Formatter/Writer): Optional formatting and atomic output for the CLI
"""

from __future__ import annotations

from .config import FormatterConfig, GeneratorConfig
from .generator import GeneratedUnit, PipelineGenerator
from .writer import AtomicWriter

__all__ = [
    "PipelineGenerator",
    "GeneratedUnit",
    "GeneratorConfig",
    "FormatterConfig",
    "AtomicWriter",
]
