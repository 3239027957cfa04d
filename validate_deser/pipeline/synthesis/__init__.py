"""
Synthesis module.

Contains the staging-type and conversion synthesizers.
"""

from __future__ import annotations

from .conversion import ConversionSynthesizer, verify_coverage
from .naming import fresh_name
from .staging import StagingSynthesizer

__all__ = [
    "ConversionSynthesizer",
    "StagingSynthesizer",
    "fresh_name",
    "verify_coverage",
]
