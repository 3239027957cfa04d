"""
Exceptions raised while generating validated decoders.

Run-time decode failures are not defined here: both malformed input and
values rejected by ``validate()`` surface as :data:`DecodeError`, the error
type of the decode capability.
"""

from __future__ import annotations

from pydantic import ValidationError

DecodeError = ValidationError


class GenerationError(Exception):
    """Raised when a validated decoder cannot be generated for a declaration."""

    pass


class UnsupportedShapeError(GenerationError):
    """Raised when a declaration is not a named, positional, unit or tagged-union shape."""

    def __init__(self, declaration: str, reason: str):
        self.declaration = declaration
        self.reason = reason
        super().__init__(f"Unsupported shape for {declaration}: {reason}")


class ExhaustivenessError(GenerationError):
    """Raised when fields or variants are not covered exactly once.

    This can happen when:
    - A conversion misses a field or binds one twice
    - A union gains or loses a variant after its decoder was generated
    """

    pass


class UnsatisfiedBoundError(GenerationError):
    """Raised when a type argument does not satisfy the propagated bound set."""

    def __init__(self, declaration: str, param: str, argument: object, requirement: str):
        self.declaration = declaration
        self.param = param
        self.argument = argument
        self.requirement = requirement
        super().__init__(f"{declaration}: argument {argument!r} for {param} {requirement}")
