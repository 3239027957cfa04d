"""
Configuration for the validated-decoder generator.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class FormatterConfig:
    """Configuration for post-processing formatters."""

    # Whether formatting is enabled
    enabled: bool = False

    # Line length for the formatter
    line_length: int = 100

    # Python version target (e.g., "py312", "py313")
    target_version: str = "py312"


@dataclass
class GeneratorConfig:
    """Configuration options for code generation."""

    # Prefix of the staging declaration name (original name appended)
    staging_prefix: str = "__ValidDeserialize"

    # Field names of staged positional records: field_0, field_1, ...
    positional_field_prefix: str = "field_"

    # Capture names of positional variant fields in conversion arms
    placeholder_prefix: str = "value_"

    # Prefix of generated helper functions and type aliases
    internal_prefix: str = "_vd_"

    # Add generation comment at top of rendered code
    add_generation_comment: bool = True

    # Formatter configuration for expanded output
    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if k == "formatter" and isinstance(v, dict):
                config.formatter = FormatterConfig(**v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "staging_prefix": self.staging_prefix,
            "positional_field_prefix": self.positional_field_prefix,
            "placeholder_prefix": self.placeholder_prefix,
            "internal_prefix": self.internal_prefix,
            "add_generation_comment": self.add_generation_comment,
            "formatter": {
                "enabled": self.formatter.enabled,
                "line_length": self.formatter.line_length,
                "target_version": self.formatter.target_version,
            },
        }
