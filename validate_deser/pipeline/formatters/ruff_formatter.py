"""
Ruff formatter for expanded code.
"""

from __future__ import annotations

import logging
import subprocess

from ..config import FormatterConfig
from .base import Formatter

logger = logging.getLogger(__name__)


class RuffFormatter(Formatter):
    """Formatter piping code through ``ruff format``."""

    def __init__(self, executable: str = "ruff"):
        self.executable = executable
        self._available: bool | None = None

    def is_available(self) -> bool:
        """Check if ruff is installed."""
        if self._available is None:
            try:
                result = subprocess.run(
                    [self.executable, "--version"],
                    capture_output=True,
                    text=True,
                    timeout=5,
                )
                self._available = result.returncode == 0
            except (subprocess.SubprocessError, FileNotFoundError):
                self._available = False
        return self._available

    def command(self, config: FormatterConfig) -> list[str]:
        cmd = [self.executable, "format", "--stdin-filename", "expanded.py"]
        if config.line_length:
            cmd.extend(["--line-length", str(config.line_length)])
        if config.target_version:
            cmd.extend(["--target-version", config.target_version])
        return cmd

    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Format Python code using ruff.

        Returns the code unchanged when ruff is missing or rejects it.
        """
        if not self.is_available():
            logger.debug("ruff is not available, leaving code unformatted")
            return code

        try:
            result = subprocess.run(
                self.command(config),
                input=code,
                capture_output=True,
                text=True,
                timeout=30,
            )
        except subprocess.SubprocessError as e:
            logger.debug("ruff format failed: %s", e)
            return code

        if result.returncode != 0:
            logger.debug("ruff format exited with %d: %s", result.returncode, result.stderr.strip())
            return code
        return result.stdout
