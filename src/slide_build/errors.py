"""Exception hierarchy for deck builds.

Every failure the CLI maps to ``ExitCode.ERROR`` derives from
``SlideBuildError``.
"""

from __future__ import annotations

from pathlib import Path


class SlideBuildError(Exception):
    """Base class for build failures."""


class ConfigError(SlideBuildError):
    """Invalid or unreadable build configuration."""


class SourceNotFoundError(SlideBuildError):
    """The Markdown source does not exist or is not a regular file."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"source file does not exist: {path}")
        self.path = path


class ConverterNotFoundError(SlideBuildError):
    """The external converter is not on PATH."""

    def __init__(self, program: str) -> None:
        super().__init__(f"converter not found on PATH: {program}")
        self.program = program


class ConversionError(SlideBuildError):
    """The converter ran but did not produce usable output."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
