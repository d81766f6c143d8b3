"""Run the external Markdown-to-slides converter as a subprocess."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Sequence

from slide_build.errors import ConversionError, ConverterNotFoundError

logger = logging.getLogger(__name__)


def converter_argv(
    converter: Sequence[str], source: Path, destination: Path
) -> list[str]:
    """``markdown-to-slides <source> -o <destination>``"""
    return [*converter, str(source), "-o", str(destination)]


def run_converter(
    converter: Sequence[str],
    source: Path,
    destination: Path,
    *,
    timeout: float | None = None,
) -> subprocess.CompletedProcess[str]:
    """Invoke *converter* to turn *source* into *destination*.

    Raises ``ConverterNotFoundError`` when the program is not on PATH and
    ``ConversionError`` on a nonzero exit, a timeout, or a missing
    destination file.
    """
    if not converter:
        raise ConverterNotFoundError("")
    program = converter[0]
    if shutil.which(program) is None:
        raise ConverterNotFoundError(program)

    cmd = converter_argv(converter, source, destination)
    logger.debug("running converter: %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout or None,
        )
    except FileNotFoundError as e:
        raise ConverterNotFoundError(program) from e
    except subprocess.TimeoutExpired as e:
        raise ConversionError(
            f"converter timed out after {timeout:g}s",
            stderr=_as_text(e.stderr),
        ) from e

    if proc.returncode != 0:
        raise ConversionError(
            f"converter exited with status {proc.returncode}",
            returncode=proc.returncode,
            stderr=proc.stderr,
        )
    if not destination.is_file():
        raise ConversionError(
            f"converter did not write {destination}",
            returncode=proc.returncode,
            stderr=proc.stderr,
        )
    if proc.stderr:
        logger.info("converter stderr: %s", proc.stderr.strip())
    return proc


def _as_text(data: str | bytes | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
