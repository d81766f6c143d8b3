"""Builder — runs the converter, post-processes, writes the deck."""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
import time
from pathlib import Path

from slide_build.contracts.load import validate_instance
from slide_build.core.config import BuildConfig
from slide_build.core.converter import converter_argv, run_converter
from slide_build.core.postprocess import process_html
from slide_build.errors import ConfigError, ConversionError, SourceNotFoundError
from slide_build.model.build_result import BuildResult

_logger = logging.getLogger(__name__)


def _write_atomic(path: Path, data: bytes) -> None:
    """Write *data* to *path* via a sibling temp file and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def build_deck(
    config: BuildConfig,
    *,
    # Testing hooks for byte-stable reports
    _build_id: str | None = None,
    _created_at: str | None = None,
) -> BuildResult:
    """Build ``config.output`` from ``config.source``.

    This is the **only** entry point that wires converter → post-process →
    output.  On any failure no output file is written and the intermediate
    file is removed unless ``keep_intermediate`` is set.
    """
    started = time.perf_counter()
    source = config.source
    if not source.is_file():
        raise SourceNotFoundError(source)

    # ── 1. run the converter into the intermediate file ─────────────
    intermediate = config.intermediate
    # The intermediate is deleted after the build; it must not alias a kept file.
    for name, path in (("source", source), ("output", config.output)):
        if intermediate.resolve() == path.resolve():
            raise ConfigError(f"intermediate must differ from {name}: {intermediate}")
    intermediate.parent.mkdir(parents=True, exist_ok=True)
    # A stale file would mask a converter that writes nothing.
    intermediate.unlink(missing_ok=True)

    timeout = config.converter_timeout or None
    _logger.info("converting %s -> %s", source, intermediate)
    try:
        run_converter(config.converter, source, intermediate, timeout=timeout)

        # ── 2. post-process ─────────────────────────────────────────
        try:
            raw = intermediate.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise ConversionError(f"converter output is not UTF-8: {e}") from e
        processed = process_html(
            raw,
            stylesheet=config.stylesheet,
            strip_prefix=config.strip_prefix,
        )
        if processed.stylesheet_injections == 0 and "</head>" not in raw:
            _logger.warning(
                "no </head> in converter output; stylesheet %s not linked",
                config.stylesheet,
            )
        _logger.debug(
            "injected %d stylesheet link(s), removed %d prefix occurrence(s)",
            processed.stylesheet_injections,
            processed.prefix_removals,
        )

        # ── 3. write the output ─────────────────────────────────────
        data = processed.html.encode("utf-8")
        _write_atomic(config.output, data)
        _logger.info("wrote %s (%d bytes)", config.output, len(data))
    finally:
        if not config.keep_intermediate:
            intermediate.unlink(missing_ok=True)

    # ── 4. assemble BuildResult ─────────────────────────────────────
    result = BuildResult(
        config=config.to_dict(),
        source=source,
        output=config.output,
        intermediate=intermediate if config.keep_intermediate else None,
        converter_argv=converter_argv(config.converter, source, intermediate),
        stylesheet_injections=processed.stylesheet_injections,
        prefix_removals=processed.prefix_removals,
        output_sha256=hashlib.sha256(data).hexdigest(),
        output_bytes=len(data),
        elapsed_seconds=time.perf_counter() - started,
    )
    if _build_id is not None:
        result.build_id = _build_id
    if _created_at is not None:
        result.created_at = _created_at

    # ── 5. validate report against schema ───────────────────────────
    validate_instance(result.to_dict(), "build_report.schema.json")
    return result
