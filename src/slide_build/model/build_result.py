"""BuildResult — the schema-aligned record of one deck build."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from slide_build import __version__


@dataclass(slots=True)
class BuildResult:
    """Assembled build record matching ``build_report.schema.json``.

    Constructed by ``core.builder`` once the output file is in place.
    """

    # ── run metadata ────────────────────────────────────────────────
    build_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
    )
    tool_version: str = __version__

    config: dict = field(default_factory=dict)

    # ── paths ───────────────────────────────────────────────────────
    source: Path = Path("talk.md")
    output: Path = Path("talk.html")
    intermediate: Path | None = None
    converter_argv: list[str] = field(default_factory=list)

    # ── post-processing ─────────────────────────────────────────────
    stylesheet_injections: int = 0
    prefix_removals: int = 0
    output_sha256: str = ""
    output_bytes: int = 0
    elapsed_seconds: float = 0.0

    # ── serialisation ───────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Produce the build report JSON matching the schema."""
        return {
            "schema_version": "build_report_v1",
            "run": {
                "build_id": self.build_id,
                "created_at": self.created_at,
                "tool_version": self.tool_version,
                "elapsed_seconds": self.elapsed_seconds,
            },
            "config": self.config,
            "artifacts": {
                "source": self.source.as_posix(),
                "output": self.output.as_posix(),
                "intermediate": (
                    self.intermediate.as_posix() if self.intermediate else None
                ),
                "output_sha256": self.output_sha256,
                "output_bytes": self.output_bytes,
            },
            "converter": {"argv": list(self.converter_argv)},
            "postprocess": {
                "stylesheet_injections": self.stylesheet_injections,
                "prefix_removals": self.prefix_removals,
            },
        }
