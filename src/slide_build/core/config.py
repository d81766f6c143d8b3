"""Build configuration dataclass and YAML loading."""

from __future__ import annotations

import dataclasses
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from slide_build.errors import ConfigError

DEFAULT_CONFIG_NAME = "slide_build.yaml"

# CDN prefix the converter writes in front of its script/style assets.
# Stripping it leaves relative references next to the built deck.
DEFAULT_STRIP_PREFIX = "https://remarkjs.com/downloads/"


@dataclass(frozen=True)
class BuildConfig:
    """Immutable build configuration.

    Defaults reproduce the historical ``build.sh``: ``talk.md`` in,
    ``talk.html`` out, ``style.css`` linked.
    """

    source: Path = Path("talk.md")
    output: Path = Path("talk.html")
    intermediate: Path = Path("talk-tmp.html")
    stylesheet: str = "style.css"
    strip_prefix: str = DEFAULT_STRIP_PREFIX
    converter: tuple[str, ...] = ("markdown-to-slides",)
    converter_timeout: float = 120.0  # seconds, 0 = no limit
    keep_intermediate: bool = False

    @classmethod
    def from_mapping(
        cls, data: dict[str, Any], *, base_dir: Path | None = None
    ) -> "BuildConfig":
        """Build a config from a plain mapping (e.g. parsed YAML).

        Relative paths are resolved against *base_dir* when given.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown config key(s): {', '.join(unknown)}")
        return cls().with_overrides(base_dir=base_dir, **data)

    @classmethod
    def from_yaml(cls, path: Path) -> "BuildConfig":
        """Load configuration from a YAML file."""
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"cannot read config {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: top level must be a mapping")
        return cls.from_mapping(data, base_dir=path.resolve().parent)

    @classmethod
    def discover(cls, cwd: Path) -> "BuildConfig":
        """Use ``slide_build.yaml`` in *cwd* if present, else the defaults."""
        candidate = cwd / DEFAULT_CONFIG_NAME
        if candidate.is_file():
            return cls.from_yaml(candidate)
        return cls()

    def with_overrides(
        self, *, base_dir: Path | None = None, **overrides: Any
    ) -> "BuildConfig":
        """Return a copy with non-``None`` *overrides* applied and coerced."""
        values = {k: v for k, v in overrides.items() if v is not None}
        for key in ("source", "output", "intermediate"):
            if key in values:
                if not isinstance(values[key], (str, os.PathLike)):
                    raise ConfigError(f"{key} must be a path string")
                p = Path(values[key])
                if base_dir is not None and not p.is_absolute():
                    p = base_dir / p
                values[key] = p
        if "converter" in values:
            values["converter"] = _coerce_argv(values["converter"])
        if "converter_timeout" in values:
            try:
                values["converter_timeout"] = float(values["converter_timeout"])
            except (TypeError, ValueError) as e:
                raise ConfigError(
                    f"converter_timeout must be a number, got {values['converter_timeout']!r}"
                ) from e
            if values["converter_timeout"] < 0:
                raise ConfigError("converter_timeout must be >= 0")
        for key in ("stylesheet", "strip_prefix"):
            if key in values and not isinstance(values[key], str):
                raise ConfigError(f"{key} must be a string")
        if "keep_intermediate" in values and not isinstance(
            values["keep_intermediate"], bool
        ):
            raise ConfigError("keep_intermediate must be true or false")
        return dataclasses.replace(self, **values)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.as_posix(),
            "output": self.output.as_posix(),
            "intermediate": self.intermediate.as_posix(),
            "stylesheet": self.stylesheet,
            "strip_prefix": self.strip_prefix,
            "converter": list(self.converter),
            "converter_timeout": self.converter_timeout,
            "keep_intermediate": self.keep_intermediate,
        }


def _coerce_argv(value: Any) -> tuple[str, ...]:
    """Accept either a shell-style command string or a list."""
    if isinstance(value, str):
        argv = tuple(shlex.split(value))
    elif isinstance(value, (list, tuple)):
        argv = tuple(str(v) for v in value)
    else:
        raise ConfigError(f"converter must be a string or list, got {value!r}")
    if not argv:
        raise ConfigError("converter must not be empty")
    return argv
