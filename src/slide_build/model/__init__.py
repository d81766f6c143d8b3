"""Result types produced by a deck build."""

from slide_build.model.build_result import BuildResult

__all__ = ["BuildResult"]
