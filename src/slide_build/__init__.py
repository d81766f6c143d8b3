"""slide_build — turn a Markdown talk into a self-contained HTML slide deck."""

__all__ = [
    "__version__",
    "BuildConfig",
    "BuildResult",
    "build_deck",
    "verify_deck",
]
__version__ = "0.1.0"

from slide_build.core.builder import build_deck  # noqa: E402, F401
from slide_build.core.config import BuildConfig  # noqa: E402, F401
from slide_build.core.verify import verify_deck  # noqa: E402, F401
from slide_build.model.build_result import BuildResult  # noqa: E402, F401
