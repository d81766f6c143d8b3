"""Check a built deck against the output invariants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from slide_build.core.postprocess import HEAD_CLOSE, strip_url_prefix, stylesheet_link


@dataclass(frozen=True)
class Violation:
    rule_id: str
    message: str
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"rule_id": self.rule_id, "message": self.message, "line": self.line}


def _line_of(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1


def verify_deck(text: str, *, stylesheet: str, strip_prefix: str) -> list[Violation]:
    """Return every invariant the deck *text* breaks, in document order.

    Rules:
      DECK-HEAD-001  no ``</head>`` at all
      DECK-CSS-001   a ``</head>`` not immediately preceded by the link
      DECK-URL-001   the stripped URL prefix still occurs
    """
    violations: list[Violation] = []

    href, _ = strip_url_prefix(stylesheet, strip_prefix)
    link = stylesheet_link(href)

    pos = text.find(HEAD_CLOSE)
    if pos < 0:
        violations.append(
            Violation("DECK-HEAD-001", f"no {HEAD_CLOSE} tag found")
        )
    while pos >= 0:
        if not text[:pos].endswith(link):
            violations.append(
                Violation(
                    "DECK-CSS-001",
                    f"stylesheet link for {href!r} is not immediately before {HEAD_CLOSE}",
                    line=_line_of(text, pos),
                )
            )
        pos = text.find(HEAD_CLOSE, pos + len(HEAD_CLOSE))

    if strip_prefix:
        pos = text.find(strip_prefix)
        while pos >= 0:
            violations.append(
                Violation(
                    "DECK-URL-001",
                    f"external URL prefix {strip_prefix!r} still present",
                    line=_line_of(text, pos),
                )
            )
            pos = text.find(strip_prefix, pos + 1)

    violations.sort(key=lambda v: (v.line or 0, v.rule_id))
    return violations
