"""String transformations applied to the converter's HTML.

Both passes are plain substring rewrites, the same as the ``sed`` pipeline
they replace:

  - a stylesheet ``<link>`` goes in front of every ``</head>``
  - one external URL prefix is deleted wherever it occurs

Running ``process_html`` on its own output changes nothing.
"""

from __future__ import annotations

import html
from dataclasses import dataclass

HEAD_CLOSE = "</head>"


@dataclass(frozen=True)
class PostprocessResult:
    html: str
    stylesheet_injections: int
    prefix_removals: int


def stylesheet_link(href: str) -> str:
    """Return the ``<link>`` tag for *href*."""
    return (
        '<link rel="stylesheet" type="text/css" '
        f'href="{html.escape(href, quote=True)}">'
    )


def inject_stylesheet(text: str, href: str) -> tuple[str, int]:
    """Insert the stylesheet link immediately before each ``</head>``.

    A ``</head>`` already preceded by the same link is left alone.
    Returns the new text and the number of links inserted.
    """
    link = stylesheet_link(href)
    parts = text.split(HEAD_CLOSE)
    if len(parts) == 1:
        return text, 0

    count = 0
    out: list[str] = []
    for part in parts[:-1]:
        if part.endswith(link):
            out.append(part)
        else:
            out.append(part + link)
            count += 1
    out.append(parts[-1])
    return HEAD_CLOSE.join(out), count


def strip_url_prefix(text: str, prefix: str) -> tuple[str, int]:
    """Delete every occurrence of *prefix*; empty prefix is a no-op."""
    if not prefix:
        return text, 0
    count = 0
    # Removal can splice a new occurrence together, e.g. "hthttp://"
    while prefix in text:
        count += text.count(prefix)
        text = text.replace(prefix, "")
    return text, count


def process_html(text: str, *, stylesheet: str, strip_prefix: str) -> PostprocessResult:
    # The injected href must not reintroduce the prefix.
    href, _ = strip_url_prefix(stylesheet, strip_prefix)
    text, removed = strip_url_prefix(text, strip_prefix)
    text, injected = inject_stylesheet(text, href)
    return PostprocessResult(
        html=text,
        stylesheet_injections=injected,
        prefix_removals=removed,
    )
