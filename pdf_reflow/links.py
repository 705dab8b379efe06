"""Link annotation matching.

Fuses link rectangles with the glyph runs they cover and rewrites the
raw page text so that the covered text becomes an inline Markdown link.

Matching rules:
------------------------------------------
1. A glyph run belongs to a link when its bounding box intersects the
   link rectangle grown by a tolerance margin on all four sides, to
   absorb differences between text metrics and annotation geometry.
2. The visible link text is the trimmed concatenation of the matching
   runs, in extraction order.
3. Only the first occurrence of the visible text on the page is linked.
   Repeated identical text elsewhere on the page stays plain text.
4. A link that cannot be placed is appended as its own line at the end
   of the page instead of being dropped.

This stage must run on raw page text, before normalization, so that the
normalizer sees the inserted link targets and protects them.
"""

import logging
from typing import List, Sequence, Tuple

from .extraction import GlyphRun, LinkAnnotation, Rect

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 10.0
ORPHAN_LINK_TEXT = "Link"


def overlaps(run: GlyphRun, rect: Rect, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """Check whether a run's box intersects a rectangle grown by tolerance."""
    x0, y0, x1, y1 = run.bbox
    rx1, ry1, rx2, ry2 = rect
    return not (
        x0 > rx2 + tolerance
        or x1 < rx1 - tolerance
        or y0 > ry2 + tolerance
        or y1 < ry1 - tolerance
    )


def visible_link_text(
    runs: Sequence[GlyphRun],
    annotation: LinkAnnotation,
    tolerance: float = DEFAULT_TOLERANCE,
) -> str:
    """Return the trimmed text of all runs under a link, or '' if none."""
    return "".join(
        run.text for run in runs if overlaps(run, annotation.rect, tolerance)
    ).strip()


def markdown_link(text: str, url: str) -> str:
    """Format an inline Markdown link, escaping what would break the syntax."""
    label = text.replace("[", "\\[").replace("]", "\\]")
    target = url.replace(" ", "%20").replace("(", "%28").replace(")", "%29")
    return f"[{label}]({target})"


def _find_unlinked(text: str, needle: str, linked: List[Tuple[int, int]]) -> int:
    """First index of needle in text that does not touch an inserted link."""
    start = 0
    while True:
        pos = text.find(needle, start)
        if pos < 0:
            return -1
        end = pos + len(needle)
        if not any(pos < e and s < end for s, e in linked):
            return pos
        start = pos + 1


def apply_link_annotations(
    text: str,
    runs: Sequence[GlyphRun],
    annotations: Sequence[LinkAnnotation],
    tolerance: float = DEFAULT_TOLERANCE,
) -> str:
    """Rewrite raw page text so that linked text becomes Markdown links.

    Args:
        text: Reconstructed (raw, line-broken) text of one page.
        runs: The same page's glyph runs, with coordinates.
        annotations: The page's link annotations, in page order.
        tolerance: Margin added around each link rectangle.

    Returns:
        str: The page text with links inserted and orphan links appended.
    """
    linked: List[Tuple[int, int]] = []
    orphans = []

    for annotation in annotations:
        label = visible_link_text(runs, annotation, tolerance)
        if not label:
            logger.debug("No text under link %s at %s, appending", annotation.url, annotation.rect)
            orphans.append(markdown_link(ORPHAN_LINK_TEXT, annotation.url))
            continue

        pos = _find_unlinked(text, label, linked)
        if pos < 0:
            # Usually a link whose text wraps onto the next line.
            logger.debug("Link text %r not found verbatim, appending", label)
            orphans.append(markdown_link(label, annotation.url))
            continue

        link = markdown_link(label, annotation.url)
        end = pos + len(label)
        shift = len(link) - len(label)
        linked = [(s + shift, e + shift) if s >= end else (s, e) for s, e in linked]
        linked.append((pos, pos + len(link)))
        text = text[:pos] + link + text[end:]
        logger.debug("Linked %r to %s", label, annotation.url)

    if orphans:
        text = "\n\n".join([text] + orphans) if text else "\n\n".join(orphans)
    return text
