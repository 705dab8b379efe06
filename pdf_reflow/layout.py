"""Layout reconstruction: glyph runs to line-broken page text."""

from typing import Iterable, Optional

from .extraction import GlyphRun


def reconstruct_page_text(
    runs: Iterable[GlyphRun],
    baseline_tolerance: float = 0.0,
    paragraph_gap: Optional[float] = None,
) -> str:
    """Join glyph runs into lines using baseline continuity.

    Runs are taken in extraction order and are not re-sorted. A run whose
    baseline matches the current one is appended with no separator, since
    extracted fragments already carry their own spacing. Any other baseline
    starts a new line.

    Args:
        runs: Glyph runs of one page, in extraction order.
        baseline_tolerance: Largest baseline difference still treated as
            the same line. Zero means exact equality.
        paragraph_gap: When set, a baseline jump larger than this multiple
            of the previous run's height is emitted as a blank line.

    Returns:
        str: The page text with one line break per baseline change.
    """
    parts = []
    baseline = None
    last_height = 0.0
    for run in runs:
        if baseline is None:
            baseline = run.baseline_y
        elif abs(run.baseline_y - baseline) > baseline_tolerance:
            gap = abs(run.baseline_y - baseline)
            if paragraph_gap is not None and last_height > 0 and gap > paragraph_gap * last_height:
                parts.append("\n\n")
            else:
                parts.append("\n")
            baseline = run.baseline_y
        parts.append(run.text)
        last_height = run.height
    return "".join(parts)


def needs_page_markers(page_count: int) -> bool:
    return page_count > 1


def page_marker(page_number: int) -> str:
    """Heading marker emitted before a page of a multi-page document."""
    return f"## Page {page_number}"
