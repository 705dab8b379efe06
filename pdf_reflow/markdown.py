"""Markdown assembly: title, caption and per-page paragraphs."""

import re
import textwrap
from dataclasses import dataclass
from pathlib import PurePath
from typing import List, Optional, Sequence

LIST_ITEM_RE = re.compile(r"^(?:[-•◦▪‣⁃*]|\d+[.)])\s")
PARAGRAPH_SPLIT_RE = re.compile(r"\n{2,}")


@dataclass(frozen=True)
class PageBlock:
    """Normalized text of one page, ready for assembly.

    Attributes:
        page_number: 1-based page number
        text: Normalized page text, paragraphs separated by blank lines
        marker: Page heading, or None for a single-page document
        failed: True when the page was replaced by an "unavailable" note
    """
    page_number: int
    text: str
    marker: Optional[str] = None
    failed: bool = False

    def render(self, wrap_width: Optional[int] = None) -> str:
        """The page as Markdown: its marker, if any, then its paragraphs."""
        parts = [self.marker] if self.marker is not None else []
        parts.extend(format_paragraph(p, wrap_width) for p in split_paragraphs(self.text))
        return "\n\n".join(parts)


def unavailable_page(page_number: int, reason: str, marker: Optional[str]) -> PageBlock:
    return PageBlock(
        page_number=page_number,
        text=f"*Page {page_number} unavailable: {reason}*",
        marker=marker,
        failed=True,
    )


def title_lines(filename: str) -> List[str]:
    """Title heading and provenance caption derived from the source name."""
    name = PurePath(filename).name
    stem = PurePath(filename).stem or name
    return [f"# {stem}", "", f"*Converted from PDF: {name}*", ""]


def is_list_item(paragraph: str) -> bool:
    return bool(LIST_ITEM_RE.match(paragraph))


def split_paragraphs(text: str) -> List[str]:
    return [p.strip() for p in PARAGRAPH_SPLIT_RE.split(text) if p.strip()]


def format_paragraph(paragraph: str, wrap_width: Optional[int] = None) -> str:
    """Reflow a prose paragraph onto one line; keep list items verbatim."""
    if is_list_item(paragraph):
        return paragraph
    flowed = " ".join(paragraph.split())
    if wrap_width:
        return textwrap.fill(flowed, width=wrap_width, break_long_words=False,
                             break_on_hyphens=False)
    return flowed


def assemble_markdown(
    filename: str,
    blocks: Sequence[PageBlock],
    wrap_width: Optional[int] = None,
) -> str:
    """Join page blocks, in order, into the final Markdown document.

    Args:
        filename: Original file name, used for the title and caption.
        blocks: One block per page, already sorted by page number.
        wrap_width: Optional column width for prose paragraphs.

    Returns:
        str: The Markdown document, ending with a single newline.
    """
    parts = ["\n".join(title_lines(filename)).rstrip("\n")]
    for block in blocks:
        rendered = block.render(wrap_width)
        if rendered:
            parts.append(rendered)
    return "\n\n".join(parts) + "\n"
