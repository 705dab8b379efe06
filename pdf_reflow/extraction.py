"""Extraction module: positioned text and link annotations via PyMuPDF."""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

import fitz

from .errors import ExtractionFailed, Result, ValidationError


logger = logging.getLogger(__name__)

Rect = Tuple[float, float, float, float]


@dataclass(frozen=True)
class GlyphRun:
    """A positioned fragment of extracted text.

    Coordinates are PyMuPDF page coordinates (origin top-left, y grows
    downwards), so the run occupies the band just above its baseline.
    """
    text: str
    origin_x: float
    baseline_y: float
    width: float
    height: float
    page_index: int = 0

    @property
    def bbox(self) -> Rect:
        return (
            self.origin_x,
            self.baseline_y - self.height,
            self.origin_x + self.width,
            self.baseline_y,
        )


@dataclass(frozen=True)
class LinkAnnotation:
    """A URI link annotation: its rectangle on the page and its target."""
    rect: Rect
    url: str
    page_index: int = 0

    def __post_init__(self):
        x1, y1, x2, y2 = self.rect
        object.__setattr__(
            self, "rect", (min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2))
        )


def validate_pdf(pdf_path: str) -> Result[Path, ValidationError]:
    """Validate that a path points at a non-empty file with a .pdf suffix.

    The content itself is checked later, when PdfSource opens it.

    Args:
        pdf_path: Path to the PDF file to validate

    Returns:
        Result: On success, Ok(Path) with resolved path
               On failure, Err(ValidationError) with error details
    """
    path = Path(pdf_path)
    if not path.exists():
        return Result.Err(ValidationError(f"PDF file not found: {pdf_path}"))
    if not path.is_file():
        return Result.Err(ValidationError(f"Not a file: {pdf_path}"))
    if path.suffix.lower() != ".pdf":
        return Result.Err(ValidationError(f"Not a PDF file: {pdf_path}"))
    if path.stat().st_size == 0:
        return Result.Err(ValidationError(f"Empty PDF file: {pdf_path}"))
    return Result.Ok(path.resolve())


class PdfSource:
    """Page-wise access to a PDF byte stream.

    Provides the three capabilities the reflow engine needs: the page
    count, the glyph runs of a page and the link annotations of a page.
    PyMuPDF documents are not thread-safe, so every access to the
    underlying document goes through one lock.
    """

    def __init__(self, data: bytes, name: str = "document.pdf"):
        self.name = name
        self._lock = threading.Lock()
        if not data:
            raise ExtractionFailed(f"Empty document stream: {name}")
        try:
            self._doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise ExtractionFailed(f"Cannot open document {name}", cause=e) from e
        if self._doc.needs_pass:
            self._doc.close()
            raise ExtractionFailed(f"Document is encrypted: {name}")
        if self._doc.page_count == 0:
            self._doc.close()
            raise ExtractionFailed(f"Document has no pages: {name}")
        logger.debug("Opened %s with %d page(s)", name, self._doc.page_count)

    def __enter__(self) -> "PdfSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            if not self._doc.is_closed:
                self._doc.close()

    @property
    def page_count(self) -> int:
        with self._lock:
            return self._doc.page_count

    def glyph_runs(self, page_index: int) -> List[GlyphRun]:
        """Return the text spans of one page in extraction order."""
        try:
            with self._lock:
                page = self._doc[page_index]
                return parse_page_runs(page, page_index)
        except Exception as e:
            raise ExtractionFailed(
                "Cannot read page text", page=page_index + 1, cause=e
            ) from e

    def link_annotations(self, page_index: int) -> List[LinkAnnotation]:
        """Return the URI links of one page."""
        try:
            with self._lock:
                page = self._doc[page_index]
                return parse_page_links(page, page_index)
        except Exception as e:
            raise ExtractionFailed(
                "Cannot read page links", page=page_index + 1, cause=e
            ) from e


def parse_page_runs(page: fitz.Page, page_index: int) -> List[GlyphRun]:
    """Extract glyph runs (spans) from a single PDF page."""
    runs = []
    for block in page.get_text("dict")["blocks"]:
        if block.get("type") != 0:  # Not a text block
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                if not text:
                    continue
                x0, y0, x1, y1 = span["bbox"]
                origin_x, baseline_y = span.get("origin", (x0, y1))
                runs.append(GlyphRun(
                    text=text,
                    origin_x=origin_x,
                    baseline_y=baseline_y,
                    width=x1 - x0,
                    height=baseline_y - y0,
                    page_index=page_index,
                ))
    return runs


def parse_page_links(page: fitz.Page, page_index: int) -> List[LinkAnnotation]:
    """Extract URI link annotations from a single PDF page."""
    links = []
    for link in page.get_links():
        uri = link.get("uri")
        if not uri:
            continue
        rect = fitz.Rect(link["from"])
        links.append(LinkAnnotation(
            rect=(rect.x0, rect.y0, rect.x1, rect.y1),
            url=uri,
            page_index=page_index,
        ))
    return links
