"""
Reflow pipeline.

Runs the four stages (layout reconstruction, link matching, text
normalization, Markdown assembly) over a document. The first three stages
only see one page, so pages are converted concurrently and joined back by
page index before assembly. Nothing is assembled until every page is done.

Failure policy:
    - A document that cannot be opened always aborts the conversion.
    - A failing page aborts the conversion and cancels pages not yet
      started, unless best-effort mode is enabled; then the page is
      replaced by an "unavailable" note and the others continue.
    - PlaceholderLeak is a normalizer defect and is never absorbed.
"""

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .errors import ExtractionFailed, PlaceholderLeak, ReflowError, StageFailed
from .extraction import GlyphRun, LinkAnnotation, PdfSource
from .layout import needs_page_markers, page_marker, reconstruct_page_text
from .links import DEFAULT_TOLERANCE, apply_link_annotations
from .markdown import PageBlock, assemble_markdown, unavailable_page
from .normalize import DEFAULT_RESPACING_RULES, RespacingRule, normalize_text

logger = logging.getLogger(__name__)


@dataclass
class ReflowConfig:
    """Parameters of one conversion.

    Attributes:
        link_tolerance: Margin added around link rectangles when matching text
        baseline_tolerance: Largest baseline difference treated as one line
        paragraph_gap: Baseline jump, in multiples of the line height, that
            marks a paragraph boundary; None disables the cue
        best_effort: Replace failed pages with a note instead of aborting
        max_workers: Number of pages converted concurrently
        wrap_width: Optional column width for prose paragraphs
        respacing_rules: Rules used by the re-spacing stage
    """
    link_tolerance: float = DEFAULT_TOLERANCE
    baseline_tolerance: float = 0.0
    paragraph_gap: Optional[float] = 1.8
    best_effort: bool = False
    max_workers: int = 4
    wrap_width: Optional[int] = None
    respacing_rules: Tuple[RespacingRule, ...] = DEFAULT_RESPACING_RULES


def convert_page(
    runs: Sequence[GlyphRun],
    annotations: Sequence[LinkAnnotation],
    page_number: int,
    page_count: int,
    config: ReflowConfig,
) -> PageBlock:
    """Run layout, link matching and normalization for one page."""
    stage = "layout"
    try:
        text = reconstruct_page_text(runs, config.baseline_tolerance, config.paragraph_gap)
        stage = "links"
        text = apply_link_annotations(text, runs, annotations, config.link_tolerance)
        stage = "normalize"
        text = normalize_text(text, config.respacing_rules)
    except PlaceholderLeak:
        raise
    except Exception as e:
        raise StageFailed(stage, "Page conversion failed", page=page_number, cause=e) from e

    marker = page_marker(page_number) if needs_page_markers(page_count) else None
    return PageBlock(page_number=page_number, text=text, marker=marker)


def _read_page(source, page_index: int) -> Tuple[List[GlyphRun], List[LinkAnnotation]]:
    try:
        return list(source.glyph_runs(page_index)), list(source.link_annotations(page_index))
    except ReflowError:
        raise
    except Exception as e:
        raise ExtractionFailed("Cannot read page", page=page_index + 1, cause=e) from e


def _process_page(source, page_index: int, page_count: int, config: ReflowConfig) -> PageBlock:
    runs, annotations = _read_page(source, page_index)
    logger.debug(
        "Page %d: %d glyph run(s), %d link(s)", page_index + 1, len(runs), len(annotations)
    )
    return convert_page(runs, annotations, page_index + 1, page_count, config)


def convert_pages(source, filename: str, config: Optional[ReflowConfig] = None) -> str:
    """Convert every page of a source and assemble the Markdown document.

    Args:
        source: Any object with ``page_count``, ``glyph_runs(i)`` and
            ``link_annotations(i)``, such as a PdfSource.
        filename: Original file name, used for the title.
        config: Conversion parameters; defaults to ReflowConfig().

    Returns:
        str: The Markdown document.

    Raises:
        StageFailed: When a page fails and best-effort mode is off, or when
            the document itself cannot be read.
        PlaceholderLeak: On a normalizer defect.
    """
    if config is None:
        config = ReflowConfig()
    try:
        page_count = source.page_count
    except ReflowError:
        raise
    except Exception as e:
        raise ExtractionFailed("Cannot count pages", cause=e) from e
    logger.info("Detected %d page(s) in %s", page_count, filename)

    blocks: List[Optional[PageBlock]] = [None] * page_count
    with ThreadPoolExecutor(max_workers=max(1, config.max_workers)) as executor:
        futures = {
            executor.submit(_process_page, source, i, page_count, config): i
            for i in range(page_count)
        }
        try:
            for future in as_completed(futures):
                index = futures[future]
                try:
                    blocks[index] = future.result()
                except StageFailed as e:
                    if not config.best_effort:
                        raise
                    logger.warning("Skipping page %d of %s: %s", index + 1, filename, e)
                    marker = page_marker(index + 1) if needs_page_markers(page_count) else None
                    blocks[index] = unavailable_page(index + 1, f"{e.stage} stage failed", marker)
        except BaseException:
            for future in futures:
                future.cancel()
            raise

    unavailable = [block.page_number for block in blocks if block.failed]
    if unavailable:
        logger.warning(
            "%s: %d page(s) unavailable: %s",
            filename, len(unavailable), ", ".join(map(str, unavailable)),
        )

    try:
        return assemble_markdown(filename, blocks, config.wrap_width)
    except Exception as e:
        raise StageFailed("assemble", "Cannot assemble document", cause=e) from e


def pdf_to_markdown(data: bytes, filename: str, config: Optional[ReflowConfig] = None) -> str:
    """Convert a PDF byte stream to Markdown.

    Args:
        data: The raw PDF bytes.
        filename: Original file name, used only for the title line.
        config: Conversion parameters; defaults to ReflowConfig().

    Returns:
        str: The Markdown document.

    Raises:
        ExtractionFailed: If the document cannot be parsed.
        StageFailed: If a page fails and best-effort mode is off.
    """
    logger.info("Converting PDF: %s", filename)
    with PdfSource(data, filename) as source:
        markdown = convert_pages(source, filename, config)
    logger.info("Successfully converted %s to Markdown", filename)
    return markdown


async def pdf_to_markdown_async(
    data: bytes, filename: str, config: Optional[ReflowConfig] = None
) -> str:
    """Awaitable pdf_to_markdown; the conversion runs in a worker thread."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None, functools.partial(pdf_to_markdown, data, filename, config)
    )
