"""
PDF reflow module.

Converts positioned PDF text and link annotations into flowing Markdown:
lines rebuilt from baselines, links inlined, wrapped text reflowed into
paragraphs.
"""

__version__ = "0.1.0"

from .errors import (
    ReflowError,
    StageFailed,
    ExtractionFailed,
    PlaceholderLeak,
    Result,
)

from .extraction import (
    GlyphRun,
    LinkAnnotation,
    PdfSource,
)

from .layout import reconstruct_page_text

from .links import apply_link_annotations

from .normalize import (
    RespacingRule,
    DEFAULT_RESPACING_RULES,
    ROMANIAN_RESPACING_RULES,
    normalize_text,
)

from .markdown import PageBlock, assemble_markdown

from .pipeline import (
    ReflowConfig,
    convert_page,
    convert_pages,
    pdf_to_markdown,
    pdf_to_markdown_async,
)

__all__ = [
    'ReflowError',
    'StageFailed',
    'ExtractionFailed',
    'PlaceholderLeak',
    'Result',
    'GlyphRun',
    'LinkAnnotation',
    'PdfSource',
    'reconstruct_page_text',
    'apply_link_annotations',
    'RespacingRule',
    'DEFAULT_RESPACING_RULES',
    'ROMANIAN_RESPACING_RULES',
    'normalize_text',
    'PageBlock',
    'assemble_markdown',
    'ReflowConfig',
    'convert_page',
    'convert_pages',
    'pdf_to_markdown',
    'pdf_to_markdown_async',
]
