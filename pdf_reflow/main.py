"""
PDF Reflow Main Module

File-level entry points and the command-line interface: read PDFs from
disk, convert them with the reflow pipeline and write Markdown files.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .errors import FileError, ReflowError, Result
from .extraction import validate_pdf
from .normalize import DEFAULT_RESPACING_RULES, ROMANIAN_RESPACING_RULES
from .pipeline import ReflowConfig, pdf_to_markdown

__all__ = ["pdf_file_to_markdown_file", "process_pdfs", "parse_args", "main"]

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if debug else logging.INFO

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Set third-party loggers to WARNING to reduce noise
    logging.getLogger("fitz").setLevel(logging.WARNING)


def pdf_file_to_markdown_file(
    input_path: str,
    output_path: Optional[str] = None,
    config: Optional[ReflowConfig] = None,
) -> Result[Path, ReflowError]:
    """Convert one PDF file and save the Markdown next to it.

    Args:
        input_path: Path to the PDF file.
        output_path: Where to write the Markdown (default: input path with
            a .md suffix). Parent directories are created.
        config: Conversion parameters.

    Returns:
        Result: Ok(Path) of the written file, Err otherwise
    """
    pdf_result = validate_pdf(input_path)
    if not pdf_result.is_ok:
        return Result.Err(pdf_result.error)
    pdf_path = pdf_result.value

    out_path = Path(output_path).resolve() if output_path else pdf_path.with_suffix(".md")
    try:
        data = pdf_path.read_bytes()
    except OSError as e:
        return Result.Err(FileError(pdf_path, f"Failed to read PDF ({e})"))

    try:
        markdown = pdf_to_markdown(data, pdf_path.name, config)
    except ReflowError as e:
        logger.error("Failed to convert %s: %s", pdf_path.name, e)
        return Result.Err(e)

    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(markdown, encoding="utf-8")
    except OSError as e:
        return Result.Err(FileError(out_path, f"Failed to save markdown ({e})"))

    logger.info("Saved Markdown to %s", out_path)
    return Result.Ok(out_path)


def process_pdfs(
    input_dir: str,
    input_pattern: str,
    output_dir: Optional[str] = None,
    config: Optional[ReflowConfig] = None,
) -> Result[List[Path], ReflowError]:
    """Convert every PDF in a directory that matches a glob pattern.

    Directory Structure:
        input_dir/
            file1.pdf
            file2.pdf
        output_dir/
            file1.md
            file2.md

    Error Handling:
        - Individual file failures don't stop the batch
        - Errors are collected and reported at the end
        - The batch succeeds if at least one file is converted

    Args:
        input_dir: Directory containing PDF files to process
        input_pattern: Glob pattern to match PDF files (e.g., "*.pdf")
        output_dir: Directory for Markdown files (default: same as input_dir)
        config: Conversion parameters shared by all files

    Returns:
        Result: Ok(List[Path]) of written files, Err(ReflowError) otherwise
    """
    input_path = Path(input_dir).resolve()
    if not input_path.is_dir():
        return Result.Err(FileError(input_path, "Not a directory"))
    output_path = Path(output_dir).resolve() if output_dir else input_path
    logger.debug("Input directory: %s, output directory: %s", input_path, output_path)

    pdf_files = sorted(input_path.glob(input_pattern))
    if not pdf_files:
        return Result.Err(FileError(input_path, f"No files matching pattern: {input_pattern}"))
    logger.debug("Found %d PDF files matching pattern: %s", len(pdf_files), input_pattern)

    written = []
    errors = []
    for pdf_file in pdf_files:
        logger.info("Processing %s...", pdf_file.name)
        result = pdf_file_to_markdown_file(
            str(pdf_file), str(output_path / f"{pdf_file.stem}.md"), config
        )
        if result.is_ok:
            written.append(result.value)
        else:
            error_msg = f"Skipping {pdf_file.name}: {result.error}"
            logger.warning(error_msg)
            errors.append(error_msg)

    if written:
        logger.info("Successfully converted %d of %d PDF files", len(written), len(pdf_files))
        if errors:
            logger.warning("Completed with errors:\n%s", "\n".join(errors))
        return Result.Ok(written)
    error_msg = "No files were successfully processed:\n" + "\n".join(errors)
    logger.error(error_msg)
    return Result.Err(ReflowError(error_msg))


def config_from_args(args: argparse.Namespace) -> ReflowConfig:
    rules = DEFAULT_RESPACING_RULES
    if args.romanian:
        rules = rules + ROMANIAN_RESPACING_RULES
    return ReflowConfig(
        link_tolerance=args.tolerance,
        paragraph_gap=None if args.no_paragraph_gap else ReflowConfig.paragraph_gap,
        best_effort=args.best_effort,
        max_workers=args.workers,
        wrap_width=args.wrap,
        respacing_rules=rules,
    )


def parse_args(args=None) -> argparse.Namespace:
    """Parse command-line arguments for PDF to Markdown conversion.

    Command-line Format:
        pdf-reflow [-h] [-dir DIR] [-input PATTERN] [-output DIR]
                   [--tolerance T] [--workers N] [--best-effort]
                   [--wrap WIDTH] [--no-paragraph-gap] [--romanian] [-d]

    Args:
        args: List of command-line arguments (default: sys.argv[1:])

    Returns:
        argparse.Namespace with one attribute per option
    """
    parser = argparse.ArgumentParser(
        description=(
            "PDF Reflow: convert PDFs to flowing Markdown\n\n"
            "Rebuilds lines from positioned text, turns link annotations into\n"
            "inline Markdown links, undoes column wrapping and end-of-line\n"
            "hyphenation, and keeps paragraph breaks."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  Convert all PDFs in a directory:\n"
            "    %(prog)s -dir /path/to/pdfs -output /path/to/markdown\n\n"
            "  Convert one file, keeping going past broken pages:\n"
            "    %(prog)s -dir . -input report.pdf --best-effort\n\n"
            "Output Structure:\n"
            "  For each processed PDF, <pdfname>.md is written to the output directory."
        )
    )

    parser.add_argument(
        "-dir",
        default=".",
        help="Directory containing PDF files (default: current directory)"
    )

    parser.add_argument(
        "-input",
        default="*.pdf",
        help="File pattern to match PDFs (e.g., '*.pdf', 'report*.pdf')"
    )

    parser.add_argument(
        "-output",
        help="Directory where Markdown files will be saved (default: same as input directory)"
    )

    parser.add_argument(
        "--tolerance",
        type=float,
        default=ReflowConfig.link_tolerance,
        help="Margin around link rectangles when matching text (default: %(default)s)"
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=ReflowConfig.max_workers,
        help="Pages converted concurrently (default: %(default)s)"
    )

    parser.add_argument(
        "--best-effort",
        action="store_true",
        help="Replace pages that fail with a note instead of aborting the file"
    )

    parser.add_argument(
        "--wrap",
        type=int,
        default=None,
        help="Wrap prose paragraphs at this column"
    )

    parser.add_argument(
        "--no-paragraph-gap",
        action="store_true",
        help="Do not treat large vertical gaps as paragraph breaks"
    )

    parser.add_argument(
        "--romanian",
        action="store_true",
        help="Also apply Romanian word-boundary re-spacing rules"
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable detailed debug logging"
    )

    return parser.parse_args(args)


def main() -> int:
    """Main CLI entry point for converting PDFs."""
    args = parse_args()
    setup_logging(args.debug)

    result = process_pdfs(args.dir, args.input, args.output, config_from_args(args))
    if not result.is_ok:
        logger.error(str(result.error))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
