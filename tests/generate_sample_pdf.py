"""Generate sample PDFs for testing the reflow pipeline.

Each sample is drawn with ReportLab's canvas so the position of every
string and link rectangle is known exactly.

Test Case Design:
----------------
1. Linked page:
   - "Contact us" in a bold font followed by " for details" in a regular
     font, so extraction yields two spans, with a URI link over the bold span
   - A word hyphenated across two lines
   - A second paragraph after a large vertical gap
   - A link rectangle over empty space (orphan link)

2. Multi-page document:
   - One short line per page, used for page marker checks

3. Encrypted document:
   - Same content as the multi-page document, with a user password

Adding New Test Cases:
   - Add a new generator function following the existing pattern
   - Keep coordinates in PDF units (origin bottom-left, as ReportLab uses)
"""

import io
from pathlib import Path
from typing import Optional

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


LINK_URL = "https://example.com"
ORPHAN_URL = "https://example.org/orphan"
FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
FONT_SIZE = 12


def _finish(pdf: canvas.Canvas, buffer: io.BytesIO, output_path: Optional[Path]) -> bytes:
    pdf.save()
    data = buffer.getvalue()
    if output_path is not None:
        Path(output_path).write_bytes(data)
    return data


def generate_linked_pdf(output_path: Optional[Path] = None) -> bytes:
    """Single page with an inline link, a hyphenated word and an orphan link.

    Args:
        output_path: Optional path to also write the PDF to

    Returns:
        bytes: The PDF document
    """
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)

    x, y = 72, 700
    pdf.setFont(BOLD_FONT, FONT_SIZE)
    pdf.drawString(x, y, "Contact us")
    link_width = pdf.stringWidth("Contact us", BOLD_FONT, FONT_SIZE)
    pdf.linkURL(LINK_URL, (x, y - 2, x + link_width, y + 9), relative=0, thickness=0)
    # Keep the rest of the line and the next lines clear of the link tolerance
    pdf.setFont(FONT, FONT_SIZE)
    pdf.drawString(x + link_width + 12, y, " for details.")

    pdf.drawString(x, y - 40, "Please read the exam-")
    pdf.drawString(x, y - 54, "ple schedule.")

    pdf.drawString(x, y - 110, "Second paragraph starts here.")

    # Link over blank space: nothing to attach it to
    pdf.linkURL(ORPHAN_URL, (400, 100, 500, 120), relative=0, thickness=0)

    pdf.showPage()
    return _finish(pdf, buffer, output_path)


def generate_multipage_pdf(
    output_path: Optional[Path] = None, pages: int = 3, encrypt: Optional[str] = None
) -> bytes:
    """Document with one line of text per page.

    Args:
        output_path: Optional path to also write the PDF to
        pages: Number of pages
        encrypt: Optional user password

    Returns:
        bytes: The PDF document
    """
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter, encrypt=encrypt)
    for number in range(1, pages + 1):
        pdf.setFont(FONT, FONT_SIZE)
        pdf.drawString(72, 700, f"Text of page {number}.")
        pdf.showPage()
    return _finish(pdf, buffer, output_path)


def main():
    """Generate the sample PDFs in the tests directory."""
    here = Path(__file__).parent
    generate_linked_pdf(here / "linked.pdf")
    generate_multipage_pdf(here / "multipage.pdf")
    print(f"Sample PDFs saved to {here}")


if __name__ == "__main__":
    main()
