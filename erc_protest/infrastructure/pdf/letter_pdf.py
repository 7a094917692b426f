"""Plain-text letter rendering with fpdf2."""
import logging
from pathlib import Path

from fpdf import FPDF

logger = logging.getLogger(__name__)

MARGIN_MM = 12.7  # 0.5in
FONT_FAMILY = "Courier"
FONT_SIZE = 10
LINE_HEIGHT_MM = 4.8

# Core PDF fonts are Latin-1 only; generated letters use typographic punctuation
_REPLACEMENTS = {
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u2013": "-",
    "\u2014": "--",
    "\u2026": "...",
    "\u2022": "*",
    "\u00a0": " ",
    "\u200b": "",
    "\t": "    ",
}


def to_latin1(text: str) -> str:
    for source, target in _REPLACEMENTS.items():
        text = text.replace(source, target)
    return text.encode("latin-1", errors="replace").decode("latin-1")


class LetterPDF(FPDF):
    """Letter-size, monospace, fixed-margin page layout with page numbers."""

    def __init__(self, title: str = "ERC Protest Letter"):
        super().__init__(orientation="P", unit="mm", format="Letter")
        self.set_margins(MARGIN_MM, MARGIN_MM, MARGIN_MM)
        self.set_auto_page_break(auto=True, margin=MARGIN_MM + 4)
        self.set_title(title)
        self.set_creator("erc-protest-pipeline")

    def footer(self):
        """Called automatically by FPDF for every page."""
        self.set_y(-MARGIN_MM)
        self.set_font(FONT_FAMILY, "", 8)
        self.cell(0, 4, f"Page {self.page_no()}", align="C")

    def write_body(self, text: str) -> None:
        self.set_font(FONT_FAMILY, "", FONT_SIZE)
        self.multi_cell(0, LINE_HEIGHT_MM, to_latin1(text))


def render_text_pdf(text: str, output_path: str, title: str = "ERC Protest Letter") -> str:
    """
    Render plain text to a standalone PDF.

    Args:
        text: Letter text; line breaks are preserved
        output_path: Where the PDF is written (parent directories are created)
        title: PDF document title metadata

    Returns:
        The output path

    Raises:
        RuntimeError: If the PDF was not written or is empty
    """
    pdf = LetterPDF(title=title)
    pdf.add_page()
    pdf.write_body(text)

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    pdf.output(str(output_file))

    if not output_file.exists():
        raise RuntimeError(f"PDF file was not created at {output_path}")
    if output_file.stat().st_size == 0:
        raise RuntimeError(f"PDF file is empty at {output_path}")

    logger.info("Generated letter PDF at: %s (%d bytes, %d pages)", output_path, output_file.stat().st_size, pdf.page_no())
    return str(output_file)
