"""PDF rendering infrastructure."""
from .letter_pdf import LetterPDF, render_text_pdf

__all__ = ["LetterPDF", "render_text_pdf"]
