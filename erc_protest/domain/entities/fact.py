"""Extracted fact - a statement believed to describe a government order."""
from dataclasses import dataclass


@dataclass(frozen=True)
class ExtractedFact:
    raw_text: str
    source_paragraph: str
