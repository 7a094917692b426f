"""Pipeline services."""
from .attachment_resolver import AttachmentResolver
from .fact_extractor import extract_facts
from .letter_composer import ComposedLetter, LetterComposer, build_fallback_letter, load_example_letter
from .package_assembler import PackageAssembler
from .research_prompt_service import generate_research_prompt
from .transcript_extractor import TranscriptExtractor

__all__ = [
    "AttachmentResolver",
    "ComposedLetter",
    "LetterComposer",
    "PackageAssembler",
    "TranscriptExtractor",
    "build_fallback_letter",
    "extract_facts",
    "generate_research_prompt",
    "load_example_letter",
]
