"""Pipeline state machine states and terminal results."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..errors import ErrorKind


class PipelineState(str, Enum):
    """Pipeline state enumeration."""
    IDLE = "idle"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    FACT_MATCHING = "fact-matching"
    COMPOSING = "composing"
    RESOLVING_ATTACHMENTS = "resolving-attachments"
    PACKAGING = "packaging"
    DONE = "done"
    FAILED = "failed"


# Error kind reported when an unexpected exception escapes a state
STATE_ERROR_KINDS = {
    PipelineState.IDLE: ErrorKind.NAVIGATION_FAILED,
    PipelineState.FETCHING: ErrorKind.NAVIGATION_FAILED,
    PipelineState.EXTRACTING: ErrorKind.EXTRACTION_EMPTY,
    PipelineState.FACT_MATCHING: ErrorKind.EXTRACTION_EMPTY,
    PipelineState.COMPOSING: ErrorKind.GENERATION_FAILED,
    PipelineState.RESOLVING_ATTACHMENTS: ErrorKind.ATTACHMENT_FAILED,
    PipelineState.PACKAGING: ErrorKind.PACKAGING_FAILED,
}


@dataclass(frozen=True)
class AttachmentSummary:
    filename: str
    original_url: str
    index: int = 0


@dataclass(frozen=True)
class PipelineSuccess:
    """Complete package produced for one request."""
    request_id: str
    letter_text: str
    attachments: List[AttachmentSummary]
    primary_pdf_path: str
    archive_path: str
    output_dir: str
    transcript_strategy: str
    used_fallback_letter: bool
    warnings: List[str] = field(default_factory=list)
    links: Optional[Dict[str, str]] = None

    success = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "request_id": self.request_id,
            "letter_text": self.letter_text,
            "attachments": [
                {"filename": a.filename, "original_url": a.original_url, "index": a.index} for a in self.attachments
            ],
            "primary_pdf_path": self.primary_pdf_path,
            "archive_path": self.archive_path,
            "output_dir": self.output_dir,
            "transcript_strategy": self.transcript_strategy,
            "used_fallback_letter": self.used_fallback_letter,
            "warnings": list(self.warnings),
            "links": self.links,
        }


@dataclass(frozen=True)
class PipelineFailure:
    """Single structured error; never carries file paths."""
    stage: ErrorKind
    state: PipelineState
    message: str

    success = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "stage": self.stage.value,
            "state": self.state.value,
            "message": self.message,
        }


PipelineResult = Union[PipelineSuccess, PipelineFailure]
