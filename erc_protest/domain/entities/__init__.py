"""Domain entities."""
from .attachment import Attachment, AttachmentStatus, Document
from .extraction_request import BusinessProfile, ExtractionRequest, is_conversation_url
from .fact import ExtractedFact
from .package import Package
from .page_snapshot import PageSnapshot
from .pipeline_result import (
    AttachmentSummary,
    PipelineFailure,
    PipelineResult,
    PipelineState,
    PipelineSuccess,
)
from .transcript import EMPTY_TRANSCRIPT, Speaker, Transcript, Turn

__all__ = [
    "Attachment",
    "AttachmentStatus",
    "Document",
    "BusinessProfile",
    "ExtractionRequest",
    "is_conversation_url",
    "ExtractedFact",
    "Package",
    "PageSnapshot",
    "AttachmentSummary",
    "PipelineFailure",
    "PipelineResult",
    "PipelineState",
    "PipelineSuccess",
    "EMPTY_TRANSCRIPT",
    "Speaker",
    "Transcript",
    "Turn",
]
