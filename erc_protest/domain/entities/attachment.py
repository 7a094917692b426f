"""Attachment and document entities."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class AttachmentStatus(str, Enum):
    """Outcome of rendering one cited URL."""
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class Attachment:
    """
    PDF rendering of a URL cited in the letter.

    ``index`` is the URL's 1-based position among the unique URLs of the letter;
    the letter reference and the manifest entry both use it.
    """
    original_url: str
    generated_filename: str
    local_path: Optional[str]
    status: AttachmentStatus
    error_message: Optional[str] = None
    index: int = 0

    @property
    def is_resolved(self) -> bool:
        return self.status == AttachmentStatus.RESOLVED


@dataclass
class Document:
    """
    Letter body plus its attachments.

    Mutated only by the attachment resolver while URLs are rewritten; treat it
    as read-only once handed to the package assembler.
    """
    body_text: str
    attachments: List[Attachment] = field(default_factory=list)

    @property
    def resolved_attachments(self) -> List[Attachment]:
        return [a for a in self.attachments if a.is_resolved]
