"""Domain errors - taxonomy of pipeline failures."""
from enum import Enum


class ErrorKind(str, Enum):
    """Error taxonomy reported to callers."""
    NAVIGATION_FAILED = "navigation_failed"
    EXTRACTION_EMPTY = "extraction_empty"
    GENERATION_FAILED = "generation_failed"
    ATTACHMENT_FAILED = "attachment_failed"
    PACKAGING_FAILED = "packaging_failed"


class ErcProtestError(Exception):
    """Base error for the protest pipeline."""

    kind: ErrorKind = ErrorKind.PACKAGING_FAILED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NavigationError(ErcProtestError):
    """Every navigation strategy failed for a URL."""
    kind = ErrorKind.NAVIGATION_FAILED


class ExtractionEmptyError(ErcProtestError):
    """No extraction strategy produced any transcript text."""
    kind = ErrorKind.EXTRACTION_EMPTY


class GenerationError(ErcProtestError):
    """The text-generation capability failed, timed out or returned nothing."""
    kind = ErrorKind.GENERATION_FAILED


class AttachmentError(ErcProtestError):
    """A single cited URL could not be rendered to PDF."""
    kind = ErrorKind.ATTACHMENT_FAILED


class PackagingError(ErcProtestError):
    """The primary PDF or the archive could not be written."""
    kind = ErrorKind.PACKAGING_FAILED
