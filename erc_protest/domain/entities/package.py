"""Package entity - the deliverable archive."""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Package:
    primary_pdf_path: str
    archive_path: str
    manifest_entries: Tuple[str, ...]
