"""Package assembly - primary PDF, attachment PDFs and manifest in one archive."""
import logging
import os
import threading
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from fpdf.errors import FPDFException

from ...domain.entities import Attachment, Document, Package
from ...domain.errors import PackagingError
from ...infrastructure.pdf.letter_pdf import render_text_pdf

logger = logging.getLogger(__name__)

PRIMARY_PDF_NAME = "protest_letter.pdf"
ARCHIVE_NAME = "complete_protest_package.zip"
MANIFEST_NAME = "README.txt"


def manifest_entry(position: int, attachment: Attachment) -> str:
    """Entry numbered like the letter reference; unnumbered attachments fall back to list position."""
    index = attachment.index or position
    return f"{index}. {attachment.generated_filename} (original URL: {attachment.original_url})"


def build_manifest(resolved: Sequence[Attachment], failed: Sequence[Attachment], generated_at: datetime) -> str:
    lines = [
        "ERC PROTEST PACKAGE",
        "",
        "Main Document:",
        f"- {PRIMARY_PDF_NAME} (The main protest letter)",
        "",
        f"Attachments ({len(resolved)}):",
    ]
    if resolved:
        lines += [manifest_entry(index, attachment) for index, attachment in enumerate(resolved, start=1)]
    else:
        lines.append("None - no cited sources were attached.")
    if failed:
        lines += ["", "Sources that could not be captured (cited as links in the letter):"]
        lines += [f"- {attachment.original_url}" for attachment in failed]
    lines += ["", f"Generated on: {generated_at.isoformat()}", ""]
    return "\n".join(lines)


class AssemblyCancellation:
    """
    Shared between a run and the worker thread assembling its package.

    Once cancelled, no archive is published: a pending rename is refused and an
    archive already renamed into place is removed.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._cancelled = False
        self._published: Optional[Path] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            if self._published is not None:
                self._published.unlink(missing_ok=True)
                logger.warning("Removed archive of cancelled run: %s", self._published)
                self._published = None

    def publish(self, partial_path: Path, archive_path: Path) -> None:
        with self._lock:
            if self._cancelled:
                raise PackagingError("Packaging cancelled before the archive was published")
            os.replace(partial_path, archive_path)
            self._published = archive_path


class PackageAssembler:
    """Writes the package into ``output_dir``; the archive appears only when complete."""

    def __init__(self, clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.clock = clock

    def assemble(
        self,
        document: Document,
        primary_text: str,
        output_dir: Union[str, Path],
        cancellation: Optional[AssemblyCancellation] = None,
    ) -> Package:
        """
        Render the primary letter and bundle it with every resolved attachment.

        Raises:
            PackagingError: If the PDF or the archive cannot be written, or the
                run was cancelled before the archive was published
        """
        cancellation = cancellation or AssemblyCancellation()
        if cancellation.cancelled:
            raise PackagingError("Packaging cancelled before it started")
        output_path = Path(output_dir)
        try:
            output_path.mkdir(parents=True, exist_ok=True)
            primary_pdf = render_text_pdf(primary_text, str(output_path / PRIMARY_PDF_NAME))
        except (OSError, RuntimeError, FPDFException) as exc:
            logger.error("Failed to render primary PDF: %s", exc, exc_info=True)
            raise PackagingError(f"Failed to render protest letter PDF: {exc}") from exc

        resolved = document.resolved_attachments
        failed = [attachment for attachment in document.attachments if not attachment.is_resolved]
        missing = [a.generated_filename for a in resolved if not a.local_path or not Path(a.local_path).is_file()]
        if missing:
            raise PackagingError(f"Attachment files missing from disk: {', '.join(missing)}")

        entries: List[str] = [manifest_entry(index, a) for index, a in enumerate(resolved, start=1)]
        manifest = build_manifest(resolved, failed, self.clock())

        archive_path = output_path / ARCHIVE_NAME
        partial_path = output_path / f"{ARCHIVE_NAME}.part"
        try:
            with zipfile.ZipFile(partial_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                archive.write(primary_pdf, arcname=PRIMARY_PDF_NAME)
                for attachment in resolved:
                    archive.write(attachment.local_path, arcname=attachment.generated_filename)
                archive.writestr(MANIFEST_NAME, manifest)
            archive_size = partial_path.stat().st_size
            cancellation.publish(partial_path, archive_path)
        except PackagingError:
            partial_path.unlink(missing_ok=True)
            raise
        except (OSError, zipfile.BadZipFile) as exc:
            partial_path.unlink(missing_ok=True)
            logger.error("Failed to write package archive: %s", exc, exc_info=True)
            raise PackagingError(f"Failed to write package archive: {exc}") from exc

        logger.info(
            "ZIP package created at: %s (%d attachments, %d bytes)",
            archive_path,
            len(resolved),
            archive_size,
        )
        return Package(
            primary_pdf_path=primary_pdf,
            archive_path=str(archive_path),
            manifest_entries=tuple(entries),
        )
