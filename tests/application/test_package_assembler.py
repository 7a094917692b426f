"""Unit tests for package assembly."""
import zipfile
from datetime import datetime, timezone
from pathlib import Path

import pdfplumber
import pytest

from erc_protest.application.services.package_assembler import (
    ARCHIVE_NAME,
    MANIFEST_NAME,
    PRIMARY_PDF_NAME,
    AssemblyCancellation,
    PackageAssembler,
    build_manifest,
)
from erc_protest.domain.entities import Attachment, AttachmentStatus, Document
from erc_protest.domain.errors import ErrorKind, PackagingError
from conftest import FAKE_PDF_BYTES

GENERATED_AT = datetime(2024, 3, 14, 12, 0, 0, tzinfo=timezone.utc)
LETTER = "03/14/2024\nInternal Revenue Service\n\nDear Appeals Officer,\n\nAcme Dental Group LLC protests."


def _assembler() -> PackageAssembler:
    return PackageAssembler(clock=lambda: GENERATED_AT)


def _resolved(tmp_path: Path, index: int, url: str) -> Attachment:
    filename = f"attachment_{index}_example.pdf"
    path = tmp_path / filename
    path.write_bytes(FAKE_PDF_BYTES)
    return Attachment(url, filename, str(path), AttachmentStatus.RESOLVED, index=index)


@pytest.mark.unit
class TestPackageAssembler:
    """Tests for PackageAssembler.assemble."""

    def test_package_without_attachments(self, tmp_path: Path):
        package = _assembler().assemble(Document(body_text=LETTER), LETTER, tmp_path)

        assert package.manifest_entries == ()
        with zipfile.ZipFile(package.archive_path) as archive:
            assert sorted(archive.namelist()) == sorted([PRIMARY_PDF_NAME, MANIFEST_NAME])
            manifest = archive.read(MANIFEST_NAME).decode("utf-8")
        assert "Attachments (0):" in manifest
        assert "None - no cited sources were attached." in manifest

    def test_archive_contains_every_resolved_attachment(self, tmp_path: Path):
        attachments = [
            _resolved(tmp_path, 1, "https://a.gov/order"),
            Attachment("https://b.gov/down", "attachment_2_b.pdf", None, AttachmentStatus.FAILED, "timeout"),
            _resolved(tmp_path, 3, "https://c.gov/order"),
        ]

        package = _assembler().assemble(Document(LETTER, attachments), LETTER, tmp_path)

        assert len(package.manifest_entries) == 2
        with zipfile.ZipFile(package.archive_path) as archive:
            names = archive.namelist()
            manifest = archive.read(MANIFEST_NAME).decode("utf-8")
            assert archive.read("attachment_1_example.pdf") == FAKE_PDF_BYTES
        assert "attachment_3_example.pdf" in names
        assert "attachment_2_b.pdf" not in names
        assert "Attachments (2):" in manifest
        assert "1. attachment_1_example.pdf (original URL: https://a.gov/order)" in manifest
        assert "3. attachment_3_example.pdf (original URL: https://c.gov/order)" in manifest
        assert "- https://b.gov/down" in manifest
        assert f"Generated on: {GENERATED_AT.isoformat()}" in manifest

    def test_primary_pdf_contains_letter_text(self, tmp_path: Path):
        package = _assembler().assemble(Document(LETTER), LETTER, tmp_path)

        assert package.primary_pdf_path == str(tmp_path / PRIMARY_PDF_NAME)
        with pdfplumber.open(package.primary_pdf_path) as pdf:
            text = "\n".join(page.extract_text() or "" for page in pdf.pages)
        assert "Dear Appeals Officer" in text
        assert "Acme Dental Group LLC" in text

    def test_typographic_characters_are_rendered(self, tmp_path: Path):
        letter = "“Quoted” text — with a bullet • and ’apostrophe’ ✓"

        package = _assembler().assemble(Document(letter), letter, tmp_path)

        assert Path(package.primary_pdf_path).stat().st_size > 0

    def test_no_partial_archive_left_behind(self, tmp_path: Path):
        _assembler().assemble(Document(LETTER), LETTER, tmp_path)

        assert (tmp_path / ARCHIVE_NAME).is_file()
        assert not (tmp_path / f"{ARCHIVE_NAME}.part").exists()

    def test_missing_attachment_file_raises(self, tmp_path: Path):
        attachment = Attachment("https://a.gov", "attachment_1_a.pdf", str(tmp_path / "gone.pdf"), AttachmentStatus.RESOLVED)

        with pytest.raises(PackagingError) as exc_info:
            _assembler().assemble(Document(LETTER, [attachment]), LETTER, tmp_path)

        assert exc_info.value.kind == ErrorKind.PACKAGING_FAILED
        assert not (tmp_path / ARCHIVE_NAME).exists()


@pytest.mark.unit
class TestAssemblyCancellation:
    """Tests for cancelling a package assembly."""

    def test_cancelled_before_start_writes_nothing(self, tmp_path: Path):
        cancellation = AssemblyCancellation()
        cancellation.cancel()

        with pytest.raises(PackagingError) as exc_info:
            _assembler().assemble(Document(LETTER), LETTER, tmp_path, cancellation)

        assert exc_info.value.kind == ErrorKind.PACKAGING_FAILED
        assert not (tmp_path / ARCHIVE_NAME).exists()
        assert not (tmp_path / PRIMARY_PDF_NAME).exists()

    def test_cancel_after_publish_removes_archive(self, tmp_path: Path):
        cancellation = AssemblyCancellation()
        package = _assembler().assemble(Document(LETTER), LETTER, tmp_path, cancellation)
        assert Path(package.archive_path).is_file()

        cancellation.cancel()

        assert cancellation.cancelled
        assert not Path(package.archive_path).exists()

    def test_publish_refused_once_cancelled(self, tmp_path: Path):
        partial = tmp_path / f"{ARCHIVE_NAME}.part"
        partial.write_bytes(b"PK")
        cancellation = AssemblyCancellation()
        cancellation.cancel()

        with pytest.raises(PackagingError):
            cancellation.publish(partial, tmp_path / ARCHIVE_NAME)

        assert not (tmp_path / ARCHIVE_NAME).exists()


@pytest.mark.unit
def test_manifest_numbers_follow_attachment_index(tmp_path: Path):
    second = _resolved(tmp_path, 2, "https://b.gov/order")

    manifest = build_manifest([second], [], GENERATED_AT)

    assert "2. attachment_2_example.pdf (original URL: https://b.gov/order)" in manifest
    assert "1. attachment_2_example.pdf" not in manifest


@pytest.mark.unit
def test_manifest_lists_main_document():
    manifest = build_manifest([], [], GENERATED_AT)

    assert manifest.startswith("ERC PROTEST PACKAGE")
    assert f"- {PRIMARY_PDF_NAME} (The main protest letter)" in manifest
