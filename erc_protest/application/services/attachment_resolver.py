"""Attachment resolution - renders every cited URL to PDF and rewrites the letter."""
import asyncio
import logging
import re
from pathlib import Path
from typing import Dict, List, Sequence, Union

from playwright.async_api import Browser
from playwright.async_api import Error as PlaywrightError

from ...domain.entities import Attachment, AttachmentStatus, Document
from ...domain.errors import AttachmentError
from ...infrastructure.browser.navigation import DEFAULT_NAVIGATION_STRATEGIES, NavigationStrategy, navigate_with_fallback
from ...infrastructure.browser.session import ATTACHMENT_BLOCKED_RESOURCES, BrowserSession
from .urls import URL_PATTERN, find_urls, split_trailing_punctuation

logger = logging.getLogger(__name__)

PDF_MARGINS = {"top": "0.5in", "right": "0.5in", "bottom": "0.5in", "left": "0.5in"}


def attachment_filename(index: int, url: str) -> str:
    stem = re.sub(r"[^a-zA-Z0-9]", "_", re.sub(r"^https?://", "", url))[:30]
    return f"attachment_{index}_{stem}.pdf"


def attachment_reference(index: int, filename: str) -> str:
    return f"[See Attachment {index}: {filename}]"


def rewrite_urls(text: str, references: Dict[str, str]) -> str:
    """Replace every full occurrence of a mapped URL, keeping trailing punctuation."""
    if not references:
        return text

    def _replace(match: re.Match) -> str:
        url, trailing = split_trailing_punctuation(match.group(0))
        reference = references.get(url)
        return f"{reference}{trailing}" if reference else match.group(0)

    return URL_PATTERN.sub(_replace, text)


class AttachmentResolver:
    """
    Renders cited URLs one at a time inside a single browser, each in a fresh
    context, so at most one page is alive at any moment.
    """

    def __init__(
        self,
        session: BrowserSession,
        settle_seconds: float = 2.0,
        strategies: Sequence[NavigationStrategy] = DEFAULT_NAVIGATION_STRATEGIES,
        blocked_resource_types: Sequence[str] = ATTACHMENT_BLOCKED_RESOURCES,
    ):
        self.session = session
        self.settle_seconds = settle_seconds
        self.strategies = tuple(strategies)
        self.blocked_resource_types = tuple(blocked_resource_types)

    async def resolve(self, document_text: str, output_dir: Union[str, Path]) -> Document:
        """
        Resolve every unique URL in ``document_text``.

        Per-URL failures are recorded as failed attachments and never raised;
        failed URLs stay in the text as literal links.
        """
        document = Document(body_text=document_text)
        urls = find_urls(document_text)
        logger.info("Found %d unique URLs to process", len(urls))
        if not urls:
            return document

        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        try:
            async with self.session.open() as browser:
                for index, url in enumerate(urls, start=1):
                    logger.info("Processing URL (%d/%d): %s", index, len(urls), url)
                    document.attachments.append(await self._render(browser, index, url, output_path))
        except (PlaywrightError, OSError) as exc:
            logger.error("Browser unavailable for attachments: %s", exc)
            self._mark_remaining_failed(document, urls, str(exc))

        references = {
            attachment.original_url: attachment_reference(attachment.index, attachment.generated_filename)
            for attachment in document.attachments
            if attachment.is_resolved
        }
        document.body_text = rewrite_urls(document_text, references)
        logger.info(
            "Attachments resolved: %d of %d",
            len(references),
            len(document.attachments),
        )
        return document

    async def _render(self, browser: Browser, index: int, url: str, output_path: Path) -> Attachment:
        filename = attachment_filename(index, url)
        pdf_path = output_path / filename
        try:
            async with self.session.isolated_page(browser, self.blocked_resource_types) as page:
                await navigate_with_fallback(page, url, self.strategies)
                if self.settle_seconds > 0:
                    await asyncio.sleep(self.settle_seconds)
                await page.pdf(
                    path=str(pdf_path),
                    format="Letter",
                    margin=PDF_MARGINS,
                    print_background=True,
                )
            if not pdf_path.is_file() or pdf_path.stat().st_size == 0:
                raise AttachmentError(f"PDF was not written to {pdf_path}")
        except Exception as exc:
            logger.warning("Error capturing PDF for %s: %s", url, exc)
            return Attachment(url, filename, None, AttachmentStatus.FAILED, error_message=str(exc), index=index)

        logger.info("Captured %s as %s", url, filename)
        return Attachment(url, filename, str(pdf_path), AttachmentStatus.RESOLVED, index=index)

    @staticmethod
    def _mark_remaining_failed(document: Document, urls: List[str], reason: str) -> None:
        done = {attachment.original_url for attachment in document.attachments}
        for index, url in enumerate(urls, start=1):
            if url not in done:
                document.attachments.append(
                    Attachment(
                        url,
                        attachment_filename(index, url),
                        None,
                        AttachmentStatus.FAILED,
                        error_message=reason,
                        index=index,
                    )
                )
