"""Pipeline orchestrator - sequences the stages and shapes every failure uniformly."""
import asyncio
from dataclasses import replace
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from ...config.config import PipelineSettings
from ...domain.entities import (
    BusinessProfile,
    Document,
    ExtractionRequest,
    Package,
    PipelineFailure,
    PipelineResult,
    PipelineState,
    PipelineSuccess,
)
from ...domain.entities.pipeline_result import STATE_ERROR_KINDS, AttachmentSummary
from ...domain.errors import ErcProtestError, ErrorKind, ExtractionEmptyError
from ...infrastructure.http.tracking_client import STATUS_DONE, STATUS_FAILED
from ..services.fact_extractor import extract_facts
from ..services.package_assembler import AssemblyCancellation

logger = logging.getLogger(__name__)

CONVERSATION_FILE = "conversation.txt"
SCREENSHOT_FILE = "screenshot.png"
LETTER_FILE = "protest_letter.txt"
REWRITTEN_LETTER_FILE = "protest_letter_with_attachments.txt"


def new_request_id() -> str:
    return uuid4().hex[:8]


class _Progress:
    """Current state of one run, readable after a deadline cancels it."""

    def __init__(self, request_id: str):
        self.request_id = request_id
        self.state = PipelineState.IDLE
        self.cancellation = AssemblyCancellation()

    def enter(self, state: PipelineState) -> None:
        logger.info("[%s] %s -> %s", self.request_id, self.state.value, state.value)
        self.state = state


class PipelineOrchestrator:
    """
    idle -> fetching -> extracting -> fact-matching -> composing ->
    resolving-attachments -> packaging -> done | failed

    Stateless across runs: every collaborator is injected and every run gets
    its own output directory, so independent requests may run concurrently.
    """

    def __init__(
        self,
        settings: PipelineSettings,
        page_fetcher,
        transcript_extractor,
        letter_composer,
        attachment_resolver,
        package_assembler,
        artifact_sink=None,
        tracking_reporter=None,
        request_id_factory: Callable[[], str] = new_request_id,
    ):
        self.settings = settings
        self.page_fetcher = page_fetcher
        self.transcript_extractor = transcript_extractor
        self.letter_composer = letter_composer
        self.attachment_resolver = attachment_resolver
        self.package_assembler = package_assembler
        self.artifact_sink = artifact_sink
        self.tracking_reporter = tracking_reporter
        self.request_id_factory = request_id_factory

    async def run(self, request: ExtractionRequest) -> PipelineResult:
        """Run the pipeline; returns a complete package or a single structured error."""
        request_id = self.request_id_factory()
        output_dir = Path(self.settings.output_dir) / request_id
        progress = _Progress(request_id)
        logger.info(
            "[%s] Processing conversation %s for %s (%s), tracking_id=%s",
            request_id,
            request.conversation_url,
            request.business_profile.name,
            request.business_profile.period,
            request.tracking_id,
        )

        deadline = self.settings.deadline_seconds
        try:
            if deadline:
                result = await asyncio.wait_for(self._execute(request, output_dir, progress), timeout=deadline)
            else:
                result = await self._execute(request, output_dir, progress)
        except asyncio.TimeoutError:
            # The packaging thread outlives the deadline; keep it from publishing an archive
            progress.cancellation.cancel()
            failure = PipelineFailure(
                STATE_ERROR_KINDS.get(progress.state, ErrorKind.PACKAGING_FAILED),
                progress.state,
                f"Pipeline deadline of {deadline:g}s exceeded while {progress.state.value}",
            )
        except ErcProtestError as exc:
            failure = PipelineFailure(exc.kind, progress.state, exc.message)
        except Exception as exc:
            failure = PipelineFailure(
                STATE_ERROR_KINDS.get(progress.state, ErrorKind.PACKAGING_FAILED),
                progress.state,
                f"{type(exc).__name__}: {exc}",
            )
        else:
            progress.enter(PipelineState.DONE)
            return await self._finish_success(request, result)

        logger.error(
            "[%s] Pipeline failed in stage %s (%s): %s",
            request_id,
            failure.state.value,
            failure.stage.value,
            failure.message,
        )
        progress.state = PipelineState.FAILED
        await self._report(request, STATUS_FAILED, {"error_stage": failure.stage.value, "error_message": failure.message})
        return failure

    async def _execute(self, request: ExtractionRequest, output_dir: Path, progress: _Progress) -> PipelineSuccess:
        profile = request.business_profile
        warnings: List[str] = []

        progress.enter(PipelineState.FETCHING)
        snapshot = await self.page_fetcher.fetch(request.conversation_url)
        output_dir.mkdir(parents=True, exist_ok=True)
        if snapshot.screenshot_bytes:
            _write_artifact(output_dir / SCREENSHOT_FILE, snapshot.screenshot_bytes)

        progress.enter(PipelineState.EXTRACTING)
        transcript = await self.transcript_extractor.extract(snapshot)
        del snapshot
        if transcript.is_empty:
            if self.settings.fail_on_empty_transcript:
                raise ExtractionEmptyError("No conversation content could be extracted from the page")
            logger.warning("[%s] Empty transcript, composing a generic letter", progress.request_id)
            warnings.append(ErrorKind.EXTRACTION_EMPTY.value)
        _write_artifact(output_dir / CONVERSATION_FILE, transcript.as_text())

        progress.enter(PipelineState.FACT_MATCHING)
        facts = extract_facts(transcript, profile.period)

        progress.enter(PipelineState.COMPOSING)
        letter = await self.letter_composer.compose(profile, facts, transcript)
        if letter.error:
            warnings.append(ErrorKind.GENERATION_FAILED.value)
        _write_artifact(output_dir / LETTER_FILE, letter.text)

        progress.enter(PipelineState.RESOLVING_ATTACHMENTS)
        document: Document = await self.attachment_resolver.resolve(letter.text, output_dir)
        for attachment in document.attachments:
            if not attachment.is_resolved:
                warnings.append(f"{ErrorKind.ATTACHMENT_FAILED.value}: {attachment.original_url}")
        _write_artifact(output_dir / REWRITTEN_LETTER_FILE, document.body_text)

        progress.enter(PipelineState.PACKAGING)
        package: Package = await asyncio.to_thread(
            self.package_assembler.assemble,
            document,
            document.body_text,
            output_dir,
            progress.cancellation,
        )

        return PipelineSuccess(
            request_id=progress.request_id,
            letter_text=document.body_text,
            attachments=[
                AttachmentSummary(a.generated_filename, a.original_url, a.index) for a in document.resolved_attachments
            ],
            primary_pdf_path=package.primary_pdf_path,
            archive_path=package.archive_path,
            output_dir=str(output_dir),
            transcript_strategy=transcript.strategy,
            used_fallback_letter=not letter.generated,
            warnings=warnings,
        )

    async def _finish_success(self, request: ExtractionRequest, result: PipelineSuccess) -> PipelineSuccess:
        links = await self._publish(request.tracking_id, request.business_profile, result)
        details = {"protest_letter_path": result.primary_pdf_path, "zip_path": result.archive_path}
        if links:
            details.update(links)
            result = replace(result, links=links)
        await self._report(request, STATUS_DONE, details)
        logger.info("[%s] Pipeline complete: %s", result.request_id, result.archive_path)
        return result

    async def _publish(
        self,
        tracking_id: Optional[str],
        profile: BusinessProfile,
        result: PipelineSuccess,
    ) -> Optional[Dict[str, str]]:
        if not tracking_id or self.artifact_sink is None:
            return None
        try:
            return await asyncio.to_thread(
                self.artifact_sink.publish,
                tracking_id,
                profile.name,
                result.primary_pdf_path,
                result.archive_path,
            )
        except Exception as exc:
            logger.error("Error publishing package for %s: %s", tracking_id, exc)
            return None

    async def _report(self, request: ExtractionRequest, status: str, details: Dict[str, str]) -> None:
        if not request.tracking_id or self.tracking_reporter is None:
            return
        try:
            await asyncio.to_thread(self.tracking_reporter.report, request.tracking_id, status, details)
        except Exception as exc:
            logger.error("Error reporting status for %s: %s", request.tracking_id, exc)


def _write_artifact(path: Path, content) -> None:
    """Best-effort write of an intermediate artifact kept for inspection."""
    try:
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not write %s: %s", path, exc)
