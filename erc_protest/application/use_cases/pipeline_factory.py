"""Wiring of the production pipeline from environment configuration."""
import logging
from typing import Optional

from ...config.config import (
    PipelineSettings,
    get_aws_region,
    get_s3_bucket,
    get_tracking_webhook_url,
    load_pipeline_settings,
)
from ...infrastructure.browser import BrowserSession, PageFetcher
from ...infrastructure.http import WebhookTrackingReporter
from ...infrastructure.llm import OpenAITextGenerator, create_text_generator
from ...infrastructure.storage import S3ArtifactSink
from ..services import (
    AttachmentResolver,
    LetterComposer,
    PackageAssembler,
    TranscriptExtractor,
    load_example_letter,
)
from .pipeline_orchestrator import PipelineOrchestrator

logger = logging.getLogger(__name__)


def build_text_generator() -> Optional[OpenAITextGenerator]:
    """Text generator from the environment, or None when no API key is configured."""
    try:
        return create_text_generator()
    except RuntimeError as exc:
        logger.warning("Text generation disabled: %s", exc)
        return None


def build_orchestrator(settings: Optional[PipelineSettings] = None) -> PipelineOrchestrator:
    """Build a fully wired orchestrator; each call returns fresh collaborators."""
    settings = settings or load_pipeline_settings()
    generator = build_text_generator()
    session = BrowserSession(headless=settings.headless)

    bucket = get_s3_bucket()
    sink = (
        S3ArtifactSink(
            bucket,
            prefix=settings.s3_prefix,
            region=get_aws_region(),
            link_expires_seconds=settings.s3_link_expires_seconds,
        )
        if bucket
        else None
    )
    webhook_url = get_tracking_webhook_url()
    reporter = WebhookTrackingReporter(webhook_url) if webhook_url else None

    return PipelineOrchestrator(
        settings=settings,
        page_fetcher=PageFetcher(session, settle_seconds=settings.settle_seconds),
        transcript_extractor=TranscriptExtractor(generator, sanitize_first=settings.sanitize_first),
        letter_composer=LetterComposer(
            generator,
            example_letter=load_example_letter(settings.example_letter_path),
            mode=settings.compose_mode,
        ),
        attachment_resolver=AttachmentResolver(session, settle_seconds=settings.attachment_settle_seconds),
        package_assembler=PackageAssembler(),
        artifact_sink=sink,
        tracking_reporter=reporter,
    )
