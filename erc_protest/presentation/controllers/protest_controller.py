"""Protest controller - maps request DTOs onto the pipeline and services."""
import logging
from typing import Any, Dict

from fastapi.exceptions import RequestValidationError

from ...application.services.fact_extractor import extract_facts
from ...application.services.letter_composer import LetterComposer, load_example_letter
from ...application.services.research_prompt_service import business_type_for_naics, generate_research_prompt
from ...application.services.urls import find_urls
from ...application.use_cases.pipeline_factory import build_orchestrator, build_text_generator
from ...config.config import load_pipeline_settings
from ...domain.entities import BusinessProfile, ExtractionRequest, Transcript
from ..dtos.protest_models import GenerateLetterInput, GeneratePromptInput, ProcessConversationInput

logger = logging.getLogger(__name__)


def _profile_from(payload) -> BusinessProfile:
    return BusinessProfile(
        name=payload.business_name,
        tax_id=payload.ein,
        location=payload.location,
        period=payload.time_period,
        business_category=payload.business_type or "business",
    )


async def handle_process_conversation(payload: ProcessConversationInput) -> Dict[str, Any]:
    """Run the full pipeline for one conversation link."""
    logger.info(
        "Processing conversation link for %s, period=%s, type=%s",
        payload.business_name,
        payload.time_period,
        payload.business_type or "Not specified",
    )
    try:
        request = ExtractionRequest(
            conversation_url=payload.conversation_url,
            business_profile=_profile_from(payload),
            tracking_id=payload.tracking_id,
        )
    except ValueError as exc:
        logger.warning("Rejected conversation request: %s", exc)
        raise RequestValidationError(
            [{"loc": ("body",), "msg": str(exc), "type": "value_error"}]
        ) from exc
    orchestrator = build_orchestrator()
    result = await orchestrator.run(request)
    return result.to_dict()


async def handle_generate_letter(payload: GenerateLetterInput) -> Dict[str, Any]:
    """Compose a letter from research text supplied by the caller, without a browser."""
    settings = load_pipeline_settings()
    profile = _profile_from(payload)
    transcript = Transcript(
        blob=payload.research_text,
        strategy="provided",
        links=tuple(find_urls(payload.research_text)),
    )
    facts = extract_facts(transcript, profile.period)

    composer = LetterComposer(
        build_text_generator(),
        example_letter=load_example_letter(settings.example_letter_path),
        mode=settings.compose_mode,
    )
    letter = await composer.compose(profile, facts, transcript)
    return {
        "success": True,
        "letter": letter.text,
        "used_fallback_letter": not letter.generated,
        "facts": [fact.raw_text for fact in facts],
    }


async def handle_generate_prompt(payload: GeneratePromptInput) -> Dict[str, Any]:
    """Build the COVID-19 order research prompt for a business."""
    business_type = payload.business_type or business_type_for_naics(payload.naics_code)
    generator = build_text_generator() if payload.customize else None
    result = await generate_research_prompt(
        business_type,
        payload.location,
        payload.time_period,
        generator=generator,
        base_prompt=payload.base_prompt,
    )
    return {"success": True, "prompt": result.prompt, "customized": result.customized}
