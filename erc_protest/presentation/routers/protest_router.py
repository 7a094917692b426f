"""ERC protest router - pipeline, letter and research prompt endpoints."""
import logging

from fastapi import APIRouter

from ..controllers.protest_controller import (
    handle_generate_letter,
    handle_generate_prompt,
    handle_process_conversation,
)
from ..dtos.protest_models import (
    GenerateLetterInput,
    GenerateLetterOutput,
    GeneratePromptInput,
    GeneratePromptOutput,
    ProcessConversationInput,
    ProcessConversationOutput,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/erc-protest", tags=["ERC Protest"])


@router.post("/process-conversation", response_model=ProcessConversationOutput, status_code=200)
async def process_conversation_endpoint(payload: ProcessConversationInput) -> ProcessConversationOutput:
    """Build a complete protest package from a shared conversation link."""
    result = await handle_process_conversation(payload)
    return ProcessConversationOutput(**result)


@router.post("/generate-letter", response_model=GenerateLetterOutput, status_code=200)
async def generate_letter_endpoint(payload: GenerateLetterInput) -> GenerateLetterOutput:
    """Compose a protest letter from caller-supplied research text."""
    result = await handle_generate_letter(payload)
    return GenerateLetterOutput(**result)


@router.post("/generate-prompt", response_model=GeneratePromptOutput, status_code=200)
async def generate_prompt_endpoint(payload: GeneratePromptInput) -> GeneratePromptOutput:
    """Build a COVID-19 government order research prompt."""
    result = await handle_generate_prompt(payload)
    return GeneratePromptOutput(**result)
