"""Pydantic models for ERC protest operations."""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, constr, field_validator

from ...domain.entities import is_conversation_url


class BusinessInfoInput(BaseModel):
    """Business fields shared by the protest endpoints."""

    business_name: constr(strip_whitespace=True, min_length=1) = Field(..., description="Legal business name")
    ein: constr(strip_whitespace=True, min_length=1) = Field(..., description="Employer Identification Number")
    location: constr(strip_whitespace=True) = Field("", description="Business location as 'City, State'")
    time_period: constr(strip_whitespace=True, min_length=1) = Field(
        ..., description="Claim quarter being protested, e.g. 'Q2 2020'"
    )
    business_type: Optional[constr(strip_whitespace=True)] = Field(
        None, description="Business category used in the letter (defaults to 'business')"
    )


class ProcessConversationInput(BusinessInfoInput):
    """Request model for running the full protest pipeline."""

    conversation_url: constr(strip_whitespace=True, min_length=1) = Field(
        ..., description="Shared ChatGPT conversation link containing the COVID-19 order research"
    )
    tracking_id: Optional[constr(strip_whitespace=True, min_length=1)] = Field(
        None, description="Submission tracking id; enables artifact publishing and status reporting"
    )

    @field_validator("conversation_url")
    @classmethod
    def _check_conversation_url(cls, value: str) -> str:
        if not is_conversation_url(value):
            raise ValueError("conversation_url must be a shared ChatGPT conversation link")
        return value


class AttachmentOutput(BaseModel):
    filename: str
    original_url: str
    index: Optional[int] = Field(None, description="Attachment number used in the letter reference")


class ProcessConversationOutput(BaseModel):
    """Response model for the protest pipeline; failures carry only stage and message."""

    success: bool = Field(..., description="Whether a complete package was produced")
    letter_text: Optional[str] = None
    attachments: List[AttachmentOutput] = Field(default_factory=list)
    primary_pdf_path: Optional[str] = None
    archive_path: Optional[str] = None
    output_dir: Optional[str] = None
    request_id: Optional[str] = None
    transcript_strategy: Optional[str] = None
    used_fallback_letter: Optional[bool] = None
    warnings: List[str] = Field(default_factory=list)
    links: Optional[Dict[str, str]] = None
    stage: Optional[str] = Field(None, description="Error taxonomy value when success is false")
    state: Optional[str] = Field(None, description="Pipeline state the failure occurred in")
    message: Optional[str] = None


class GenerateLetterInput(BusinessInfoInput):
    """Request model for composing a letter from caller-supplied research text."""

    research_text: constr(strip_whitespace=True, min_length=1) = Field(
        ..., description="COVID-19 order research (e.g. pasted conversation text)"
    )


class GenerateLetterOutput(BaseModel):
    success: bool
    letter: str
    used_fallback_letter: bool
    facts: List[str] = Field(default_factory=list)


class GeneratePromptInput(BaseModel):
    """Request model for building a COVID-19 order research prompt."""

    location: constr(strip_whitespace=True, min_length=1) = Field(..., description="'City, State'")
    time_period: constr(strip_whitespace=True, min_length=1)
    business_type: Optional[constr(strip_whitespace=True)] = None
    naics_code: Optional[constr(strip_whitespace=True)] = Field(
        None, description="NAICS code used to infer the business type when business_type is omitted"
    )
    base_prompt: Optional[str] = Field(None, description="Template to customize instead of the built-in one")
    customize: bool = Field(True, description="Ask the text generator to tailor the prompt")


class GeneratePromptOutput(BaseModel):
    success: bool
    prompt: str
    customized: bool
