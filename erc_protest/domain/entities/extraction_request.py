"""Extraction request - immutable input to the protest pipeline."""
import re
from dataclasses import dataclass
from typing import Optional

CONVERSATION_URL_PATTERN = re.compile(
    r"^https://(?:www\.)?(?:chatgpt\.com|chat\.openai\.com)/(?:share|c|g/[\w-]+/c)/[\w-]+/?(?:[?#].*)?$",
    re.IGNORECASE,
)


def is_conversation_url(url: str) -> bool:
    """Check whether a URL looks like a shared AI conversation link."""
    return bool(url) and CONVERSATION_URL_PATTERN.match(url.strip()) is not None


@dataclass(frozen=True)
class BusinessProfile:
    """Business metadata used to build the protest letter."""
    name: str
    tax_id: str
    location: str
    period: str
    business_category: str = "business"

    @property
    def city(self) -> str:
        return self.location.split(",")[0].strip() if self.location else ""

    @property
    def state(self) -> str:
        parts = self.location.split(",") if self.location else []
        return parts[1].strip() if len(parts) > 1 else ""


@dataclass(frozen=True)
class ExtractionRequest:
    """Pipeline input - owned by the caller, never mutated."""
    conversation_url: str
    business_profile: BusinessProfile
    tracking_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not is_conversation_url(self.conversation_url):
            raise ValueError(f"Not a recognised conversation URL: {self.conversation_url}")
        if not self.business_profile.name or not self.business_profile.period:
            raise ValueError("Business name and time period are required")
