"""Research prompt generation - the prompt a user runs in ChatGPT before submitting a link."""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ...infrastructure.llm.prompts import build_research_prompt_user_content, get_research_prompt_system_message

logger = logging.getLogger(__name__)

NAICS_BUSINESS_TYPES = {
    "541110": "law firm",
    "541211": "accounting firm",
    "541330": "engineering firm",
    "561320": "temporary staffing agency",
    "722511": "restaurant",
    "623110": "nursing home",
    "622110": "hospital",
    "611110": "elementary or secondary school",
    "445110": "supermarket or grocery store",
    "448140": "clothing store",
    "236220": "construction company",
    "621111": "medical office",
}


def business_type_for_naics(naics_code: Optional[str]) -> str:
    return NAICS_BUSINESS_TYPES.get((naics_code or "").strip(), "business")


def split_location(location: str) -> Tuple[str, str]:
    """Split "City, State" into its parts; a bare value is treated as the city."""
    parts = (location or "").split(",")
    if len(parts) < 2:
        return (location or "").strip(), ""
    return parts[0].strip(), parts[1].strip()


def build_research_prompt(business_type: str, location: str, period: str) -> str:
    city, state = split_location(location)
    place = f"{city}, {state}" if state else city
    return (
        "Please provide all state, city, and county COVID-related government orders, proclamations, "
        "and public health orders in place during 2020-2021 that would affect a "
        f'"{business_type}" business located in {place}. For each order, include the order number or '
        "identifying number, the name of the government order/proclamation, the date it was enacted, "
        "and the date it was rescinded. If rescinded by subsequent orders, list subsequent order and "
        "dates. Additionally, please provide a detailed summary of 3-5 sentences for each order, "
        f"explaining what the order entailed and how it specifically impacted a {business_type} in "
        f"{period}. Provide possible reasons how {period} Covid Orders would have affected the "
        "business in that quarter. Include a link to the official source of every order."
    )


@dataclass(frozen=True)
class ResearchPrompt:
    prompt: str
    customized: bool


async def generate_research_prompt(
    business_type: str,
    location: str,
    period: str,
    generator=None,
    base_prompt: Optional[str] = None,
) -> ResearchPrompt:
    """
    Build the research prompt, optionally customized by the text generator.

    The deterministic prompt is returned when no generator is configured or
    the generator fails.
    """
    base = base_prompt or build_research_prompt(business_type, location, period)
    if generator is None:
        return ResearchPrompt(base, customized=False)

    city, state = split_location(location)
    try:
        customized = await generator.generate(
            get_research_prompt_system_message(),
            build_research_prompt_user_content(base, business_type, city, state, period),
        )
    except Exception as exc:
        logger.warning("Research prompt customization failed, using base prompt: %s", exc)
        return ResearchPrompt(base, customized=False)
    return ResearchPrompt(customized.strip() or base, customized=bool(customized.strip()))
