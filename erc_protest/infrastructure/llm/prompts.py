"""Prompt builders for the text-generation capability."""
from typing import Iterable, Optional, Sequence

from ...domain.entities import BusinessProfile, ExtractedFact


def get_sanitization_system_message() -> str:
    """
    Get the system message for conversation sanitization.

    Returns:
        System message instructing the model to return only conversation text and links
    """
    return (
        "You are a specialized assistant that extracts COVID-19 related government orders and "
        "regulations from shared ChatGPT conversations.\n"
        "Your task is to SANITIZE the conversation out of the page HTML/serialization.\n"
        "CRITICAL RULES:\n"
        "- Return the ENTIRE conversation in full, cleaned of markup, scripts and UI text\n"
        "- Prefix each message with 'User:' or 'ChatGPT:' when the speaker is clear\n"
        "- Keep every hyperlink, copying each URL verbatim (never shorten, rewrite or invent URLs)\n"
        "- Do NOT summarize, comment on or add to the conversation"
    )


def build_sanitization_user_content(raw_html: str) -> str:
    return (
        "Here is the entire HTML of a ChatGPT page discussing COVID-19 government orders:\n"
        f"{raw_html}"
    )


def get_letter_system_message() -> str:
    return (
        "You are an expert in creating IRS Employee Retention Credit (ERC) protest letters. "
        "Create a formal protest letter following the structure, format and style of the example "
        "letter provided, using ONLY the specific business information and COVID-19 research data "
        "provided. The example is a format reference: never copy its facts, names, orders or dates. "
        "Copy dates, EINs and time periods exactly as given. Include the source URLs found in the "
        "research data verbatim, the way the example cites its sources."
    )


def _format_facts(facts: Sequence[ExtractedFact]) -> str:
    if not facts:
        return "(no specific orders were identified automatically)"
    return "\n".join(f"{index}. {fact.raw_text}" for index, fact in enumerate(facts, start=1))


def _format_links(links: Iterable[str]) -> str:
    lines = [f"- {link}" for link in links]
    return "\n".join(lines) if lines else "(none)"


def build_letter_user_content(
    profile: BusinessProfile,
    today: str,
    facts: Sequence[ExtractedFact],
    links: Sequence[str],
    example_letter: str,
    transcript_text: Optional[str] = None,
) -> str:
    """
    Build the letter generation request.

    Args:
        profile: Business metadata
        today: Literal date string to print on the letter
        facts: Government-order statements extracted from the research
        links: Source URLs found in the research
        example_letter: Worked example used only as a format exemplar
        transcript_text: Full research transcript, included in "transcript" mode

    Returns:
        User message content for the generation request
    """
    sections = [
        "Please create an ERC protest letter using the following information:",
        "",
        "BUSINESS INFORMATION:",
        f"Business Name: {profile.name}",
        f"EIN: {profile.tax_id}",
        f"Location: {profile.location}",
        f"Time Period: {profile.period}",
        f"Business Type: {profile.business_category or 'business'}",
        "",
        "GOVERNMENT ORDERS IDENTIFIED IN THE RESEARCH:",
        _format_facts(facts),
        "",
        "SOURCE URLS FROM THE RESEARCH (cite them verbatim):",
        _format_links(links),
    ]
    if transcript_text:
        sections += [
            "",
            "COVID-19 RESEARCH DATA FROM CHATGPT, THIS IS THE DATA THAT IS ACTUALLY RELEVANT TO OUR PROTEST LETTER:",
            transcript_text,
        ]
    sections += [
        "",
        "FORMAT EXAMPLE (FOLLOW THIS FORMAT AND STYLE, NOT ITS CONTENT):",
        example_letter or "(no example available - use a formal IRS protest letter layout)",
        "",
        (
            f"Create a comprehensive protest letter specific to {profile.period} and {profile.location}. "
            f"Date the letter exactly: {today}. Refer to the claim period exactly as: {profile.period}."
        ),
    ]
    return "\n".join(sections)


def get_research_prompt_system_message() -> str:
    return (
        "You are a tool that generates COVID-19 government order research prompts. "
        "Your output must be ONLY the finished prompt with no explanations, introductions, or "
        "meta-commentary. Do not include phrases like \"Here is a prompt\". Just provide the actual "
        "prompt content that the user will copy and paste."
    )


def build_research_prompt_user_content(base_prompt: str, business_type: str, city: str, state: str, period: str) -> str:
    return (
        f"Create a detailed research prompt about COVID-19 government orders for a {business_type} "
        f"in {city}, {state} during {period}.\n\n"
        f"Base your response on this template but improve and expand it:\n{base_prompt}\n\n"
        "Make it more specific with questions relevant to this business type and time period. "
        "Format with numbered sections if appropriate, but do NOT include any explanatory text. "
        "Your entire response should be ONLY the prompt that will be copied and pasted."
    )
