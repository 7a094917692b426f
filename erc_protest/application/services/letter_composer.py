"""Letter composition - generative letter with a deterministic template fallback."""
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Optional, Sequence

from ...domain.entities import BusinessProfile, ExtractedFact, Transcript
from ...domain.errors import GenerationError
from ...infrastructure.llm.prompts import build_letter_user_content, get_letter_system_message

logger = logging.getLogger(__name__)

COMPOSE_MODES = ("transcript", "facts")

GENERIC_ORDERS_PARAGRAPH = (
    "1. COVID-19 restrictions in {location} significantly impacted our {category} operations "
    "during {period}.\n\n"
    "2. Social distancing requirements mandated by state and local authorities reduced our "
    "operational capacity.\n\n"
    "3. Enhanced health and safety protocols required by government orders created substantial "
    "modifications to our standard business procedures."
)

ATTESTATION = (
    'Attestation: "Under penalties of perjury, I declare that I submitted the protest and '
    "accompanying documents, and to the best of my personal knowledge and belief, the information "
    'stated in the protest and accompanying documents is true, correct, and complete."'
)


@dataclass(frozen=True)
class ComposedLetter:
    text: str
    generated: bool
    error: Optional[str] = None


def format_letter_date(day: date) -> str:
    return day.strftime("%m/%d/%Y")


def load_example_letter(path: Optional[Path]) -> str:
    """Read the worked example letter; a missing file yields an empty example."""
    if path is None:
        return ""
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Example letter not available at %s: %s", path, exc)
        return ""


def build_fallback_letter(
    profile: BusinessProfile,
    facts: Sequence[ExtractedFact],
    today: str,
    sources: Sequence[str] = (),
) -> str:
    """Deterministic protest letter built only from the business profile and facts."""
    category = profile.business_category or "business"
    if facts:
        orders = "\n\n".join(f"{index}. {fact.raw_text}" for index, fact in enumerate(facts, start=1))
    else:
        orders = GENERIC_ORDERS_PARAGRAPH.format(
            location=profile.location or "our area",
            category=category,
            period=profile.period,
        )

    lines = [
        today,
        "Internal Revenue Service",
        "Ogden, UT 84201",
        "",
        f"EIN: {profile.tax_id}",
        f"Taxpayer Name: {profile.name}",
        f"RE: Formal Protest to Letter 105 - ERC Disallowance for {profile.period}",
        f"Tax Period: {profile.period}",
        "",
        "Dear Appeals Officer,",
        "",
        (
            f"We write in response to the IRS notice disallowing {profile.name}'s Employee Retention "
            f"Credit (ERC) claim for {profile.period}. The disallowance was based on an assertion that "
            '"no government orders were in effect" that caused a suspension of our operations. We '
            "respectfully disagree. Multiple federal, state, county, and city government orders were "
            f"active during {profile.period}, and they did impose COVID-19 related restrictions and "
            f"requirements that partially suspended or limited {profile.name}'s normal operations."
        ),
        "",
        (
            "Based on the COVID-19 research obtained (see attachments), the following government "
            "orders directly impacted our business operations:"
        ),
        "",
        orders,
        "",
        (
            f"In light of these facts and supporting authorities, {profile.name} qualifies for the "
            f"Employee Retention Credit for {profile.period} due to a partial suspension of its "
            "operations caused by COVID-19 government orders. We have shown that government orders "
            "were in effect during the quarter and that they had a direct, significant impact on our "
            "ability to operate, consistent with IRS Notices 2021-20, 2021-23, and 2021-49."
        ),
        "",
        (
            f"We respectfully request that the IRS reconsider and reverse the disallowance of our "
            f"{profile.period} ERC. The credit we claimed was fully in line with the law and guidance."
        ),
    ]
    if sources:
        lines += ["", "Sources:"] + [f"- {url}" for url in sources]
    lines += [
        "",
        ATTESTATION,
        "",
        "Sincerely,",
        "",
        "[Authorized Representative]",
        profile.name,
    ]
    return "\n".join(lines)


class LetterComposer:
    """
    Builds one generation request from the business profile, facts, optional
    transcript and worked example; falls back to the deterministic template
    when generation fails or returns nothing.
    """

    def __init__(
        self,
        generator=None,
        example_letter: str = "",
        mode: str = "transcript",
        today: Callable[[], date] = date.today,
    ):
        if mode not in COMPOSE_MODES:
            raise ValueError(f"Unknown compose mode: {mode}")
        self.generator = generator
        self.example_letter = example_letter
        self.mode = mode
        self.today = today

    async def compose(
        self,
        profile: BusinessProfile,
        facts: Sequence[ExtractedFact],
        transcript: Optional[Transcript] = None,
    ) -> ComposedLetter:
        today = format_letter_date(self.today())
        links = list(transcript.links) if transcript is not None else []

        if self.generator is None:
            logger.info("No text generator configured, composing template letter")
            return ComposedLetter(build_fallback_letter(profile, facts, today, links), generated=False)

        transcript_text = None
        if self.mode == "transcript" and transcript is not None and not transcript.is_empty:
            transcript_text = transcript.as_text()

        user_content = build_letter_user_content(
            profile,
            today,
            facts,
            links,
            self.example_letter,
            transcript_text=transcript_text,
        )
        try:
            logger.info("Generating protest letter (%s mode, %d facts, %d links)", self.mode, len(facts), len(links))
            text = await self.generator.generate(get_letter_system_message(), user_content)
            if not text or not text.strip():
                raise GenerationError("Generator returned an empty letter")
            logger.info("Letter successfully generated (%d chars)", len(text))
            return ComposedLetter(text.strip(), generated=True)
        except Exception as exc:
            logger.warning("Letter generation failed, using template letter: %s", exc)
            return ComposedLetter(
                build_fallback_letter(profile, facts, today, links),
                generated=False,
                error=str(exc) or type(exc).__name__,
            )
