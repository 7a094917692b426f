"""Unit tests for letter composition."""
from pathlib import Path

import pytest

from erc_protest.application.services.letter_composer import (
    GENERIC_ORDERS_PARAGRAPH,
    LetterComposer,
    build_fallback_letter,
    load_example_letter,
)
from erc_protest.domain.entities import ExtractedFact, Transcript
from erc_protest.domain.errors import GenerationError
from conftest import FakeGenerator

FACTS = [
    ExtractedFact(
        raw_text="Executive Order 20-91 ordered all persons in Florida to limit movement",
        source_paragraph="Executive Order 20-91 ordered all persons in Florida to limit movement.",
    ),
    ExtractedFact(
        raw_text="Hillsborough County Emergency Order 2020-08 closed dine-in service",
        source_paragraph="Hillsborough County Emergency Order 2020-08 closed dine-in service.",
    ),
]

TRANSCRIPT = Transcript(
    blob="Executive Order 20-91 ordered all persons in Florida to limit movement. https://flgov.com/eo-20-91",
    strategy="heuristic",
    links=("https://flgov.com/eo-20-91",),
)


@pytest.mark.unit
class TestFallbackLetter:
    """Tests for the deterministic template letter."""

    def test_contains_every_fact_verbatim(self, business_profile):
        letter = build_fallback_letter(business_profile, FACTS, "03/14/2024")

        for fact in FACTS:
            assert fact.raw_text in letter
        assert letter.startswith("03/14/2024")
        assert "EIN: 98-7654321" in letter
        assert "Q2 2020" in letter

    def test_empty_facts_use_generic_paragraph(self, business_profile):
        letter = build_fallback_letter(business_profile, [], "03/14/2024")

        expected = GENERIC_ORDERS_PARAGRAPH.format(location="Tampa, FL", category="dental practice", period="Q2 2020")
        assert expected in letter

    def test_sources_are_listed(self, business_profile):
        letter = build_fallback_letter(business_profile, FACTS, "03/14/2024", ["https://flgov.com/eo-20-91"])

        assert "Sources:\n- https://flgov.com/eo-20-91" in letter


@pytest.mark.unit
class TestLetterComposer:
    """Tests for LetterComposer."""

    @pytest.mark.asyncio
    async def test_generated_letter_is_returned(self, business_profile, fixed_today):
        generator = FakeGenerator("  Dear Appeals Officer, ...  ")
        composer = LetterComposer(generator, example_letter="EXAMPLE LETTER BODY", today=fixed_today)

        letter = await composer.compose(business_profile, FACTS, TRANSCRIPT)

        assert letter.generated
        assert letter.text == "Dear Appeals Officer, ..."
        _, user_content = generator.calls[0]
        assert "Business Name: Acme Dental Group LLC" in user_content
        assert "Date the letter exactly: 03/14/2024" in user_content
        assert "EXAMPLE LETTER BODY" in user_content
        assert FACTS[0].raw_text in user_content
        assert "- https://flgov.com/eo-20-91" in user_content
        assert TRANSCRIPT.blob in user_content

    @pytest.mark.asyncio
    async def test_facts_mode_omits_transcript(self, business_profile, fixed_today):
        generator = FakeGenerator("Letter")
        composer = LetterComposer(generator, mode="facts", today=fixed_today)

        await composer.compose(business_profile, FACTS, TRANSCRIPT)

        _, user_content = generator.calls[0]
        assert TRANSCRIPT.blob not in user_content
        assert FACTS[1].raw_text in user_content

    @pytest.mark.asyncio
    @pytest.mark.parametrize("generator", [
        FakeGenerator(error=GenerationError("Generation timed out after 120s")),
        FakeGenerator(error=RuntimeError("connection reset")),
        FakeGenerator("   "),
    ])
    async def test_generation_failure_falls_back_to_template(self, business_profile, fixed_today, generator):
        composer = LetterComposer(generator, today=fixed_today)

        letter = await composer.compose(business_profile, FACTS, TRANSCRIPT)

        assert not letter.generated
        assert letter.error
        assert letter.text.strip()
        for fact in FACTS:
            assert fact.raw_text in letter.text
        assert "03/14/2024" in letter.text

    @pytest.mark.asyncio
    async def test_no_generator_uses_template(self, business_profile, fixed_today):
        letter = await LetterComposer(today=fixed_today).compose(business_profile, [])

        assert not letter.generated
        assert letter.error is None
        assert "COVID-19 restrictions in Tampa, FL" in letter.text

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            LetterComposer(mode="summary")


@pytest.mark.unit
def test_load_example_letter(tmp_path: Path):
    example = tmp_path / "example.txt"
    example.write_text("Example body", encoding="utf-8")

    assert load_example_letter(example) == "Example body"
    assert load_example_letter(tmp_path / "missing.txt") == ""
    assert load_example_letter(None) == ""
