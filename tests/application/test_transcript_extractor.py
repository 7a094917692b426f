"""Unit tests for the transcript extraction chain."""
import pytest

from erc_protest.application.services.transcript_extractor import (
    TranscriptExtractor,
    extract_degenerate,
    extract_heuristic,
    extract_structural,
    strip_markup_for_sanitization,
)
from erc_protest.domain.entities import EMPTY_TRANSCRIPT, Speaker
from erc_protest.domain.errors import GenerationError
from conftest import FakeGenerator

LONG_PARAGRAPH = (
    "Pinellas County Emergency Order 20-09 closed all public beaches and limited restaurant "
    "dining rooms to fifty percent capacity for the remainder of the quarter."
)

HEURISTIC_HTML = f"""
<html><body><main>
  <div class="x1"><div class="x2"><p>{LONG_PARAGRAPH}</p><span>Copy</span></div></div>
  <div>Share</div>
</main></body></html>
"""

SHORT_HTML = "<html><body><div><span>Hi</span> <span>there</span></div></body></html>"


@pytest.mark.unit
class TestStructuralStrategy:
    """Tests for role-attributed extraction."""

    def test_extracts_attributed_turns_in_order(self, make_snapshot, conversation_html: str):
        transcript = extract_structural(make_snapshot(conversation_html))

        assert transcript.strategy == "structural"
        assert [turn.speaker for turn in transcript.turns] == [Speaker.USER, Speaker.ASSISTANT]
        assert transcript.turns[0].text.startswith("List the COVID-19 government orders")
        assert "Executive Order 20-91" in transcript.turns[1].text

    def test_inlines_link_targets_and_drops_chrome(self, make_snapshot, conversation_html: str):
        transcript = extract_structural(make_snapshot(conversation_html))
        text = transcript.as_text()

        assert "EO 20-91 (https://www.flgov.com/wp-content/uploads/orders/2020/EO_20-91-compressed.pdf)" in text
        assert transcript.links == ("https://www.flgov.com/wp-content/uploads/orders/2020/EO_20-91-compressed.pdf",)
        assert "window.__state" not in text
        assert "New chat" not in text

    def test_merges_consecutive_turns_of_same_speaker(self, make_snapshot):
        html = (
            '<div data-message-author-role="assistant"><p>First part.</p></div>'
            '<div data-message-author-role="assistant"><p>Second part.</p></div>'
        )

        transcript = extract_structural(make_snapshot(html))

        assert len(transcript.turns) == 1
        assert transcript.turns[0].text == "First part.\n\nSecond part."

    def test_returns_none_without_role_attributes(self, make_snapshot):
        assert extract_structural(make_snapshot(HEURISTIC_HTML)) is None


@pytest.mark.unit
class TestFallbackStrategies:
    """Tests for heuristic and degenerate strategies."""

    def test_heuristic_keeps_innermost_prose_blocks(self, make_snapshot):
        transcript = extract_heuristic(make_snapshot(HEURISTIC_HTML))

        assert transcript.strategy == "heuristic"
        assert transcript.blob == LONG_PARAGRAPH
        assert not transcript.is_attributed

    def test_heuristic_returns_none_for_short_text(self, make_snapshot):
        assert extract_heuristic(make_snapshot(SHORT_HTML)) is None

    def test_degenerate_strips_tags_and_scripts(self, make_snapshot):
        html = "<html><script>var a = 1;</script><body><b>Hi</b>&amp;<i>bye</i></body></html>"

        transcript = extract_degenerate(make_snapshot(html))

        assert transcript.blob == "Hi & bye"

    def test_sanitization_markup_is_capped(self):
        markup = "<p>" + "a" * 500 + "</p><script>secret()</script>"

        cleaned = strip_markup_for_sanitization(markup, max_chars=100)

        assert len(cleaned) == 100
        assert "secret" not in strip_markup_for_sanitization(markup)


@pytest.mark.unit
class TestTranscriptExtractor:
    """Tests for strategy ordering in TranscriptExtractor."""

    def test_strategy_order_without_generator(self):
        assert TranscriptExtractor().strategy_names == ["structural", "heuristic", "degenerate"]

    def test_generative_runs_before_degenerate(self):
        extractor = TranscriptExtractor(FakeGenerator("text"))

        assert extractor.strategy_names == ["structural", "heuristic", "generative", "degenerate"]

    def test_sanitize_first_moves_generative_to_front(self):
        extractor = TranscriptExtractor(FakeGenerator("text"), sanitize_first=True)

        assert extractor.strategy_names[0] == "generative"

    @pytest.mark.asyncio
    async def test_first_successful_strategy_wins(self, make_snapshot, conversation_html: str):
        generator = FakeGenerator("should not be called")

        transcript = await TranscriptExtractor(generator).extract(make_snapshot(conversation_html))

        assert transcript.strategy == "structural"
        assert generator.calls == []

    @pytest.mark.asyncio
    async def test_generative_used_when_dom_strategies_fail(self, make_snapshot):
        generator = FakeGenerator("ChatGPT: Executive Order 20-52 declared a state of emergency. https://flgov.com/eo-20-52")

        transcript = await TranscriptExtractor(generator).extract(make_snapshot(SHORT_HTML))

        assert transcript.strategy == "generative"
        assert transcript.links == ("https://flgov.com/eo-20-52",)
        assert len(generator.calls) == 1

    @pytest.mark.asyncio
    async def test_generator_failure_falls_through_to_degenerate(self, make_snapshot):
        generator = FakeGenerator(error=GenerationError("timed out"))

        transcript = await TranscriptExtractor(generator).extract(make_snapshot(SHORT_HTML))

        assert transcript.strategy == "degenerate"
        assert transcript.blob == "Hi there"

    @pytest.mark.asyncio
    async def test_all_strategies_empty_returns_empty_transcript(self, make_snapshot):
        transcript = await TranscriptExtractor().extract(make_snapshot("<html><body>  </body></html>"))

        assert transcript is EMPTY_TRANSCRIPT
        assert transcript.is_empty
