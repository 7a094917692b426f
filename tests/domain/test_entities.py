"""Unit tests for domain entities."""
import pytest

from erc_protest.domain.entities import (
    Attachment,
    AttachmentStatus,
    BusinessProfile,
    Document,
    ExtractionRequest,
    PipelineFailure,
    PipelineState,
    Speaker,
    Transcript,
    Turn,
    is_conversation_url,
)
from erc_protest.domain.errors import ErrorKind, NavigationError


@pytest.mark.unit
class TestConversationUrl:
    """Tests for conversation link validation."""

    @pytest.mark.parametrize("url", [
        "https://chatgpt.com/share/6790b1c2-0a1b-8000-9c2d-3e4f5a6b7c8d",
        "https://chat.openai.com/share/abc-123",
        "https://chatgpt.com/c/abc-123",
        "https://chatgpt.com/g/g-xyz-helper/c/abc-123",
    ])
    def test_accepts_conversation_links(self, url: str):
        assert is_conversation_url(url)

    @pytest.mark.parametrize("url", [
        "",
        "https://example.com/share/abc",
        "http://chatgpt.com/share/abc",
        "https://chatgpt.com/",
    ])
    def test_rejects_other_links(self, url: str):
        assert not is_conversation_url(url)


@pytest.mark.unit
class TestExtractionRequest:
    """Tests for ExtractionRequest validation."""

    def test_rejects_non_conversation_url(self, business_profile: BusinessProfile):
        with pytest.raises(ValueError):
            ExtractionRequest("https://example.com/page", business_profile)

    def test_rejects_missing_period(self):
        profile = BusinessProfile(name="Acme", tax_id="1", location="", period="")
        with pytest.raises(ValueError):
            ExtractionRequest("https://chatgpt.com/share/abc", profile)

    def test_profile_city_and_state(self, business_profile: BusinessProfile):
        assert business_profile.city == "Tampa"
        assert business_profile.state == "FL"


@pytest.mark.unit
class TestTranscript:
    """Tests for Transcript rendering."""

    def test_attributed_turns_render_with_labels(self):
        transcript = Transcript(
            turns=(Turn(Speaker.USER, "Question?"), Turn(Speaker.ASSISTANT, "Answer.")),
            strategy="structural",
        )

        assert transcript.is_attributed
        assert transcript.as_text() == "User: Question?\n\nChatGPT: Answer."

    def test_blank_blob_is_empty(self):
        assert Transcript(blob="  \n ").is_empty


@pytest.mark.unit
def test_document_resolved_attachments_filters_failures():
    document = Document(
        body_text="text",
        attachments=[
            Attachment("https://a.gov/x", "attachment_1_a_gov_x.pdf", "/tmp/a.pdf", AttachmentStatus.RESOLVED),
            Attachment("https://b.gov/y", "attachment_2_b_gov_y.pdf", None, AttachmentStatus.FAILED, "timeout"),
        ],
    )

    assert [a.original_url for a in document.resolved_attachments] == ["https://a.gov/x"]


@pytest.mark.unit
def test_pipeline_failure_carries_no_paths():
    failure = PipelineFailure(ErrorKind.NAVIGATION_FAILED, PipelineState.FETCHING, "unreachable")

    assert failure.to_dict() == {
        "success": False,
        "stage": "navigation_failed",
        "state": "fetching",
        "message": "unreachable",
    }


@pytest.mark.unit
def test_error_kind_is_attached_to_error_class():
    error = NavigationError("boom")

    assert error.kind == ErrorKind.NAVIGATION_FAILED
    assert error.message == "boom"
