"""Transcript entity - conversational text extracted from a chat page."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


class Speaker(str, Enum):
    """Speaker of a conversation turn."""
    USER = "user"
    ASSISTANT = "assistant"


SPEAKER_LABELS = {
    Speaker.USER: "User",
    Speaker.ASSISTANT: "ChatGPT",
}


@dataclass(frozen=True)
class Turn:
    """One attributed turn of the conversation."""
    speaker: Speaker
    text: str


@dataclass(frozen=True)
class Transcript:
    """
    Ordered speaker-attributed turns, or a single flattened blob when
    attribution is unavailable.

    ``strategy`` names the extraction strategy that produced the transcript and
    ``links`` holds the absolute URLs found in the page, first-seen order.
    """
    turns: Tuple[Turn, ...] = ()
    blob: str = ""
    strategy: str = "empty"
    links: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_attributed(self) -> bool:
        return bool(self.turns)

    @property
    def is_empty(self) -> bool:
        return not self.as_text().strip()

    def as_text(self) -> str:
        """Render the transcript as plain text, turns separated by blank lines."""
        if self.turns:
            return "\n\n".join(
                f"{SPEAKER_LABELS[turn.speaker]}: {turn.text}" for turn in self.turns
            )
        return self.blob


EMPTY_TRANSCRIPT = Transcript()
