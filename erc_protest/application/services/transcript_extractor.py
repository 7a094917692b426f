"""Transcript extraction - ordered fallback chain over a captured page."""
import html as html_lib
import inspect
import logging
import re
from typing import Awaitable, Callable, List, Optional, Tuple, Union

from bs4 import BeautifulSoup

from ...domain.entities import EMPTY_TRANSCRIPT, PageSnapshot, Speaker, Transcript, Turn
from ...infrastructure.llm.prompts import build_sanitization_user_content, get_sanitization_system_message
from .urls import find_urls

logger = logging.getLogger(__name__)

TURN_CONTAINER_SELECTOR = 'article[data-testid^="conversation-turn"], div[data-testid^="conversation-turn"]'
ROLE_SELECTOR = "[data-message-author-role]"

NOISE_TAGS = ("script", "style", "noscript", "svg", "template", "iframe", "nav", "header", "footer", "button", "form")
PARAGRAPH_TAGS = ("p", "h1", "h2", "h3", "h4", "h5", "h6", "pre", "blockquote", "table", "ul", "ol")
LINE_TAGS = ("li", "tr", "div", "section", "article")
HEURISTIC_CONTAINERS = ("article", "section", "div", "p", "li", "pre", "blockquote", "td")

# Rendered text below this length is treated as UI chrome
MIN_PROSE_CHARS = 60
MAX_SANITIZE_MARKUP_CHARS = 300_000

Strategy = Callable[[PageSnapshot], Union[Optional[Transcript], Awaitable[Optional[Transcript]]]]


def _prepare(markup: str) -> BeautifulSoup:
    """Parse markup, drop non-content tags, inline link targets and mark block boundaries."""
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all(NOISE_TAGS):
        tag.decompose()

    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href.startswith(("http://", "https://")):
            continue
        label = anchor.get_text(" ", strip=True)
        if href in label:
            continue
        anchor.replace_with(f"{label} ({href})" if label else href)

    for br in soup.find_all("br"):
        br.replace_with("\n")
    for tag in soup.find_all(PARAGRAPH_TAGS):
        tag.append("\n\n")
    for tag in soup.find_all(LINE_TAGS):
        tag.append("\n")
    return soup


def _normalize(text: str) -> str:
    lines = [re.sub(r"[ \t\r\f\v\u00a0]+", " ", line).strip() for line in text.split("\n")]
    return re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip()


def _text_of(element) -> str:
    return _normalize(element.get_text())


def _transcript_from_text(text: str, strategy: str) -> Optional[Transcript]:
    text = _normalize(text)
    if not text:
        return None
    return Transcript(blob=text, strategy=strategy, links=tuple(find_urls(text)))


def extract_structural(snapshot: PageSnapshot) -> Optional[Transcript]:
    """Per-turn containers carrying an explicit author role attribute."""
    soup = _prepare(snapshot.html)
    containers = soup.select(TURN_CONTAINER_SELECTOR)
    if containers:
        groups = [container.select(ROLE_SELECTOR) for container in containers]
    else:
        groups = [[element] for element in soup.select(ROLE_SELECTOR)]

    turns: List[Turn] = []
    for group in groups:
        if not group:
            continue
        try:
            speaker = Speaker(group[0].get("data-message-author-role", "").strip().lower())
        except ValueError:
            continue
        parts = [
            _text_of(element)
            for element in group
            if element.get("data-message-author-role", "").strip().lower() == speaker.value
        ]
        text = "\n\n".join(part for part in parts if part)
        if not text:
            continue
        if turns and turns[-1].speaker == speaker:
            turns[-1] = Turn(speaker, f"{turns[-1].text}\n\n{text}")
        else:
            turns.append(Turn(speaker, text))

    if not turns:
        return None
    full_text = "\n\n".join(turn.text for turn in turns)
    return Transcript(turns=tuple(turns), strategy="structural", links=tuple(find_urls(full_text)))


def extract_heuristic(snapshot: PageSnapshot) -> Optional[Transcript]:
    """Innermost generic containers whose text is long enough to be prose, in DOM order."""
    soup = _prepare(snapshot.html)
    root = soup.find("main") or soup.body or soup

    candidates = [
        element
        for element in root.find_all(HEURISTIC_CONTAINERS)
        if len(element.get_text(" ", strip=True)) >= MIN_PROSE_CHARS
    ]
    has_prose_descendant = set()
    for element in candidates:
        for parent in element.parents:
            has_prose_descendant.add(id(parent))

    blocks = [_text_of(element) for element in candidates if id(element) not in has_prose_descendant]
    return _transcript_from_text("\n\n".join(block for block in blocks if block), "heuristic")


def extract_degenerate(snapshot: PageSnapshot) -> Optional[Transcript]:
    """Strip every tag and collapse whitespace."""
    markup = re.sub(r"(?is)<(script|style|noscript|svg)\b.*?</\1\s*>", " ", snapshot.html or "")
    text = html_lib.unescape(re.sub(r"<[^>]*>", " ", markup))
    text = re.sub(r"\s+", " ", text).strip()
    return _transcript_from_text(text, "degenerate")


def strip_markup_for_sanitization(markup: str, max_chars: int = MAX_SANITIZE_MARKUP_CHARS) -> str:
    """Drop script/style payloads and cap the markup handed to the generator."""
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all(("script", "style", "noscript", "svg", "template")):
        tag.decompose()
    cleaned = str(soup)
    if len(cleaned) > max_chars:
        logger.warning("Page markup truncated from %d to %d chars for sanitization", len(cleaned), max_chars)
        cleaned = cleaned[:max_chars]
    return cleaned


class TranscriptExtractor:
    """
    Tries each strategy in order; the first non-empty transcript wins.

    Order: structural -> heuristic -> generative -> degenerate. With
    ``sanitize_first`` the generative strategy runs before the DOM strategies.
    The generative strategy is skipped when no generator is configured.
    """

    def __init__(self, generator=None, sanitize_first: bool = False, max_markup_chars: int = MAX_SANITIZE_MARKUP_CHARS):
        self.generator = generator
        self.max_markup_chars = max_markup_chars
        self.strategies: List[Tuple[str, Strategy]] = [
            ("structural", extract_structural),
            ("heuristic", extract_heuristic),
        ]
        if generator is not None:
            position = 0 if sanitize_first else len(self.strategies)
            self.strategies.insert(position, ("generative", self.extract_generative))
        self.strategies.append(("degenerate", extract_degenerate))

    @property
    def strategy_names(self) -> List[str]:
        return [name for name, _ in self.strategies]

    async def extract_generative(self, snapshot: PageSnapshot) -> Optional[Transcript]:
        markup = strip_markup_for_sanitization(snapshot.html, self.max_markup_chars)
        logger.info("Sending %d chars of markup for generative sanitization", len(markup))
        text = await self.generator.generate(
            get_sanitization_system_message(),
            build_sanitization_user_content(markup),
        )
        return _transcript_from_text(text, "generative")

    async def extract(self, snapshot: PageSnapshot) -> Transcript:
        for name, strategy in self.strategies:
            try:
                result = strategy(snapshot)
                if inspect.isawaitable(result):
                    result = await result
            except Exception as exc:
                logger.warning("Transcript strategy '%s' failed: %s", name, exc)
                continue

            if result is not None and not result.is_empty:
                logger.info(
                    "Transcript extracted with '%s' strategy (%d chars, %d turns, %d links)",
                    name,
                    len(result.as_text()),
                    len(result.turns),
                    len(result.links),
                )
                return result
            logger.info("Transcript strategy '%s' produced nothing, trying next", name)

        logger.warning("Every transcript strategy came back empty")
        return EMPTY_TRANSCRIPT
