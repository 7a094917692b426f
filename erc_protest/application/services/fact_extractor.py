"""Fact extraction - pattern-matched government-order statements from a transcript."""
import logging
import re
from typing import List, Optional, Union

from ...domain.entities import ExtractedFact, Speaker, Transcript

logger = logging.getLogger(__name__)

MAX_FACTS = 10
MIN_FACT_CHARS = 20
MAX_FALLBACK_PARAGRAPH_CHARS = 500

TOPIC_PATTERN = re.compile(
    r"\b(?:covid(?:-19)?|coronavirus|pandemic|emergenc(?:y|ies)|restrict(?:ion|ions|ed|ing|s)?"
    r"|closures?|closed|shut\s?downs?|lockdowns?|stay[- ]at[- ]home|social distancing"
    r"|quarantines?|capacity|public health)\b",
    re.IGNORECASE,
)
DIRECTIVE_PATTERN = re.compile(
    r"\b(?:orders?|ordered|directives?|mandates?|mandated|proclamations?|decrees?)\b",
    re.IGNORECASE,
)

# Tried in order against every candidate paragraph
ORDER_PATTERNS = (
    (
        "named_order",
        re.compile(
            r"\b(?:Executive|Governor'?s|Mayor'?s|County|City|State|Emergency|Administrative|Supplemental)"
            r"\s+Order(?:\s+No\.)?[^.\n]*",
            re.IGNORECASE,
        ),
    ),
    (
        "health_department",
        re.compile(
            r"\b(?:Department of (?:Public )?Health(?: Services)?|Health Department|Public Health Order"
            r"|Health Officer(?:'s)? Order|Board of Health)\b[^.\n]*",
            re.IGNORECASE,
        ),
    ),
    (
        "numbered_order",
        re.compile(
            r"\b(?:Order|Directive|Proclamation)\s+(?:No\.\s*|Number\s+|#\s*)?\d[\w-]*[^.\n]*",
            re.IGNORECASE,
        ),
    ),
    (
        "emergency_declaration",
        re.compile(
            r"\b(?:declar\w*|proclaim\w*|proclamation)\b[^.\n]*"
            r"\b(?:state of (?:emergency|disaster)|public health emergency|disaster emergency|emergency)\b[^.\n]*",
            re.IGNORECASE,
        ),
    ),
    (
        "topic_restriction",
        re.compile(
            r"\b(?:COVID(?:-19)?|coronavirus|pandemic)\b[^.\n]*"
            r"\b(?:restrict\w*|clos\w+|limit\w*|capacity|suspend\w*|prohibit\w*|shut\w*)\b[^.\n]*",
            re.IGNORECASE,
        ),
    ),
)

_LEADING_NOISE = re.compile(r"^(?:(?:User|ChatGPT)\s*:\s*)?(?:[-*•>#]+\s*|\d+[.)]\s+)*")


def split_paragraphs(text: str) -> List[str]:
    return [p.strip() for p in re.split(r"\n\s*\n", text or "") if p.strip()]


def is_candidate_paragraph(paragraph: str) -> bool:
    """Topic words alone match too much; a directive word must also be present."""
    return bool(TOPIC_PATTERN.search(paragraph)) and bool(DIRECTIVE_PATTERN.search(paragraph))


def _clean(text: str) -> str:
    text = _LEADING_NOISE.sub("", text.strip())
    text = text.replace("**", "").replace("__", "")
    return re.sub(r"\s+", " ", text).strip(" -:;,")


def _quarter_tokens(period: Optional[str]) -> List[str]:
    if not period or not period.strip():
        return []
    tokens = [period.strip()]
    match = re.search(r"\bQ([1-4])\s*[-/ ]?\s*(\d{4})\b", period, re.IGNORECASE)
    if match:
        quarter, year = match.groups()
        tokens += [f"Q{quarter} {year}", f"Q{quarter}-{year}", f"Q{quarter}/{year}"]
    return tokens


class _FactSet:
    """First-seen ordered facts, de-duplicated by text and by containment."""

    def __init__(self, limit: int):
        self.limit = limit
        self.facts: List[ExtractedFact] = []

    @property
    def full(self) -> bool:
        return len(self.facts) >= self.limit

    def add(self, text: str, paragraph: str) -> bool:
        text = _clean(text)
        if len(text) < MIN_FACT_CHARS or self.full:
            return False
        for existing in self.facts:
            if text in existing.raw_text:
                return False

        fact = ExtractedFact(raw_text=text, source_paragraph=paragraph)
        covered = [i for i, existing in enumerate(self.facts) if existing.raw_text in text]
        if covered:
            # The longer statement takes the slot of the first fragment it covers
            self.facts[covered[0]] = fact
            self.facts = [f for i, f in enumerate(self.facts) if i not in covered[1:]]
        else:
            self.facts.append(fact)
        return True


def _research_text(transcript: Union[Transcript, str]) -> str:
    """Assistant turns of an attributed transcript, otherwise the whole text."""
    if not isinstance(transcript, Transcript):
        return transcript or ""
    if transcript.is_attributed:
        return "\n\n".join(turn.text for turn in transcript.turns if turn.speaker == Speaker.ASSISTANT)
    return transcript.as_text()


def extract_facts(
    transcript: Union[Transcript, str],
    target_period: Optional[str] = None,
    limit: int = MAX_FACTS,
) -> List[ExtractedFact]:
    """
    Find government-order statements in a transcript.

    Args:
        transcript: Transcript (or plain text) to scan
        target_period: Claim quarter (e.g. "Q2 2020") used by the broader last pass
        limit: Maximum number of facts returned

    Returns:
        Up to ``limit`` unique facts in first-seen order
    """
    text = _research_text(transcript)
    paragraphs = split_paragraphs(text)
    fact_set = _FactSet(limit)

    for paragraph in paragraphs:
        if fact_set.full:
            break
        if not is_candidate_paragraph(paragraph):
            continue

        matched = False
        for _, pattern in ORDER_PATTERNS:
            for match in pattern.finditer(paragraph):
                if len(_clean(match.group(0))) < MIN_FACT_CHARS:
                    continue
                matched = True
                fact_set.add(match.group(0), paragraph)
        # Relevant paragraphs that fit no template are kept whole when short
        if not matched and len(paragraph) < MAX_FALLBACK_PARAGRAPH_CHARS:
            fact_set.add(paragraph, paragraph)

    if not fact_set.facts:
        tokens = [token.lower() for token in _quarter_tokens(target_period)]
        if tokens:
            for paragraph in paragraphs:
                if fact_set.full:
                    break
                lowered = paragraph.lower()
                if any(token in lowered for token in tokens) and TOPIC_PATTERN.search(paragraph):
                    fact_set.add(paragraph, paragraph)

    logger.info("Extracted %d facts from %d paragraphs", len(fact_set.facts), len(paragraphs))
    return fact_set.facts
