"""URL scanning shared by transcript extraction and attachment resolution."""
import re
from typing import List, Tuple

URL_PATTERN = re.compile(r"https?://[^\s<>\"'()\[\]{}]+")
TRAILING_PUNCTUATION = ".,;:!?*_"


def split_trailing_punctuation(match_text: str) -> Tuple[str, str]:
    """Separate sentence punctuation glued to the end of a matched URL."""
    url = match_text.rstrip(TRAILING_PUNCTUATION)
    return url, match_text[len(url):]


def find_urls(text: str) -> List[str]:
    """Return absolute URLs in ``text``, de-duplicated in first-seen order."""
    seen = set()
    urls = []
    for match in URL_PATTERN.finditer(text or ""):
        url, _ = split_trailing_punctuation(match.group(0))
        if len(url) <= len("https://") or url in seen:
            continue
        seen.add(url)
        urls.append(url)
    return urls
