"""Page snapshot - rendered markup captured from one page load."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class PageSnapshot:
    """Rendered HTML of a loaded page, with an optional full-page screenshot."""
    html: str
    url: str = ""
    screenshot_bytes: Optional[bytes] = None
    captured_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
