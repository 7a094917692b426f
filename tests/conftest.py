"""Pytest configuration and shared fixtures."""
from contextlib import asynccontextmanager
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from playwright.async_api import Error as PlaywrightError

from erc_protest.config.config import PipelineSettings
from erc_protest.domain.entities import BusinessProfile, ExtractionRequest, PageSnapshot

FAKE_PDF_BYTES = b"%PDF-1.4\n% fake attachment\n%%EOF\n"

CONVERSATION_URL = "https://chatgpt.com/share/6790b1c2-0a1b-8000-9c2d-3e4f5a6b7c8d"


class FakePage:
    """Stands in for a Playwright page; records navigation and writes fake PDFs."""

    def __init__(self, browser: "FakeBrowser"):
        self.browser = browser
        self.url: Optional[str] = None

    async def route(self, pattern, handler) -> None:
        self.browser.routes.append(pattern)

    async def goto(self, url: str, wait_until: str = "load", timeout: float = 0):
        self.browser.goto_calls.append((url, wait_until, timeout))
        failing = self.browser.failing_urls.get(url)
        if failing is not None and (failing == "*" or wait_until in failing):
            raise PlaywrightError(f"Timeout {timeout}ms exceeded navigating to {url}")
        self.url = url

    async def content(self) -> str:
        return self.browser.html_by_url.get(self.url, "<html><body></body></html>")

    async def screenshot(self, full_page: bool = False) -> bytes:
        return b"\x89PNG fake screenshot"

    async def pdf(self, path: str, **kwargs) -> bytes:
        self.browser.pdf_calls.append((self.url, kwargs))
        Path(path).write_bytes(FAKE_PDF_BYTES)
        return FAKE_PDF_BYTES


class FakeBrowser:
    def __init__(self):
        self.goto_calls: List[tuple] = []
        self.pdf_calls: List[tuple] = []
        self.routes: List[str] = []
        self.failing_urls: Dict[str, object] = {}
        self.html_by_url: Dict[str, str] = {}
        self.open_pages = 0
        self.max_open_pages = 0


class FakeSession:
    """Same surface as BrowserSession, backed by FakeBrowser."""

    def __init__(self, launch_error: Optional[Exception] = None):
        self.browser = FakeBrowser()
        self.launch_error = launch_error
        self.open_count = 0
        self.blocked: List[tuple] = []

    @asynccontextmanager
    async def open(self):
        if self.launch_error is not None:
            raise self.launch_error
        self.open_count += 1
        yield self.browser

    @asynccontextmanager
    async def isolated_page(self, browser, blocked_resource_types=()):
        self.blocked.append(tuple(blocked_resource_types))
        browser.open_pages += 1
        browser.max_open_pages = max(browser.max_open_pages, browser.open_pages)
        try:
            yield FakePage(browser)
        finally:
            browser.open_pages -= 1


class FakeGenerator:
    """Text generator double returning canned text or raising."""

    def __init__(self, response: str = "", error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: List[tuple] = []

    async def generate(self, system_instruction: str, user_content: str) -> str:
        self.calls.append((system_instruction, user_content))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def business_profile() -> BusinessProfile:
    """Provide a sample business profile."""
    return BusinessProfile(
        name="Acme Dental Group LLC",
        tax_id="98-7654321",
        location="Tampa, FL",
        period="Q2 2020",
        business_category="dental practice",
    )


@pytest.fixture
def extraction_request(business_profile: BusinessProfile) -> ExtractionRequest:
    return ExtractionRequest(conversation_url=CONVERSATION_URL, business_profile=business_profile)


@pytest.fixture
def fixed_today():
    return lambda: date(2024, 3, 14)


@pytest.fixture
def make_snapshot():
    def _make(html: str) -> PageSnapshot:
        return PageSnapshot(html=html, url=CONVERSATION_URL)
    return _make


@pytest.fixture
def pipeline_settings(tmp_path: Path) -> PipelineSettings:
    return PipelineSettings(
        output_dir=tmp_path / "packages",
        example_letter_path=tmp_path / "missing_example.txt",
        deadline_seconds=30.0,
        settle_seconds=0,
        attachment_settle_seconds=0,
    )


@pytest.fixture
def conversation_html() -> str:
    """A shared-conversation page with two attributed turns and UI chrome."""
    return """
    <html><head><script>window.__state = {"x": 1}</script><style>.a{}</style></head>
    <body>
      <nav>New chat</nav>
      <main>
        <article data-testid="conversation-turn-1">
          <div data-message-author-role="user">
            <p>List the COVID-19 government orders affecting a dental practice in Tampa, FL in Q2 2020.</p>
          </div>
        </article>
        <article data-testid="conversation-turn-2">
          <div data-message-author-role="assistant">
            <p>Executive Order 20-91, issued by the Governor on April 1, 2020, ordered all persons in Florida to limit movement and closed non-essential businesses due to COVID-19.</p>
            <p>Source: <a href="https://www.flgov.com/wp-content/uploads/orders/2020/EO_20-91-compressed.pdf">EO 20-91</a></p>
            <p>Our staffing levels were adjusted during the summer as two employees left for school.</p>
          </div>
        </article>
      </main>
      <footer>ChatGPT can make mistakes.</footer>
    </body></html>
    """
