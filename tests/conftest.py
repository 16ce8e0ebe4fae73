"""
Shared Test Doubles

Minimal stand-ins for the Playwright objects the pipeline touches. They record
what was called so tests can assert on navigation and cleanup.
"""

import asyncio
from contextlib import asynccontextmanager

import pytest

from search_ai.search.extraction import (
    BODY_TEXT_SCRIPT,
    CONTENT_SELECTORS,
    GENERIC_CONTENT_SELECTORS,
    HIDE_SCRIPT,
    SELECTOR_TEXT_SCRIPT,
)


class FakePage:
    def __init__(self, content=None, main=None, body=None, hrefs=None, goto_error=None, goto_delay=0):
        self.content = content
        self.main = main
        self.body = body
        self.hrefs = hrefs or []
        self.goto_error = goto_error
        self.goto_delay = goto_delay

        self.visited = []
        self.headers = {}
        self.hidden = None
        self.default_timeout = None
        self.selector = None

    def set_default_timeout(self, timeout):
        self.default_timeout = timeout

    async def set_extra_http_headers(self, headers):
        self.headers.update(headers)

    async def goto(self, url, **kwargs):
        self.visited.append(url)
        if self.goto_delay:
            await asyncio.sleep(self.goto_delay)
        if self.goto_error is not None:
            raise self.goto_error

    async def wait_for_load_state(self, state=None):
        return None

    async def wait_for_timeout(self, timeout):
        return None

    async def eval_on_selector_all(self, selector, script):
        self.selector = selector
        return list(self.hrefs)

    async def evaluate(self, expression, arg=None):
        if expression == HIDE_SCRIPT:
            self.hidden = list(arg)
            return None
        if expression == SELECTOR_TEXT_SCRIPT:
            if list(arg) == list(CONTENT_SELECTORS):
                return self.content
            if list(arg) == list(GENERIC_CONTENT_SELECTORS):
                return self.main
            return None
        if expression == BODY_TEXT_SCRIPT:
            return self.body
        raise AssertionError(f"unexpected script: {expression!r}")


class FakeContext:
    def __init__(self, page, options):
        self.page = page
        self.options = options
        self.closed = False

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


class FakeBrowser:
    """Hands out one fresh context per call, each wrapping a page from `page_factory`."""

    def __init__(self, page_factory=None):
        self.page_factory = page_factory or (lambda: FakePage())
        self.contexts = []
        self.closed = False

    async def new_context(self, **options):
        context = FakeContext(self.page_factory(), options)
        self.contexts.append(context)
        return context


def make_launcher(browser):
    """Launcher yielding `browser` and marking it closed on exit."""
    calls = []

    @asynccontextmanager
    async def launch():
        calls.append(browser)
        try:
            yield browser
        finally:
            browser.closed = True

    launch.calls = calls
    return launch


@pytest.fixture
def fake_browser():
    return FakeBrowser()


@pytest.fixture
def failing_launcher():
    """Launcher that fails the test if anything tries to start a browser."""

    def launch():
        raise AssertionError("browser must not be launched")

    return launch
