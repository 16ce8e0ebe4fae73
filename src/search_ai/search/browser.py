"""
Headless Browser Lifecycle

Scoped acquisition of a Playwright Chromium instance and creation of isolated
browsing contexts. A browser lives for exactly one fetch call; every context
lives for exactly one page.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable

from playwright.async_api import Browser, BrowserContext, async_playwright

from ..config import FetchConfig

logger = logging.getLogger("searchai.browser")

BrowserLauncher = Callable[[], AsyncContextManager[Browser]]


@asynccontextmanager
async def launch_browser(config: FetchConfig) -> AsyncIterator[Browser]:
    """
    Launch a headless Chromium and close it on every exit path.
    """
    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(
            headless=config.headless,
            timeout=config.launch_timeout * 1000,
        )
        logger.debug("Browser launched (headless=%s)", config.headless)
        try:
            yield browser
        finally:
            await browser.close()
            logger.debug("Browser closed")


def default_launcher(config: FetchConfig) -> BrowserLauncher:
    """Return a zero-argument launcher bound to `config`."""
    return lambda: launch_browser(config)


async def new_isolated_context(browser: Browser, config: FetchConfig) -> BrowserContext:
    """
    Create a browsing context with its own cookies and storage and a
    realistic desktop client identity.
    """
    return await browser.new_context(
        extra_http_headers={**config.extra_headers, "User-Agent": config.user_agent},
        viewport={"width": config.viewport_width, "height": config.viewport_height},
        user_agent=config.user_agent,
        device_scale_factor=1,
        is_mobile=False,
        has_touch=False,
        java_script_enabled=True,
    )
