"""
Link Resolver

Turns a query into a set of candidate external URLs by loading a search
engine result page in a headless browser and collecting its result anchors.

The anchor selector is tied to the engine's current markup and will drift;
it lives in `ResolverConfig.result_selector`.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Set
from urllib.parse import quote, urlsplit

from playwright.async_api import Browser

from ..config import ResolverConfig, FetchConfig
from ..core.errors import EmptyInputError
from .browser import BrowserLauncher, default_launcher

logger = logging.getLogger("searchai.resolver")

_COLLECT_HREFS_SCRIPT = "(elements) => elements.map(el => el.href)"


class LinkResolver:
    """
    Resolve a query to deduplicated, normalized result links.

    Navigation and extraction errors propagate unchanged; there is no retry
    at this layer.
    """

    def __init__(
        self,
        config: Optional[ResolverConfig] = None,
        launcher: Optional[BrowserLauncher] = None,
    ) -> None:
        self.config = config or ResolverConfig()
        self._launcher = launcher or default_launcher(FetchConfig())

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(self, query: str, browser: Optional[Browser] = None) -> Set[str]:
        """
        Return the set of candidate links for `query`.

        Parameters
        ----------
        query : str
            Search text. Trimmed; empty input is rejected before any
            browser is launched.

        browser : Optional[Browser]
            Browser to open the search context in. When omitted, one is
            launched for this call and closed afterwards.

        Raises
        ------
        EmptyInputError
            If the query is empty or whitespace only.
        """
        query = (query or "").strip()
        if not query:
            raise EmptyInputError("Search query cannot be empty")

        if browser is None:
            async with self._launcher() as owned:
                return await self._resolve_with(owned, query)
        return await self._resolve_with(browser, query)

    def build_search_url(self, query: str) -> str:
        return self.config.search_url + quote(query, safe="-_.!~*'()")

    def filter_links(self, hrefs: Iterable[Optional[str]]) -> Set[str]:
        """Keep allowed links and normalize them into a set."""
        return {
            self.normalize_link(href)
            for href in hrefs
            if href and self.is_allowed(href)
        }

    def is_allowed(self, href: str) -> bool:
        parts = urlsplit(href)
        if parts.scheme != "https" or not parts.hostname:
            return False
        host = parts.hostname.lower()
        return not any(term in host for term in self.config.blocked_host_terms)

    @staticmethod
    def normalize_link(href: str) -> str:
        """Drop the fragment and the query string."""
        return href.split("#", 1)[0].split("?", 1)[0]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _resolve_with(self, browser: Browser, query: str) -> Set[str]:
        logger.info("Resolving links for query: %r", query)
        timeout_ms = self.config.timeout * 1000

        context = await browser.new_context(
            user_agent=self.config.user_agent,
            extra_http_headers={"Accept-Language": self.config.accept_language},
        )
        try:
            page = await context.new_page()
            page.set_default_timeout(timeout_ms)
            await page.goto(self.build_search_url(query))
            await page.wait_for_load_state("domcontentloaded")
            hrefs = await page.eval_on_selector_all(
                self.config.result_selector,
                _COLLECT_HREFS_SCRIPT,
            )
        finally:
            await context.close()

        links = self.filter_links(hrefs or [])
        logger.info("Resolved %d unique links from %d anchors", len(links), len(hrefs or []))
        return links
