"""
Content Fetcher

Concurrently loads result pages in isolated browsing contexts and aggregates
their readable text into one bounded string.

Execution Model
---------------
- Links are split into batches of `batch_size`; at most `max_batches` run.
- All batches are launched together. Inside a batch, item i starts after
  ``i * stagger_delay`` seconds and items race independently.
- A batch that does not settle within `batch_timeout` is discarded (empty
  text, warning logged). Its in-flight pages are cancelled and their
  contexts are still closed by the per-page cleanup path.
- Batch texts are joined in batch-index order, not completion order.
- One browser is launched per fetch call and closed on every exit path.

Failure Model
-------------
Page-level failures become "no content" and are counted in `FetchMetrics`.
Only resolver and browser-launch failures escape, as `UpstreamError`.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Iterable, List, Optional

from playwright.async_api import Browser
from pydantic import BaseModel, Field

from ..config import FetchConfig
from ..core.errors import BatchTimeoutError, EmptyInputError, SearchAIError, UpstreamError
from .browser import BrowserLauncher, default_launcher, new_isolated_context
from .extraction import ContentExtractor
from .resolver import LinkResolver

logger = logging.getLogger("searchai.fetcher")


# ---------------------------------------------------------------------
# Result Models
# ---------------------------------------------------------------------

class FetchMetrics(BaseModel):
    """
    Observability counters for one fetch call. Never used for control flow.
    """

    total_links: int = Field(default=0, ge=0, description="Links handed to the fetcher.")
    attempted: int = Field(default=0, ge=0, description="Links inside the processed batches.")
    skipped: int = Field(default=0, ge=0, description="Links rejected by the pre-filter.")
    success_count: int = Field(default=0, ge=0)
    failure_count: int = Field(default=0, ge=0)
    batches_run: int = Field(default=0, ge=0)
    batches_timed_out: int = Field(default=0, ge=0)


class FetchResult(BaseModel):
    text: str = ""
    metrics: FetchMetrics = Field(default_factory=FetchMetrics)


# ---------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------

class ContentFetcher:
    """
    Fetch and aggregate page text for a set of links.

    Collaborators are injected so tests can substitute the browser launcher,
    the resolver and the extraction cascade.
    """

    def __init__(
        self,
        config: Optional[FetchConfig] = None,
        resolver: Optional[LinkResolver] = None,
        extractor: Optional[ContentExtractor] = None,
        launcher: Optional[BrowserLauncher] = None,
    ) -> None:
        self.config = config or FetchConfig()
        self._launcher = launcher or default_launcher(self.config)
        self.resolver = resolver or LinkResolver(launcher=self._launcher)
        self.extractor = extractor or ContentExtractor()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch_all(self, links: Iterable[str]) -> FetchResult:
        """
        Fetch every link (up to the batch bound) and return the aggregated text.

        Parameters
        ----------
        links : Iterable[str]
            Candidate URLs. Unordered collections are sorted first so that
            batching is deterministic.

        Raises
        ------
        UpstreamError
            If the browser cannot be launched.
        """
        ordered = self._ordered(links)
        metrics = FetchMetrics(total_links=len(ordered))
        if not ordered:
            return FetchResult(text="", metrics=metrics)

        try:
            async with self._launcher() as browser:
                text = await self._fetch_with_browser(browser, ordered, metrics)
        except SearchAIError:
            raise
        except Exception as exc:
            logger.error("Content fetch failed: %s", exc)
            raise UpstreamError(f"Failed to retrieve search content: {exc}") from exc

        return FetchResult(text=text, metrics=metrics)

    async def fetch_for_query(self, query: str) -> FetchResult:
        """
        Resolve `query` to links and fetch them, sharing one browser for both.

        Raises
        ------
        EmptyInputError
            If the query is empty, before any browser is launched.
        UpstreamError
            If link resolution or the browser launch fails.
        """
        query = (query or "").strip()
        if not query:
            raise EmptyInputError("Search query cannot be empty")

        try:
            async with self._launcher() as browser:
                links = await self.resolver.resolve(query, browser=browser)
                ordered = self._ordered(links)
                metrics = FetchMetrics(total_links=len(ordered))
                logger.info("Found %d links for query", len(ordered))
                if not ordered:
                    return FetchResult(text="", metrics=metrics)
                text = await self._fetch_with_browser(browser, ordered, metrics)
        except SearchAIError:
            raise
        except Exception as exc:
            logger.error("Content fetch failed for query %r: %s", query, exc)
            raise UpstreamError(f"Failed to retrieve search content: {exc}") from exc

        return FetchResult(text=text, metrics=metrics)

    def plan_batches(self, links: List[str]) -> List[List[str]]:
        """Split links into batches, keeping only the first `max_batches`."""
        size = self.config.batch_size
        bounded = links[: self.config.max_links]
        return [bounded[start : start + size] for start in range(0, len(bounded), size)]

    @staticmethod
    def should_fetch(url: Optional[str]) -> bool:
        """Pre-filter: only http(s) URLs that are not PDF documents."""
        if not url or not url.startswith("http"):
            return False
        return not url.lower().endswith(".pdf")

    async def fetch_page(self, browser: Browser, url: str) -> Optional[str]:
        """
        Load one page in its own context and return its text, or None.

        Never raises for navigation or extraction problems.
        """
        if not self.should_fetch(url):
            return None

        try:
            context = await new_isolated_context(browser, self.config)
        except Exception as exc:
            logger.warning("Could not open browsing context for %s: %s", url, exc)
            return None

        try:
            page = await context.new_page()
            await page.set_extra_http_headers({"Referer": self.config.referer})
            await asyncio.sleep(random.uniform(self.config.jitter_min, self.config.jitter_max))
            await page.goto(
                url,
                wait_until="networkidle",
                timeout=self.config.page_timeout * 1000,
            )
            await page.wait_for_load_state("domcontentloaded")
            await page.wait_for_timeout(self.config.settle_delay * 1000)
            content = await self.extractor.extract(page)
            return content or None
        except Exception as exc:
            logger.debug("Fetch failed for %s: %s", url, exc)
            return None
        finally:
            try:
                await context.close()
            except Exception as exc:
                logger.debug("Closing context for %s failed: %s", url, exc)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _ordered(links: Iterable[str]) -> List[str]:
        if isinstance(links, (set, frozenset)):
            return sorted(links)
        return list(links)

    async def _fetch_with_browser(
        self,
        browser: Browser,
        links: List[str],
        metrics: FetchMetrics,
    ) -> str:
        batches = self.plan_batches(links)
        metrics.attempted = sum(len(batch) for batch in batches)
        metrics.batches_run = len(batches)

        if len(links) > metrics.attempted:
            logger.info(
                "Fetching %d of %d links (batch bound %d x %d)",
                metrics.attempted,
                len(links),
                self.config.max_batches,
                self.config.batch_size,
            )

        batch_texts = await asyncio.gather(
            *(
                self._run_batch(browser, index, batch, metrics)
                for index, batch in enumerate(batches)
            )
        )

        combined = self.config.separator.join(text for text in batch_texts if text)
        if len(combined) > self.config.max_content_length:
            combined = combined[: self.config.max_content_length]

        logger.info(
            "Fetched %d pages (%d failed, %d skipped), %d characters",
            metrics.success_count,
            metrics.failure_count,
            metrics.skipped,
            len(combined),
        )
        return combined.strip()

    async def _run_batch(
        self,
        browser: Browser,
        index: int,
        batch: List[str],
        metrics: FetchMetrics,
    ) -> str:
        try:
            contents = await self._await_batch(browser, index, batch, metrics)
        except BatchTimeoutError as exc:
            metrics.batches_timed_out += 1
            logger.warning("%s; discarding %d links", exc, len(batch))
            return ""

        return self.config.separator.join(content for content in contents if content)

    async def _await_batch(
        self,
        browser: Browser,
        index: int,
        batch: List[str],
        metrics: FetchMetrics,
    ) -> List[str]:
        pending = asyncio.gather(
            *(
                self._fetch_item(browser, position, url, metrics)
                for position, url in enumerate(batch)
            ),
            return_exceptions=True,
        )
        try:
            settled = await asyncio.wait_for(pending, timeout=self.config.batch_timeout)
        except asyncio.TimeoutError as exc:
            raise BatchTimeoutError(
                f"Batch {index} timed out after {self.config.batch_timeout:.1f}s"
            ) from exc

        return [item for item in settled if isinstance(item, str)]

    async def _fetch_item(
        self,
        browser: Browser,
        position: int,
        url: str,
        metrics: FetchMetrics,
    ) -> str:
        if not self.should_fetch(url):
            metrics.skipped += 1
            return ""

        await asyncio.sleep(position * self.config.stagger_delay)
        try:
            content = await self.fetch_page(browser, url)
        except Exception as exc:
            logger.debug("Fetch failed for %s: %s", url, exc)
            content = None

        if content:
            metrics.success_count += 1
        else:
            metrics.failure_count += 1
        return content or ""
