"""
Readable Text Extraction

Page text is extracted by an ordered list of strategies. Each strategy either
returns text or `None`; the first non-empty result wins. Non-content regions
are hidden before any strategy runs so that `innerText` skips them.

The default cascade tries specific article containers first, then generic
main/article regions, then the whole body. Selector lists track real-world
markup and are expected to change; pass a custom list to `ContentExtractor`
to substitute them.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Protocol, Sequence, Tuple


NON_CONTENT_SELECTORS: Tuple[str, ...] = (
    "header",
    "footer",
    "nav",
    ".advertisement",
    ".ads",
    ".cookie-notice",
    ".popup",
    ".modal",
    "#comments",
    ".sidebar",
    ".social-share",
    ".related-posts",
)

CONTENT_SELECTORS: Tuple[str, ...] = (
    "main article",
    '[role="main"] article',
    ".content-area",
    "#content",
    ".post-content",
)

GENERIC_CONTENT_SELECTORS: Tuple[str, ...] = (
    'main, article, [role="main"]',
)

HIDE_SCRIPT = """(selectors) => {
    for (const selector of selectors) {
        document.querySelectorAll(selector).forEach(el => { el.style.display = 'none'; });
    }
}"""

SELECTOR_TEXT_SCRIPT = """(selectors) => {
    for (const selector of selectors) {
        const element = document.querySelector(selector);
        if (element && element.innerText && element.innerText.trim()) {
            return element.innerText;
        }
    }
    return null;
}"""

BODY_TEXT_SCRIPT = "() => document.body ? document.body.innerText : null"

_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: Optional[str]) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


class EvaluatesScripts(Protocol):
    async def evaluate(self, expression: str, arg: Any = None) -> Any: ...


class ExtractionStrategy(Protocol):
    name: str

    async def extract(self, page: EvaluatesScripts) -> Optional[str]: ...


class SelectorStrategy:
    """Return the text of the first selector that matches a non-empty element."""

    def __init__(self, name: str, selectors: Sequence[str]) -> None:
        self.name = name
        self.selectors = list(selectors)

    async def extract(self, page: EvaluatesScripts) -> Optional[str]:
        return await page.evaluate(SELECTOR_TEXT_SCRIPT, self.selectors)


class BodyStrategy:
    """Return the text of the whole document body."""

    name = "body"

    async def extract(self, page: EvaluatesScripts) -> Optional[str]:
        return await page.evaluate(BODY_TEXT_SCRIPT)


def default_strategies() -> list:
    return [
        SelectorStrategy("content", CONTENT_SELECTORS),
        SelectorStrategy("main", GENERIC_CONTENT_SELECTORS),
        BodyStrategy(),
    ]


class ContentExtractor:
    """
    Run the strategy cascade against a loaded page.

    Script errors propagate to the caller, which treats them as a failed
    fetch for that page.
    """

    def __init__(
        self,
        strategies: Optional[Sequence[ExtractionStrategy]] = None,
        non_content_selectors: Sequence[str] = NON_CONTENT_SELECTORS,
    ) -> None:
        self.strategies = list(strategies) if strategies is not None else default_strategies()
        self.non_content_selectors = list(non_content_selectors)

    async def extract(self, page: EvaluatesScripts) -> str:
        if self.non_content_selectors:
            await page.evaluate(HIDE_SCRIPT, self.non_content_selectors)

        for strategy in self.strategies:
            text = normalize_whitespace(await strategy.extract(page))
            if text:
                return text

        return ""
