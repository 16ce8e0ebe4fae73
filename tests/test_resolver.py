import pytest

from conftest import FakeBrowser, FakePage, make_launcher
from search_ai.config import ResolverConfig
from search_ai.core.errors import EmptyInputError
from search_ai.search.resolver import LinkResolver


HREFS = [
    "https://example.com/article?utm_source=x#section",
    "https://example.com/article",
    "https://www.google.com/search?q=more",
    "https://maps.google.co.uk/place",
    "https://www.youtube.com/watch?v=abc",
    "http://insecure.example.org/page",
    "https://news.example.net/story#top",
    None,
    "",
]


class TestLinkFiltering:
    """Tests for the pure link filtering helpers."""

    def test_filter_links_keeps_normalized_external_https(self):
        resolver = LinkResolver()
        assert resolver.filter_links(HREFS) == {
            "https://example.com/article",
            "https://news.example.net/story",
        }

    def test_blocked_terms_match_anywhere_in_host(self):
        resolver = LinkResolver()
        assert not resolver.is_allowed("https://googleusercontent.com/file")
        assert not resolver.is_allowed("https://m.youtube.com/")
        assert resolver.is_allowed("https://example.com/google-guide")

    def test_custom_blocked_terms(self):
        resolver = LinkResolver(ResolverConfig(blocked_host_terms=("example",)))
        assert resolver.filter_links(["https://example.com/a", "https://other.org/b"]) == {
            "https://other.org/b"
        }

    def test_normalize_link_strips_query_and_fragment(self):
        assert LinkResolver.normalize_link("https://a.org/p?x=1#frag") == "https://a.org/p"
        assert LinkResolver.normalize_link("https://a.org/p#frag?x=1") == "https://a.org/p"

    def test_search_url_is_percent_encoded(self):
        resolver = LinkResolver()
        assert resolver.build_search_url("rust async & tokio") == (
            "https://www.google.com/search?q=rust%20async%20%26%20tokio"
        )


class TestResolve:
    """Tests for LinkResolver.resolve against a fake browser."""

    @pytest.mark.asyncio
    async def test_empty_query_never_launches_browser(self, failing_launcher):
        resolver = LinkResolver(launcher=failing_launcher)
        with pytest.raises(EmptyInputError):
            await resolver.resolve("   ")

    @pytest.mark.asyncio
    async def test_resolve_collects_and_filters_anchors(self):
        page = FakePage(hrefs=HREFS)
        browser = FakeBrowser(lambda: page)
        launcher = make_launcher(browser)
        resolver = LinkResolver(launcher=launcher)

        links = await resolver.resolve("  python packaging  ")

        assert links == {"https://example.com/article", "https://news.example.net/story"}
        assert page.visited == ["https://www.google.com/search?q=python%20packaging"]
        assert page.selector == "a[jsname]"
        assert page.default_timeout == 60_000
        assert browser.contexts[0].closed
        assert browser.closed
        assert len(launcher.calls) == 1

    @pytest.mark.asyncio
    async def test_resolve_uses_supplied_browser(self, failing_launcher):
        browser = FakeBrowser(lambda: FakePage(hrefs=["https://docs.example.org/x"]))
        resolver = LinkResolver(launcher=failing_launcher)

        links = await resolver.resolve("docs", browser=browser)

        assert links == {"https://docs.example.org/x"}
        assert not browser.closed

    @pytest.mark.asyncio
    async def test_navigation_error_propagates_and_context_closes(self):
        page = FakePage(goto_error=RuntimeError("net::ERR_NAME_NOT_RESOLVED"))
        browser = FakeBrowser(lambda: page)
        resolver = LinkResolver(launcher=make_launcher(browser))

        with pytest.raises(RuntimeError):
            await resolver.resolve("anything")

        assert browser.contexts[0].closed
        assert browser.closed

    @pytest.mark.asyncio
    async def test_no_anchors_gives_empty_set(self):
        browser = FakeBrowser(lambda: FakePage(hrefs=[]))
        resolver = LinkResolver(launcher=make_launcher(browser))
        assert await resolver.resolve("nothing here") == set()
