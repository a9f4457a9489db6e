import asyncio

import pytest

from bjorkmans_feed.core.browser import PageFetcher, unwrap_js_value
from bjorkmans_feed.core.errors import NavigationError, SelectorTimeoutError
from bjorkmans_feed.core.selectors import READY_STATE_JS, consent_click_js, count_js


class FakeTab:
    def __init__(self, ready_state="complete", counts=None, consent=False, hang=False, content="<html></html>"):
        self.ready_state = ready_state
        self.counts = counts or {}
        self.consent = consent
        self.hang = hang
        self.html = content
        self.visited = []
        self.clicks = 0

    async def get(self, url):
        if self.hang:
            await asyncio.sleep(5)
        self.visited.append(url)
        return self

    async def evaluate(self, js, return_by_value=True):
        if js == READY_STATE_JS:
            return {"type": "string", "value": self.ready_state}
        for selector, n in self.counts.items():
            if js == count_js(selector):
                return n
        if "scrollIntoView" in js:
            if self.consent:
                self.clicks += 1
                return True
            return False
        return None

    async def get_content(self):
        return self.html

    async def sleep(self, seconds):
        pass


def fetcher(tab):
    return PageFetcher(tab, poll_interval=0.01)


def test_load_waits_for_selector():
    tab = FakeTab(counts={".cat-wrap": 3})
    asyncio.run(fetcher(tab).load("https://x/modeller/", ready_selector=".cat-wrap"))
    assert tab.visited == ["https://x/modeller/"]


def test_navigation_timeout():
    with pytest.raises(NavigationError) as exc:
        asyncio.run(fetcher(FakeTab(hang=True)).load("https://x/slow/", timeout=0.05))
    assert exc.value.url == "https://x/slow/"


def test_page_never_ready():
    with pytest.raises(NavigationError):
        asyncio.run(fetcher(FakeTab(ready_state="loading")).load("https://x/", timeout=0.05))


def test_missing_ready_selector():
    tab = FakeTab(counts={".cat-wrap": 0})
    with pytest.raises(SelectorTimeoutError) as exc:
        asyncio.run(fetcher(tab).load("https://x/", ready_selector=".cat-wrap", selector_timeout=0.05))
    assert exc.value.selector == ".cat-wrap"


def test_consent_clicked_when_present():
    tab = FakeTab(consent=True)
    assert asyncio.run(fetcher(tab).dismiss_consent(timeout=0.05)) is True
    assert tab.clicks == 1


def test_consent_absent_is_not_an_error():
    assert asyncio.run(fetcher(FakeTab()).dismiss_consent(timeout=0.05)) is False


def test_content_and_json_queries():
    tab = FakeTab(content="<html><body>ok</body></html>")
    f = fetcher(tab)
    assert asyncio.run(f.content()) == "<html><body>ok</body></html>"
    assert asyncio.run(f.evaluate_json("unknown()")) is None


def test_unwrap_js_value():
    assert unwrap_js_value({"type": "string", "value": "x"}) == "x"
    assert unwrap_js_value({"result": {"value": 2}}) == 2
    assert unwrap_js_value([1, 2]) == [1, 2]


def test_consent_script_matches_longer_button_text_in_any_case():
    js = consent_click_js("Acceptera alla")
    assert "const want = 'Acceptera alla'.toLowerCase();" in js
    assert "clean(n.textContent).includes(want)" in js
    assert "=== want" not in js


def test_click_reports_whether_the_script_clicked():
    tab = FakeTab(consent=True)
    assert asyncio.run(fetcher(tab).click(consent_click_js("Acceptera alla"))) is True
    assert tab.clicks == 1
    assert asyncio.run(fetcher(FakeTab()).click(consent_click_js("Acceptera alla"))) is False
