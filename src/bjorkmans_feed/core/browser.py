from __future__ import annotations

import asyncio
import inspect
import json
import time
from typing import Any, Optional

import nodriver as nd

from .errors import NavigationError, SelectorTimeoutError
from .log import log
from .selectors import CONSENT_BUTTON_TEXT, READY_STATE_JS, consent_click_js, count_js

# Chrome flags for running headless in CI containers.
BROWSER_ARGS = [
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--user-agent=Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
]


async def start_browser(headless: bool = True, sandbox: bool = False) -> Any:
    """Start nodriver browser with basic options."""
    log("[boot] starting browser headless=", headless, "sandbox=", sandbox)
    browser = await nd.start(headless=headless, sandbox=sandbox, browser_args=list(BROWSER_ARGS))
    return browser


async def stop_browser(browser: Any) -> None:
    # stop() is sync in some nodriver releases and a coroutine in others
    res = browser.stop()
    if inspect.isawaitable(res):
        await res


def unwrap_js_value(x):
    """
    nodriver sometimes returns RemoteObject-like dicts:
    {"type":"string","value":"..."} instead of plain strings.
    """
    if isinstance(x, dict):
        if "value" in x:
            return x["value"]
        if "result" in x and isinstance(x["result"], dict) and "value" in x["result"]:
            return x["result"]["value"]
    return x


class PageFetcher:
    """
    Drives one browser tab. Every call mutates the tab's navigation state,
    so callers must await them one at a time.
    """

    def __init__(
        self,
        tab: Any,
        consent_text: str = CONSENT_BUTTON_TEXT,
        poll_interval: float = 0.25,
    ) -> None:
        self.tab = tab
        self.consent_text = consent_text
        self.poll_interval = poll_interval
        self.url: Optional[str] = None

    @classmethod
    async def open(cls, browser: Any, **kwargs) -> "PageFetcher":
        tab = await browser.get("about:blank")
        return cls(tab, **kwargs)

    async def load(
        self,
        url: str,
        ready_selector: Optional[str] = None,
        timeout: float = 30.0,
        selector_timeout: float = 10.0,
    ) -> "PageFetcher":
        """
        Navigate the tab to `url` and wait until the document is complete.

        Raises NavigationError if that takes longer than `timeout`, and
        SelectorTimeoutError if `ready_selector` is given and still absent
        after `selector_timeout`.
        """
        self.url = url
        end = time.monotonic() + timeout
        try:
            await asyncio.wait_for(self.tab.get(url), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise NavigationError(url, timeout) from e

        while True:
            state = await self.evaluate(READY_STATE_JS)
            if state == "complete":
                break
            if time.monotonic() >= end:
                raise NavigationError(url, timeout, f"readyState={state!r}")
            await asyncio.sleep(self.poll_interval)

        if ready_selector:
            await self.wait_for_selector(ready_selector, selector_timeout)
        return self

    async def wait_for_selector(self, selector: str, timeout: float = 10.0) -> None:
        end = time.monotonic() + timeout
        while True:
            n = await self.evaluate(count_js(selector))
            try:
                if int(n or 0) > 0:
                    return
            except (TypeError, ValueError):
                pass
            if time.monotonic() >= end:
                raise SelectorTimeoutError(self.url or "", selector, timeout)
            await asyncio.sleep(self.poll_interval)

    async def dismiss_consent(self, timeout: float = 2.0) -> bool:
        """
        Click the cookie-consent button if it shows up within `timeout`.
        A missing banner is normal and returns False.
        """
        js = consent_click_js(self.consent_text)
        end = time.monotonic() + timeout
        while True:
            if await self.click(js):
                await self.sleep(0.5)
                log("[consent] closed cookie banner")
                return True
            if time.monotonic() >= end:
                return False
            await asyncio.sleep(self.poll_interval)

    async def click(self, js: str) -> bool:
        """Run a script that clicks an element and reports `true` if it did."""
        value = await self.tab.evaluate(js, return_by_value=True)
        return unwrap_js_value(value) is True

    async def evaluate(self, js: str) -> Any:
        """Run a side-effect-free DOM query and return its plain value."""
        value = await self.tab.evaluate(js, return_by_value=True)
        return unwrap_js_value(value)

    async def evaluate_json(self, js: str) -> Any:
        """Run a query that returns JSON.stringify(...) and decode it."""
        raw = await self.evaluate(js)
        if not raw or not isinstance(raw, str):
            return None
        return json.loads(raw)

    async def content(self) -> str:
        return await self.tab.get_content()

    async def sleep(self, seconds: float) -> None:
        try:
            await self.tab.sleep(seconds)
        except AttributeError:
            await asyncio.sleep(seconds)
