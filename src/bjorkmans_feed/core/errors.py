from __future__ import annotations

from typing import Optional


class FeedError(Exception):
    """Base class for everything the feed pipeline raises on purpose."""


class ConfigError(FeedError):
    pass


class NavigationError(FeedError):
    """Page did not reach a ready state within the navigation timeout."""

    def __init__(self, url: str, timeout: Optional[float] = None, reason: str = "") -> None:
        self.url = url
        self.timeout = timeout
        self.reason = reason
        msg = f"page not ready: {url}"
        if timeout is not None:
            msg += f" (timeout {timeout:g}s)"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class SelectorTimeoutError(FeedError):
    """An expected structural element never appeared (site layout changed?)."""

    def __init__(self, url: str, selector: str, timeout: float) -> None:
        self.url = url
        self.selector = selector
        self.timeout = timeout
        super().__init__(f"selector {selector!r} not found on {url} within {timeout:g}s")


class ParseMismatch(FeedError, ValueError):
    """A label did not match the price pattern. Callers skip, never log."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"no price in label: {text!r}")


class EmptyResultError(FeedError):
    def __init__(self, mode: str) -> None:
        self.mode = mode
        super().__init__(
            f"no feed items produced in {mode} mode (has the website structure changed?)"
        )
