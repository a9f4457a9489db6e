from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel

from .core.errors import ConfigError

DEFAULT_WEBSITE_URL = "https://www.bjorkmansbil.se/modeller/?nav=nyhetererbjudanden"
MODES = ("models", "financing")


def _env(env: Mapping[str, str], name: str, default: str) -> str:
    return env.get(name, default).strip() or default


def _flag(env: Mapping[str, str], name: str, default: str) -> bool:
    return _env(env, name, default) not in ("0", "false", "False")


def _seconds(env: Mapping[str, str], name: str, default: str) -> float:
    raw = _env(env, name, default)
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


class FeedConfig(BaseModel):
    website_url: str = DEFAULT_WEBSITE_URL
    output_dir: str = "./output"
    output_file: str = "feed.xml"
    mode: str = "financing"
    status_page: bool = True
    headless: bool = True
    sandbox: bool = False
    nav_timeout: float = 30.0
    selector_timeout: float = 10.0
    consent_timeout: float = 2.0
    # fixed waits for client-side rendering
    listing_delay: float = 2.0
    settle_delay: float = 2.0
    financing_delay: float = 1.5

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir) / self.output_file

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "FeedConfig":
        env = os.environ if env is None else env
        mode = _env(env, "FEED_MODE", "financing").lower()
        if mode not in MODES:
            raise ConfigError(f"FEED_MODE must be one of {', '.join(MODES)}, got {mode!r}")
        return cls(
            website_url=_env(env, "WEBSITE_URL", DEFAULT_WEBSITE_URL),
            output_dir=_env(env, "OUTPUT_DIR", "./output"),
            output_file=_env(env, "OUTPUT_FILE", "feed.xml"),
            mode=mode,
            status_page=_flag(env, "STATUS_PAGE", "1"),
            headless=_flag(env, "HEADLESS", "1"),
            sandbox=_flag(env, "BROWSER_SANDBOX", "0"),
            nav_timeout=_seconds(env, "NAV_TIMEOUT", "30"),
            selector_timeout=_seconds(env, "SELECTOR_TIMEOUT", "10"),
            consent_timeout=_seconds(env, "CONSENT_TIMEOUT", "2"),
        )
