# src/bjorkmans_feed/main.py
from __future__ import annotations

import asyncio
import sys
from dotenv import load_dotenv

from .config import FeedConfig
from .core.browser import PageFetcher, start_browser, stop_browser
from .core.errors import ConfigError, FeedError
from .core.log import log, log_exception
from .core.pipeline import run


async def main() -> int:
    load_dotenv()
    try:
        config = FeedConfig.from_env()
    except ConfigError as e:
        log("[FATAL]", e)
        return 2

    log("[run] start mode=", config.mode, "source=", config.website_url)
    browser = None
    try:
        browser = await start_browser(headless=config.headless, sandbox=config.sandbox)
        fetcher = await PageFetcher.open(browser)
        result = await run(fetcher, config)

    except FeedError as e:
        log_exception("[FATAL]", e)
        return 1
    except Exception as e:
        log_exception("[FATAL]", e)
        raise
    finally:
        if browser is not None:
            try:
                await stop_browser(browser)
            except Exception as e:
                log("[boot] browser did not stop cleanly:", repr(e))

    s = result.stats
    log(
        f"[run] done: {result.item_count} items from {s.models_listed} models"
        f" (models failed={s.models_failed},"
        f" financing types ok={s.financing_types_succeeded}/{s.financing_types_attempted})"
        f" -> {result.output_path}"
    )
    return 0


def cli() -> None:
    try:
        code = asyncio.run(main())
    except KeyboardInterrupt:
        log("Interrupted")
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    cli()
