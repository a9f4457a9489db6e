from __future__ import annotations

from typing import Any, List

from ..config import FeedConfig
from ..output.writer import write_feed, write_status_page
from .errors import EmptyResultError
from .feed import FINANCING_CHANNEL, MODELS_CHANNEL, financing_items, model_items, render_feed
from .financing import FinancingExtractor
from .listing import ModelCatalog, parse_listing
from .log import log
from .models import RunResult, RunStats, ScrapedModel
from .selectors import CATEGORY_WRAP_SEL


async def fetch_catalog(fetcher: Any, config: FeedConfig, catalog: ModelCatalog) -> ModelCatalog:
    """
    Load the listing page and merge its models into `catalog`.
    Navigation and selector errors propagate: a listing failure is fatal.
    """
    log("[list] open", config.website_url)
    await fetcher.load(
        config.website_url,
        ready_selector=CATEGORY_WRAP_SEL,
        timeout=config.nav_timeout,
        selector_timeout=config.selector_timeout,
    )
    await fetcher.sleep(config.listing_delay)
    await fetcher.dismiss_consent(config.consent_timeout)

    html = await fetcher.content()
    log("[list] html fetched", f"({len(html)} characters)")
    parse_listing(html, config.website_url, catalog)
    log("[list] parsed", len(catalog), "unique models")
    return catalog


async def scrape_financing(
    fetcher: Any,
    config: FeedConfig,
    urls: List[str],
    stats: RunStats,
) -> List[ScrapedModel]:
    extractor = FinancingExtractor(
        fetcher,
        stats,
        nav_timeout=config.nav_timeout,
        consent_timeout=config.consent_timeout,
        settle_delay=config.settle_delay,
        financing_delay=config.financing_delay,
    )
    scraped: List[ScrapedModel] = []
    for index, url in enumerate(urls, start=1):
        log(f"[detail] {index}/{len(urls)}")
        try:
            model = await extractor.scrape(url)
        except Exception as e:
            stats.models_failed += 1
            log("[detail] FAILED", url, repr(e))
            continue
        if model is not None:
            scraped.append(model)
    return scraped


async def build_feed(fetcher: Any, config: FeedConfig) -> RunResult:
    """
    Listing -> models -> (financing) -> XML. Raises EmptyResultError
    instead of returning a feed without items.
    """
    stats = RunStats()
    catalog = ModelCatalog()
    await fetch_catalog(fetcher, config, catalog)
    stats.models_listed = len(catalog)
    models = catalog.models()

    if config.mode == "models":
        if not models:
            raise EmptyResultError(config.mode)
        items = model_items(models)
        log("[feed] category distribution:", catalog.category_counts())
        xml = render_feed(items, MODELS_CHANNEL)
        scraped: List[ScrapedModel] = []
    else:
        scraped = await scrape_financing(fetcher, config, catalog.urls(), stats)
        total = sum(len(m.financing_options) for m in scraped)
        log("[feed] scraped", len(scraped), "models,", total, "financing options")
        if total == 0:
            raise EmptyResultError(config.mode)
        items = financing_items(scraped)
        xml = render_feed(items, FINANCING_CHANNEL)

    if not items:
        raise EmptyResultError(config.mode)

    log("[feed] generated", len(items), "items")
    return RunResult(
        mode=config.mode,
        xml=xml,
        item_count=len(items),
        models=models,
        scraped=scraped,
        stats=stats,
    )


async def run(fetcher: Any, config: FeedConfig) -> RunResult:
    """Build the feed, then overwrite the output file (and status page)."""
    result = await build_feed(fetcher, config)
    path = write_feed(config.output_path, result.xml)
    result.output_path = str(path)
    if config.status_page:
        write_status_page(config.output_dir, result, config.output_file)
    return result
