"""Monthly financing prices per package, scraped from each model page."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urljoin

from .errors import NavigationError, ParseMismatch, SelectorTimeoutError
from .log import log
from .models import FinancingOption, RunStats, ScrapedModel
from .pricing import SWEDISH_MONTHLY, PriceFormat, parse_price_label, rejection_reason
from .selectors import MODEL_INFO_JS, PLACEHOLDER_IMAGES, RADIO_LABELS_JS, UPLOADS_MARKER


def pick_image(variant_image: str, og_image: str) -> str:
    """
    Variant image from the page's image container first, then og:image.
    Only uploaded media counts; the generic placeholder does not.
    """
    if (
        variant_image
        and UPLOADS_MARKER in variant_image
        and not any(p in variant_image for p in PLACEHOLDER_IMAGES)
    ):
        return variant_image
    if og_image and UPLOADS_MARKER in og_image:
        return og_image
    return ""


def extract_options(
    labels: Iterable[str],
    financing_type: str,
    stats: Optional[RunStats] = None,
    fmt: PriceFormat = SWEDISH_MONTHLY,
) -> List[FinancingOption]:
    stats = stats if stats is not None else RunStats()
    options: List[FinancingOption] = []
    for text in labels:
        try:
            package, price = parse_price_label(text, fmt)
        except ParseMismatch:
            stats.labels_mismatched += 1
            continue

        if rejection_reason(package, price):
            stats.labels_rejected += 1
            continue

        stats.labels_matched += 1
        options.append(
            FinancingOption(financing_type=financing_type, package_name=package, monthly_price=price)
        )
    return options


def dedupe_options(options: Iterable[FinancingOption]) -> List[FinancingOption]:
    """One option per (package, financing type); the cheaper one wins."""
    best: Dict[Tuple[str, str], FinancingOption] = {}
    for opt in options:
        current = best.get(opt.key)
        if current is None or opt.monthly_price < current.monthly_price:
            best[opt.key] = opt
    return list(best.values())


class FinancingExtractor:
    def __init__(
        self,
        fetcher: Any,
        stats: Optional[RunStats] = None,
        nav_timeout: float = 30.0,
        consent_timeout: float = 2.0,
        settle_delay: float = 2.0,
        financing_delay: float = 1.5,
        fmt: PriceFormat = SWEDISH_MONTHLY,
    ) -> None:
        self.fetcher = fetcher
        self.stats = stats if stats is not None else RunStats()
        self.nav_timeout = nav_timeout
        self.consent_timeout = consent_timeout
        self.settle_delay = settle_delay
        self.financing_delay = financing_delay
        self.fmt = fmt

    async def scrape(self, model_url: str) -> Optional[ScrapedModel]:
        """
        Scrape one model page and all of its financing tabs.

        Returns None when the model page itself cannot be loaded. A failing
        financing tab is logged and skipped.
        """
        log("[detail] open", model_url)
        try:
            await self.fetcher.load(model_url, timeout=self.nav_timeout)
        except (NavigationError, SelectorTimeoutError) as e:
            log("[detail] FAILED", model_url, repr(e))
            self.stats.models_failed += 1
            return None

        await self.fetcher.sleep(self.settle_delay)
        await self.fetcher.dismiss_consent(self.consent_timeout)

        info = await self.fetcher.evaluate_json(MODEL_INFO_JS) or {}
        name = info.get("name") or ""
        image_url = pick_image(info.get("variantImage") or "", info.get("ogImage") or "")
        targets = [
            (t.get("type") or "", urljoin(model_url, t["url"]))
            for t in info.get("financing") or []
            if t.get("url")
        ]
        log("[detail] model=", repr(name), "image=", image_url[:60] or "-", "financing types=", len(targets))

        collected: List[FinancingOption] = []
        for financing_type, target in targets:
            self.stats.financing_types_attempted += 1
            log("[financing]", financing_type, target)
            try:
                options = await self._scrape_target(financing_type, target)
            except Exception as e:
                self.stats.financing_types_failed += 1
                log("[financing] FAILED", financing_type, target, repr(e))
                continue
            self.stats.financing_types_succeeded += 1
            for opt in options:
                log("[financing]   -", opt.package_name, f"{opt.monthly_price} {self.fmt.unit_suffix}")
            collected.extend(options)

        unique = dedupe_options(collected)
        log("[detail] options after dedup:", len(unique), "of", len(collected))
        self.stats.models_scraped += 1
        return ScrapedModel(name=name, url=model_url, image_url=image_url, financing_options=unique)

    async def _scrape_target(self, financing_type: str, target: str) -> List[FinancingOption]:
        await self.fetcher.load(target, timeout=self.nav_timeout)
        await self.fetcher.sleep(self.financing_delay)
        labels = await self.fetcher.evaluate_json(RADIO_LABELS_JS) or []
        return extract_options(labels, financing_type, self.stats, self.fmt)
