"""Category/model listing page -> unique VehicleModel records."""

from __future__ import annotations

import re
from typing import Dict, Iterator, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from .models import VehicleModel, id_from_url
from .selectors import (
    CATEGORY_TITLE_SEL,
    CATEGORY_WRAP_SEL,
    MODEL_ENTRY_SEL,
    MODEL_NAME_SEL,
)

_WS_RE = re.compile(r"\s+")


def clean_text(s: Optional[str]) -> str:
    # \s covers &nbsp; once BeautifulSoup has decoded it to U+00A0
    return _WS_RE.sub(" ", s or "").strip()


class ModelCatalog:
    """
    Ordered accumulator of models keyed by URL, owned by one pipeline run.

    The first sighting of a URL creates the model; later sightings only
    add categories the model does not have yet.
    """

    def __init__(self) -> None:
        self._by_url: Dict[str, VehicleModel] = {}

    def add(self, model: VehicleModel, category: str) -> VehicleModel:
        existing = self._by_url.get(model.url)
        if existing is None:
            model.categories = []
            model.add_category(category)
            self._by_url[model.url] = model
            return model
        existing.add_category(category)
        return existing

    def __len__(self) -> int:
        return len(self._by_url)

    def __contains__(self, url: object) -> bool:
        return url in self._by_url

    def __iter__(self) -> Iterator[VehicleModel]:
        return iter(self._by_url.values())

    def models(self) -> List[VehicleModel]:
        return list(self._by_url.values())

    def urls(self) -> List[str]:
        return list(self._by_url.keys())

    def category_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for model in self:
            for cat in model.categories:
                counts[cat] = counts.get(cat, 0) + 1
        return counts


def parse_model_entry(entry: Tag, base_url: str = "") -> Optional[VehicleModel]:
    link = entry.find("a", href=True)
    href = (link.get("href") or "").strip() if link else ""
    if not href:
        return None
    url = urljoin(base_url, href) if base_url else href

    name_el = entry.select_one(MODEL_NAME_SEL)
    name = clean_text(name_el.get_text()) if name_el else ""

    desc_el = entry.find("p")
    description = clean_text(desc_el.get_text()) if desc_el else ""

    img = entry.find("img")
    image_url = ""
    image_alt = name
    if img is not None:
        image_url = (img.get("src") or img.get("data-src") or "").strip()
        if image_url and base_url:
            image_url = urljoin(base_url, image_url)
        image_alt = clean_text(img.get("alt")) or name

    return VehicleModel(
        id=id_from_url(url),
        name=name,
        description=description,
        url=url,
        image_url=image_url,
        image_alt=image_alt,
    )


def category_name(block: Tag) -> str:
    title = block.select_one(CATEGORY_TITLE_SEL)
    name = clean_text(title.get_text()) if title else ""
    return name or clean_text(block.get("id"))


def parse_listing(
    html: str,
    base_url: str = "",
    catalog: Optional[ModelCatalog] = None,
) -> ModelCatalog:
    """
    Walk every category block on the listing page and merge its model
    entries into `catalog` (a fresh one if not given).
    """
    if catalog is None:
        catalog = ModelCatalog()

    soup = BeautifulSoup(html, "html.parser")
    for block in soup.select(f"{CATEGORY_WRAP_SEL}[id]"):
        category = category_name(block)
        for entry in block.select(MODEL_ENTRY_SEL):
            model = parse_model_entry(entry, base_url)
            if model is None:
                continue
            catalog.add(model, category)

    return catalog
