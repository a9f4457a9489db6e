"""Data models for scraped vehicle models and financing prices."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field

# Björkmans Bil sells Kia
BRAND = "Kia"


def id_from_url(url: str) -> str:
    """Last non-empty path segment of `url`."""
    parts = [p for p in urlparse(url).path.split("/") if p]
    return parts[-1] if parts else ""


class VehicleModel(BaseModel):
    """One model line on the listing page, keyed by its detail-page URL."""

    id: str
    name: str
    description: str = ""
    url: str
    image_url: str = ""
    image_alt: str = ""
    categories: list[str] = Field(default_factory=list)
    brand: str = BRAND

    def add_category(self, category: str) -> bool:
        if category in self.categories:
            return False
        self.categories.append(category)
        return True


class FinancingOption(BaseModel):
    financing_type: str
    package_name: str
    monthly_price: int

    @property
    def key(self) -> tuple[str, str]:
        return (self.package_name, self.financing_type)


class ScrapedModel(BaseModel):
    """A model page together with its deduplicated financing options."""

    name: str
    url: str
    image_url: str = ""
    financing_options: list[FinancingOption] = Field(default_factory=list)


class RunStats(BaseModel):
    """Counters for one run; failures below model level are tolerated."""

    models_listed: int = 0
    models_scraped: int = 0
    models_failed: int = 0
    financing_types_attempted: int = 0
    financing_types_succeeded: int = 0
    financing_types_failed: int = 0
    labels_matched: int = 0
    labels_rejected: int = 0
    labels_mismatched: int = 0


class RunResult(BaseModel):
    mode: str
    xml: str
    item_count: int
    models: list[VehicleModel] = Field(default_factory=list)
    scraped: list[ScrapedModel] = Field(default_factory=list)
    stats: RunStats = Field(default_factory=RunStats)
    output_path: Optional[str] = None
