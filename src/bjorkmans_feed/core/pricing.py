"""
Monthly-price labels as printed on the financing pages.

A label looks like "Plus FWD Long Range 3 412 kr/mån": the package name,
then the price grouped by spaces, then the unit. The number format lives in
a PriceFormat so another locale only needs another instance.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel

from .errors import ParseMismatch

_WS_RE = re.compile(r"\s+")

# Anything at or below this is a mis-parsed fragment, not a monthly cost.
PRICE_FLOOR = 1000

# Extras sold on top of a package (tow hook, winter wheels, LED ramp).
ACCESSORY_KEYWORDS = ("dragkrok", "vinterhjul", "led-ramp")
# Fine print about lease terms or mileage per year.
PRICING_NOTE_KEYWORDS = ("privatleasing", "mil/år")


class PriceFormat(BaseModel):
    locale: str
    thousands_separator: str
    unit_suffix: str
    currency: str
    unit: str

    def pattern(self) -> re.Pattern:
        if self.thousands_separator.isspace():
            sep = r"\s"
        else:
            sep = r"\s" + re.escape(self.thousands_separator)
        return re.compile(rf"^(.+?)\s+(\d[{sep}\d]+)\s*{re.escape(self.unit_suffix)}")

    def to_int(self, digits: str) -> int:
        cleaned = _WS_RE.sub("", digits).replace(self.thousands_separator, "")
        return int(cleaned)

    def format(self, price: int) -> str:
        return f"{price:,}".replace(",", self.thousands_separator)


SWEDISH_MONTHLY = PriceFormat(
    locale="sv-SE",
    thousands_separator=" ",
    unit_suffix="kr/mån",
    currency="SEK",
    unit="kr",
)


def normalize_label(text: str) -> str:
    return _WS_RE.sub(" ", text or "").strip()


def parse_price_label(text: str, fmt: PriceFormat = SWEDISH_MONTHLY) -> tuple[str, int]:
    """
    Split a label into (package name, monthly price).

    Raises ParseMismatch when the label carries no price in `fmt`.
    """
    label = normalize_label(text)
    m = fmt.pattern().match(label)
    if not m:
        raise ParseMismatch(text)
    return m.group(1).strip(), fmt.to_int(m.group(2))


def rejection_reason(package_name: str, price: int) -> Optional[str]:
    """Why a parsed label is noise rather than a package, or None to keep it."""
    name = package_name.lower()
    if price <= PRICE_FLOOR:
        return "below-floor"
    if package_name.startswith("+"):
        return "add-on"
    if any(k in name for k in ACCESSORY_KEYWORDS):
        return "accessory"
    if any(k in name for k in PRICING_NOTE_KEYWORDS):
        return "pricing-note"
    return None


def format_price(price: int, fmt: PriceFormat = SWEDISH_MONTHLY) -> str:
    return fmt.format(price)
