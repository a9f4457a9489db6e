"""RSS 2.0 product feed with Google Merchant (g:) fields, for Facebook/Google ads."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional
from xml.sax.saxutils import escape

from pydantic import BaseModel, Field

from .models import BRAND, ScrapedModel, VehicleModel, id_from_url
from .pricing import SWEDISH_MONTHLY, PriceFormat

GOOGLE_PRODUCT_CATEGORY = "916"  # Vehicles
FB_PRODUCT_CATEGORY = "173"  # Vehicles
MAX_CUSTOM_LABELS = 5

_ENTITIES = {'"': "&quot;", "'": "&apos;"}
_SLUG_RE = re.compile(r"[^a-z0-9]+")


class Channel(BaseModel):
    title: str
    link: str
    description: str


MODELS_CHANNEL = Channel(
    title="Björkmans Bil - Nya Kia Modeller",
    link="https://www.bjorkmansbil.se",
    description="Björkmans Bil - Kia Vehicle Models",
)

FINANCING_CHANNEL = Channel(
    title="Björkmans Bil - Nya Kia Modeller med Finansiering",
    link="https://www.bjorkmansbil.se",
    description="Björkmans Bil - Kia Models with Financing Options",
)


class FeedItem(BaseModel):
    id: str
    title: str
    description: str
    link: str
    url: Optional[str] = None
    brand: str = BRAND
    image_link: str = ""
    price: Optional[str] = None
    custom_labels: List[str] = Field(default_factory=list)
    product_type: Optional[str] = None


def escape_xml(value) -> str:
    if value is None:
        return ""
    return escape(str(value), _ENTITIES)


def slugify(text: str) -> str:
    return _SLUG_RE.sub("-", text.lower()).strip("-")


def model_item(model: VehicleModel) -> Optional[FeedItem]:
    model_id = slugify(model.id or id_from_url(model.url))
    if not model_id or not model.name or not model.url:
        return None

    category_text = ", ".join(model.categories)
    if model.description:
        description = f"{model.description} Kategorier: {category_text}."
    else:
        description = f"{model.name}. Kategorier: {category_text}."

    product_type = None
    if model.categories:
        product_type = f"Fordon > Nya Bilar > {model.brand} > {model.categories[0]}"

    return FeedItem(
        id=model_id,
        title=model.name,
        description=description,
        link=model.url,
        url=model.url,
        brand=model.brand,
        image_link=model.image_url,
        custom_labels=model.categories[:MAX_CUSTOM_LABELS],
        product_type=product_type,
    )


def model_items(models: Iterable[VehicleModel]) -> List[FeedItem]:
    return [item for item in (model_item(m) for m in models) if item is not None]


def financing_items(scraped: Iterable[ScrapedModel], fmt: PriceFormat = SWEDISH_MONTHLY) -> List[FeedItem]:
    items: List[FeedItem] = []
    for model in scraped:
        for opt in model.financing_options:
            price = opt.monthly_price
            items.append(
                FeedItem(
                    id=slugify(f"{model.name}-{opt.package_name}-{opt.financing_type}"),
                    title=f"{model.name} {opt.package_name} - {opt.financing_type}",
                    description=(
                        f"{model.name} {opt.package_name}. {opt.financing_type} "
                        f"från {fmt.format(price)} {fmt.unit_suffix}."
                    ),
                    link=model.url,
                    image_link=model.image_url,
                    price=f"{price} {fmt.currency}",
                    custom_labels=[
                        opt.financing_type,
                        opt.package_name,
                        f"Månadskostnad: {price} {fmt.unit}",
                    ],
                )
            )
    return items


def _item_xml(item: FeedItem) -> List[str]:
    lines = [
        "    <item>",
        f"    <g:google_product_category>{GOOGLE_PRODUCT_CATEGORY}</g:google_product_category>",
        f"    <g:fb_product_category>{FB_PRODUCT_CATEGORY}</g:fb_product_category>",
        f"    <g:id>{escape_xml(item.id)}</g:id>",
        f"    <title>{escape_xml(item.title)}</title>",
        f"    <description>{escape_xml(item.description)}</description>",
        f"    <link>{escape_xml(item.link)}</link>",
    ]
    if item.url:
        lines.append(f"    <g:url>{escape_xml(item.url)}</g:url>")
    lines.append(f"    <g:brand>{escape_xml(item.brand)}</g:brand>")
    if item.image_link:
        lines.append(f"    <g:image_link>{escape_xml(item.image_link)}</g:image_link>")
    if item.price:
        lines.append(f"    <g:price>{escape_xml(item.price)}</g:price>")
    for i, label in enumerate(item.custom_labels[:MAX_CUSTOM_LABELS]):
        lines.append(f"    <g:custom_label_{i}>{escape_xml(label)}</g:custom_label_{i}>")
    lines.append("    <g:availability>in stock</g:availability>")
    lines.append("    <g:condition>new</g:condition>")
    if item.product_type:
        lines.append(f"    <g:product_type>{escape_xml(item.product_type)}</g:product_type>")
    lines.append("    </item>")
    return lines


def render_feed(items: Iterable[FeedItem], channel: Channel = MODELS_CHANNEL) -> str:
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:g="http://base.google.com/ns/1.0">',
        "  <channel>",
        f"    <title>{escape_xml(channel.title)}</title>",
        f"    <link>{escape_xml(channel.link)}</link>",
        f"    <description>{escape_xml(channel.description)}</description>",
    ]
    for item in items:
        lines.extend(_item_xml(item))
    lines.append("  </channel>")
    lines.append("</rss>")
    return "\n".join(lines)
