import asyncio
import xml.etree.ElementTree as ET

import pytest

from bjorkmans_feed.core.errors import EmptyResultError, NavigationError, SelectorTimeoutError
from bjorkmans_feed.core.pipeline import build_feed, run
from fakes import LISTING_URL, FakeFetcher, financing_page, model_page

EV3 = "https://www.bjorkmansbil.se/modeller/kia-ev3/"
EV6 = "https://www.bjorkmansbil.se/modeller/kia-ev6/"


def test_models_feed_end_to_end(listing_html, config):
    fetcher = FakeFetcher({LISTING_URL: {"html": listing_html}})
    result = asyncio.run(run(fetcher, config))

    assert result.item_count == 2
    assert [m.url for m in result.models] == [EV3, EV6]
    assert len(result.models[0].categories) == 2
    assert result.stats.models_listed == 2

    written = config.output_path.read_text(encoding="utf-8")
    assert written == result.xml
    items = ET.fromstring(written).findall("channel/item")
    assert len(items) == 2
    assert (config.output_path.parent / "index.html").exists()


def test_financing_feed_tolerates_failing_models(listing_html, config):
    config.mode = "financing"
    config.status_page = False
    fetcher = FakeFetcher(
        {
            LISTING_URL: {"html": listing_html},
            EV6: model_page("Kia EV6", [("Billån", "?f=lan"), ("Privatleasing", "?f=leasing")]),
            EV6 + "?f=lan": financing_page("Plus RWD 3 412 kr/mån", "GT-Line AWD 5 120 kr/mån"),
        },
        broken=[EV3],
    )
    result = asyncio.run(run(fetcher, config))

    assert result.item_count == 2
    assert [m.name for m in result.scraped] == ["Kia EV6"]
    s = result.stats
    assert (s.models_listed, s.models_scraped, s.models_failed) == (2, 1, 1)
    assert (s.financing_types_succeeded, s.financing_types_attempted) == (1, 2)
    assert len(ET.fromstring(config.output_path.read_text(encoding="utf-8")).findall("channel/item")) == 2
    assert not (config.output_path.parent / "index.html").exists()


def test_empty_listing_is_fatal_and_keeps_previous_feed(config):
    config.output_path.parent.mkdir(parents=True)
    config.output_path.write_text("previous feed", encoding="utf-8")
    fetcher = FakeFetcher({LISTING_URL: {"html": '<div id="x" class="cat-wrap"><h2>Tom</h2></div>'}})

    with pytest.raises(EmptyResultError):
        asyncio.run(run(fetcher, config))
    assert config.output_path.read_text(encoding="utf-8") == "previous feed"


def test_no_financing_options_is_fatal(listing_html, config):
    config.mode = "financing"
    fetcher = FakeFetcher(
        {
            LISTING_URL: {"html": listing_html},
            EV3: model_page("Kia EV3", []),
            EV6: model_page("Kia EV6", [("Billån", "?f=lan")]),
            EV6 + "?f=lan": financing_page("+ Dragkrok 299 kr/mån"),
        }
    )
    with pytest.raises(EmptyResultError):
        asyncio.run(run(fetcher, config))
    assert not config.output_path.exists()


def test_listing_navigation_failure_is_fatal(config):
    with pytest.raises(NavigationError):
        asyncio.run(build_feed(FakeFetcher({}), config))


def test_listing_layout_change_is_fatal(listing_html, config):
    fetcher = FakeFetcher({LISTING_URL: {"html": listing_html}}, missing_selector=[LISTING_URL])
    with pytest.raises(SelectorTimeoutError):
        asyncio.run(build_feed(fetcher, config))
