import pytest

from bjorkmans_feed.config import FeedConfig
from fakes import FIXTURE_DIR, LISTING_URL


@pytest.fixture
def listing_html():
    return (FIXTURE_DIR / "listing.html").read_text(encoding="utf-8")


@pytest.fixture
def config(tmp_path):
    return FeedConfig(
        website_url=LISTING_URL,
        output_dir=str(tmp_path / "output"),
        mode="models",
    )
