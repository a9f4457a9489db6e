from __future__ import annotations

import datetime
import html
import os
import stat
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from ..core.log import log
from ..core.models import RunResult
from ..core.pricing import SWEDISH_MONTHLY

PathLike = Union[str, os.PathLike]

DEALER_URL = "https://www.bjorkmansbil.se"
COMMERCE_MANAGER_URL = "https://business.facebook.com/commerce/"
STATUS_PAGE_FILE = "index.html"


def _file_mode(path: Path) -> int:
    """Mode of the file being replaced, else what open() would create under the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_text_atomic(path: PathLike, text: str) -> Path:
    """Replace `path` in one step so readers never see a half-written file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = _file_mode(path)
    # mkstemp creates 0600; the feed is served by other users
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    return path


def write_feed(path: PathLike, xml: str) -> Path:
    path = write_text_atomic(path, xml)
    log("[feed] saved", path, f"({len(xml.encode('utf-8')) / 1024:.2f} KB)")
    return path


def _e(value) -> str:
    return html.escape(str(value) if value is not None else "")


def _table(result: RunResult) -> List[str]:
    if result.mode == "financing":
        head = ["Modell", "Paket", "Finansiering", "Månadskostnad"]
        rows = [
            [m.name, o.package_name, o.financing_type, f"{SWEDISH_MONTHLY.format(o.monthly_price)} {SWEDISH_MONTHLY.unit_suffix}"]
            for m in result.scraped
            for o in m.financing_options
        ]
    else:
        head = ["Modell", "Kategorier", "Beskrivning"]
        rows = [[m.name, ", ".join(m.categories), m.description] for m in result.models]

    out = ["    <table>", "      <thead>", "        <tr>"]
    out += [f"          <th>{_e(h)}</th>" for h in head]
    out += ["        </tr>", "      </thead>", "      <tbody>"]
    for row in rows:
        cells = "".join(
            f"<td><strong>{_e(c)}</strong></td>" if i == 0 else f"<td>{_e(c)}</td>"
            for i, c in enumerate(row)
        )
        out.append(f"        <tr>{cells}</tr>")
    out += ["      </tbody>", "    </table>"]
    return out


def render_status_page(
    result: RunResult,
    feed_file: str = "feed.xml",
    now: Optional[datetime.datetime] = None,
) -> str:
    now = now or datetime.datetime.now()
    models = len(result.scraped) if result.mode == "financing" else len(result.models)
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        "  <title>Björkmans Bil - Nya Kia Modeller Feed</title>",
        '  <meta charset="utf-8">',
        "  <style>",
        "    body { font-family: Arial, sans-serif; max-width: 800px; margin: 50px auto; padding: 20px; }",
        "    .info { background: #f0f0f0; padding: 20px; border-radius: 5px; }",
        "    .feed-url { background: #e8f5e9; padding: 15px; border-radius: 5px; margin: 20px 0; word-break: break-all; }",
        "    table { width: 100%; border-collapse: collapse; margin: 20px 0; }",
        "    th, td { padding: 10px; text-align: left; border-bottom: 1px solid #ddd; }",
        "  </style>",
        "</head>",
        "<body>",
        "  <h1>Björkmans Bil - Kia Modeller Feed</h1>",
        '  <div class="info">',
        "    <h2>Feed URL</h2>",
        '    <div class="feed-url">',
        "      <strong>Use this URL in Facebook Commerce Manager:</strong><br><br>",
        '      <code id="feedUrl">Loading...</code>',
        "    </div>",
        "    <h2>Status</h2>",
        "    <p>Feed is active and updating automatically every hour</p>",
        f"    <p>Last updated: <strong>{_e(now.strftime('%Y-%m-%d %H:%M:%S'))}</strong></p>",
        f"    <p>Total models: <strong>{models}</strong></p>",
        f"    <p>Total feed items: <strong>{result.item_count}</strong></p>",
        "    <h2>Innehåll</h2>",
    ]
    parts += _table(result)
    parts += [
        "    <h2>Quick Links</h2>",
        "    <ul>",
        f'      <li><a href="{_e(feed_file)}">View XML Feed</a></li>',
        f'      <li><a href="{COMMERCE_MANAGER_URL}" target="_blank">Facebook Commerce Manager</a></li>',
        f'      <li><a href="{DEALER_URL}" target="_blank">Björkmans Bil Website</a></li>',
        "    </ul>",
        "  </div>",
        "  <script>",
        f"    const feedUrl = window.location.origin + window.location.pathname + {feed_file!r};",
        "    document.getElementById('feedUrl').textContent = feedUrl;",
        "  </script>",
        "</body>",
        "</html>",
    ]
    return "\n".join(parts)


def write_status_page(output_dir: PathLike, result: RunResult, feed_file: str = "feed.xml") -> Path:
    path = write_text_atomic(Path(output_dir) / STATUS_PAGE_FILE, render_status_page(result, feed_file))
    log("[feed] status page", path)
    return path
