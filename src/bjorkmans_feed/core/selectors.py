# Keep selectors minimal & robust.

# Listing page (/modeller/): one wrapper per category, one .model per entry.
CATEGORY_WRAP_SEL = "div.cat-wrap"
CATEGORY_TITLE_SEL = "h2"
MODEL_ENTRY_SEL = "div.model"
MODEL_NAME_SEL = "h3"

# Model page
VARIANT_IMAGE_SEL = ".img-container img"
OG_IMAGE_SEL = "meta[property='og:image']"
FINANCING_BUTTON_SEL = "button.financing-menu-button"
# Package labels on a financing page carry "<package> <price> kr/mån".
RADIO_LABEL_SEL = "input[type='radio'] + label, label:has(input[type='radio'])"

CONSENT_BUTTON_TEXT = "Acceptera alla"

UPLOADS_MARKER = "wp-content/uploads"
PLACEHOLDER_IMAGES = ("elbil.png",)


READY_STATE_JS = "document.readyState"


def count_js(selector: str) -> str:
    return f"document.querySelectorAll({selector!r}).length"


MODEL_INFO_JS = f"""(() => {{
  const clean = (s) => (s || "").replace(/\\s+/g, " ").trim();

  const h1 = document.querySelector("h1");
  const img = document.querySelector({VARIANT_IMAGE_SEL!r});
  const og = document.querySelector({OG_IMAGE_SEL!r});

  const buttons = Array.from(document.querySelectorAll({FINANCING_BUTTON_SEL!r}))
    .map(b => ({{ type: clean(b.textContent), url: (b.getAttribute("data-location") || "").trim() }}))
    .filter(b => b.url);

  return JSON.stringify({{
    name: h1 ? clean(h1.textContent) : "",
    variantImage: img ? (img.src || img.getAttribute("data-src") || "") : "",
    ogImage: og ? (og.getAttribute("content") || "") : "",
    financing: buttons
  }});
}})()"""


RADIO_LABELS_JS = f"""(() => JSON.stringify(
  Array.from(document.querySelectorAll({RADIO_LABEL_SEL!r}))
    .map(l => (l.textContent || "").trim())
    .filter(Boolean)
))()"""


def consent_click_js(text: str) -> str:
    """Click the first visible button/link whose text contains `text` (any case). Returns bool."""
    return f"""(() => {{
      const want = {text!r}.toLowerCase();
      const clean = (s) => (s || "").replace(/\\s+/g, " ").trim().toLowerCase();
      const nodes = Array.from(document.querySelectorAll("button, a, [role='button']"));
      const el = nodes.find(n => clean(n.textContent).includes(want) && n.getClientRects().length > 0);
      if (!el) return false;
      el.scrollIntoView({{block: "center", inline: "center"}});
      el.click();
      return true;
    }})()"""
