# ---- CONTENT DOCUMENT SCHEMA ----
"""
Canonical shape of the site content document.

``normalize`` turns any partial or older-shape document into the current
shape by merging it field by field over the defaults. It only raises
``ContentValidationError`` for input it cannot interpret (wrong container
types, bad enum values, missing or duplicate ids).
"""
import copy
import logging
from decimal import Decimal, InvalidOperation

from .errors import ContentValidationError

logger = logging.getLogger(__name__)

TEXT_POSITIONS = ("left", "center", "right")
BACKGROUND_TYPES = ("image", "video")

DEFAULT_DOCUMENT = {
    "logo": {"url": ""},
    "hero": {
        "title": "Welcome to Au Lait",
        "subtitle": "Your content is ready to be customized. Use the admin dashboard to add your coffee shop information.",
        "cta": "Explore Our Menu",
        "video": "",
    },
    "about": {
        "title": "About Our Coffee Shop",
        "content": "Welcome to our coffee shop! We're excited to serve you the finest coffee and create memorable experiences.",
        "image": "",
    },
    "contact": {
        "address": "123 Coffee Street",
        "phone": "(555) 123-4567",
        "email": "contact@aulait.coffee",
        "hours": "Mon-Fri: 7AM-8PM, Sat-Sun: 8AM-6PM",
    },
    "gallery": {"title": "Our Gallery", "images": []},
    "footer": {
        "brandName": "Au Lait",
        "brandDescription": "Experience coffee that transcends the ordinary. Crafted with passion, brewed to perfection.",
        "address": "123 Coffee Street",
        "city": "Metropolis, NY 10001",
        "phone": "(555) 123-4567",
        "email": "contact@aulait.coffee",
        "copyright": "© 2025 Au Lait Coffee Shop. All Rights Reserved.",
        "socialLinks": [],
    },
    "settings": {"siteTitle": "Au Lait Coffee Shop", "favicon": ""},
    "categories": [],
    "products": [],
}

SECTIONS = tuple(DEFAULT_DOCUMENT)

DEFAULT_SLIDE = {
    "title": "",
    "subtitle": "",
    "cta": "",
    "backgroundType": "image",
    "backgroundUrl": "",
    "overlayOpacity": 50,
    "textPosition": "center",
}


def synthesize_default():
    """Fully populated placeholder document used when nothing is stored."""
    return copy.deepcopy(DEFAULT_DOCUMENT)


def is_section(name):
    return name in DEFAULT_DOCUMENT


# --------------------------
# Helpers
# --------------------------

def _text(value, default=""):
    if value is None:
        return default
    if isinstance(value, (dict, list)):
        raise ContentValidationError("Expected a text value")
    return str(value)


def _clean_id(value):
    v = (str(value) if value is not None else "").strip()
    return v or None


def _as_dict(value, path):
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ContentValidationError(f"'{path}' must be an object", field=path)
    return value


def _as_list(value, path):
    if value is None:
        return []
    if not isinstance(value, list):
        raise ContentValidationError(f"'{path}' must be a list", field=path)
    return value


def _text_fields(value, defaults, path):
    """Copy every text field of ``defaults``; missing or null keeps the default."""
    out = {}
    for key, default in defaults.items():
        try:
            out[key] = _text(value.get(key), default)
        except ContentValidationError:
            raise ContentValidationError(f"'{path}.{key}' must be text", field=f"{path}.{key}")
    return out


def _opacity(value, path):
    if isinstance(value, bool):
        raise ContentValidationError(f"'{path}' must be a number between 0 and 100", field=path)
    try:
        n = int(round(float(value)))
    except (TypeError, ValueError):
        raise ContentValidationError(f"'{path}' must be a number between 0 and 100", field=path)
    return max(0, min(100, n))


def _text_position(value, path):
    pos = str(value).strip().lower()
    if pos not in TEXT_POSITIONS:
        raise ContentValidationError(
            f"'{path}' must be one of {', '.join(TEXT_POSITIONS)}", field=path
        )
    return pos


def _check_unique(items, path):
    seen = set()
    for item in items:
        if item["id"] in seen:
            raise ContentValidationError(f"Duplicate id '{item['id']}' in {path}", field=path)
        seen.add(item["id"])


# --------------------------
# Section normalizers
# --------------------------

def _normalize_slide(raw, index):
    path = f"hero.slides[{index}]"
    raw = _as_dict(raw, path)
    slide = {"id": _clean_id(raw.get("id")) or f"slide-{index + 1}"}
    for key in ("title", "subtitle", "cta", "backgroundUrl"):
        slide[key] = _text(raw.get(key), DEFAULT_SLIDE[key])
    bg_type = _text(raw.get("backgroundType"), DEFAULT_SLIDE["backgroundType"]).strip().lower()
    slide["backgroundType"] = bg_type if bg_type in BACKGROUND_TYPES else DEFAULT_SLIDE["backgroundType"]
    opacity = raw.get("overlayOpacity")
    slide["overlayOpacity"] = DEFAULT_SLIDE["overlayOpacity"] if opacity is None else _opacity(opacity, f"{path}.overlayOpacity")
    position = raw.get("textPosition")
    slide["textPosition"] = DEFAULT_SLIDE["textPosition"] if position in (None, "") else _text_position(position, f"{path}.textPosition")
    return slide


def _normalize_hero(raw):
    raw = _as_dict(raw, "hero")
    hero = _text_fields(raw, DEFAULT_DOCUMENT["hero"], "hero")
    # optional fields only appear when the editor has set them
    if raw.get("backgroundImage") is not None:
        hero["backgroundImage"] = _text(raw["backgroundImage"])
    if raw.get("overlayOpacity") is not None:
        hero["overlayOpacity"] = _opacity(raw["overlayOpacity"], "hero.overlayOpacity")
    if raw.get("textPosition") not in (None, ""):
        hero["textPosition"] = _text_position(raw["textPosition"], "hero.textPosition")
    if raw.get("slides") is not None:
        hero["slides"] = [_normalize_slide(s, i) for i, s in enumerate(_as_list(raw["slides"], "hero.slides"))]
    return hero


def _normalize_gallery(raw):
    raw = _as_dict(raw, "gallery")
    images = []
    for item in _as_list(raw.get("images"), "gallery.images"):
        # rows from the old gallery table carried {image_url} objects
        if isinstance(item, dict):
            item = item.get("url") or item.get("image_url")
        url = _text(item).strip()
        if url:
            images.append(url)
    return {
        "title": _text(raw.get("title"), DEFAULT_DOCUMENT["gallery"]["title"]),
        "images": images,
    }


def normalize_social_link(raw, index=0):
    path = f"footer.socialLinks[{index}]"
    raw = _as_dict(raw, path)
    platform = _text(raw.get("platform")).strip()
    return {
        "id": _clean_id(raw.get("id")) or f"{(platform or 'link').lower()}-{index + 1}",
        "platform": platform,
        "url": _text(raw.get("url")).strip(),
        "icon": _text(raw.get("icon"), platform.lower()),
    }


def _normalize_footer(raw):
    raw = _as_dict(raw, "footer")
    text_defaults = {k: v for k, v in DEFAULT_DOCUMENT["footer"].items() if k != "socialLinks"}
    footer = _text_fields(raw, text_defaults, "footer")
    footer["socialLinks"] = [
        normalize_social_link(link, i)
        for i, link in enumerate(_as_list(raw.get("socialLinks"), "footer.socialLinks"))
    ]
    return footer


def normalize_category(raw, index=0):
    path = f"categories[{index}]"
    raw = _as_dict(raw, path)
    category_id = _clean_id(raw.get("id"))
    if not category_id:
        raise ContentValidationError(f"'{path}.id' is required", field=f"{path}.id")
    return {
        "id": category_id,
        "name": _text(raw.get("name")).strip(),
        "description": _text(raw.get("description")),
    }


def normalize_product(raw, index=0):
    """
    Products keep whichever price shape they were saved with: a legacy flat
    ``price``, a ``sizes`` list, or both. Sizes without a price are dropped.
    """
    path = f"products[{index}]"
    raw = _as_dict(raw, path)
    product_id = _clean_id(raw.get("id"))
    if not product_id:
        raise ContentValidationError(f"'{path}.id' is required", field=f"{path}.id")

    category = raw.get("category", raw.get("category_id"))
    image = raw.get("image", raw.get("image_url"))
    product = {
        "id": product_id,
        "name": _text(raw.get("name")).strip(),
        "description": _text(raw.get("description")),
        "category": _clean_id(category),
        "image": _text(image),
    }
    if raw.get("price") is not None:
        product["price"] = _text(raw["price"]).strip()
    if raw.get("sizes") is not None:
        sizes = []
        for j, size in enumerate(_as_list(raw["sizes"], f"{path}.sizes")):
            size = _as_dict(size, f"{path}.sizes[{j}]")
            price = _text(size.get("price")).strip()
            if not price:
                continue
            sizes.append({"size": _text(size.get("size")).strip(), "price": price})
        product["sizes"] = sizes
    return product


def normalize(doc):
    """
    Return a complete document built from ``doc`` merged over the defaults.

    Unknown top-level keys are dropped. Normalizing an already normalized
    document returns an equal document.
    """
    doc = _as_dict(doc, "document")
    out = {
        "logo": _text_fields(_as_dict(doc.get("logo"), "logo"), DEFAULT_DOCUMENT["logo"], "logo"),
        "hero": _normalize_hero(doc.get("hero")),
        "about": _text_fields(_as_dict(doc.get("about"), "about"), DEFAULT_DOCUMENT["about"], "about"),
        "contact": _text_fields(_as_dict(doc.get("contact"), "contact"), DEFAULT_DOCUMENT["contact"], "contact"),
        "gallery": _normalize_gallery(doc.get("gallery")),
        "footer": _normalize_footer(doc.get("footer")),
        "settings": _text_fields(_as_dict(doc.get("settings"), "settings"), DEFAULT_DOCUMENT["settings"], "settings"),
        "categories": [normalize_category(c, i) for i, c in enumerate(_as_list(doc.get("categories"), "categories"))],
        "products": [normalize_product(p, i) for i, p in enumerate(_as_list(doc.get("products"), "products"))],
    }
    _check_unique(out["categories"], "categories")
    _check_unique(out["products"], "products")

    dropped = sorted(set(doc) - set(SECTIONS))
    if dropped:
        logger.debug("Dropping unknown content sections: %s", ", ".join(dropped))
    return out


def merge(base, updates):
    """
    Deep merge ``updates`` into a copy of ``base``. Objects merge key by key;
    lists and scalars replace.
    """
    result = copy.deepcopy(base) if isinstance(base, dict) else {}
    for key, value in (updates or {}).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


# --------------------------
# Read helpers for the public site
# --------------------------

def _to_decimal(price):
    try:
        return Decimal(str(price).strip().lstrip("$"))
    except (InvalidOperation, ValueError):
        return None


def display_price(product):
    """
    Price label for the menu: "From <cheapest size>" when sizes exist,
    otherwise the flat price.
    """
    priced = []
    for size in product.get("sizes") or []:
        value = _to_decimal(size.get("price"))
        if value is not None:
            priced.append((value, str(size.get("price")).strip()))
    if priced:
        cheapest = min(priced, key=lambda p: p[0])
        return f"From {cheapest[1]}"
    return (product.get("price") or "").strip()


def category_name(doc, category_id):
    if not category_id:
        return None
    for category in doc.get("categories") or []:
        if category.get("id") == category_id:
            return category.get("name")
    return None
