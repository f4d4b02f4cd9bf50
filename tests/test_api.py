import json

import pytest

from site_content.adapters import LocalCacheAdapter
from site_content.errors import AdapterUnavailable
from site_content.schema import synthesize_default


def _seed(editor_client, document):
    res = editor_client.post("/api/content/", document, format="json")
    assert res.status_code == 200, res.data
    return res


# --------------------------
# Whole document
# --------------------------

def test_empty_store_serves_default_document(api_client):
    res = api_client.get("/api/content/")
    body = res.json()

    assert res.status_code == 200
    assert body["success"] is True
    assert body["data"] == synthesize_default()
    assert body["metadata"]["loadedFrom"] == "default"
    assert body["metadata"]["initialized"] is False
    assert body["metadata"]["version"] == "2.0"
    assert "timestamp" in body


def test_writes_require_the_passcode(api_client):
    assert api_client.post("/api/content/", {"hero": {"title": "X"}}, format="json").status_code == 403
    assert api_client.post("/api/content/bulk/", {"hero": {"title": "X"}}, format="json").status_code == 403
    assert api_client.delete("/api/content/categories/hot/").status_code == 403


def test_wrong_passcode_is_rejected(api_client):
    api_client.credentials(HTTP_X_ADMIN_PASSCODE="guess")
    assert api_client.post("/api/content/", {}, format="json").status_code == 403


def test_empty_passcode_locks_writes(editor_client, settings):
    settings.ADMIN_PASSCODE = ""
    assert editor_client.post("/api/content/", {}, format="json").status_code == 403


def test_replace_document_and_read_it_back(editor_client, api_client, content_file):
    res = _seed(editor_client, {"hero": {"title": "Hello"}})
    assert res.json()["storage"]["storedIn"] == "file"
    assert res.json()["degraded"] is False

    body = api_client.get("/api/content/").json()
    assert body["metadata"]["loadedFrom"] == "file"
    assert body["data"]["hero"]["title"] == "Hello"
    assert json.loads(content_file.read_text(encoding="utf-8"))["hero"]["title"] == "Hello"


def test_replace_rejects_non_object(editor_client):
    res = editor_client.post("/api/content/", ["not", "a", "document"], format="json")
    assert res.status_code == 400


def test_invalid_document_is_rejected_with_field(editor_client):
    res = editor_client.post(
        "/api/content/", {"products": [{"id": "a", "name": "A"}, {"id": "a", "name": "B"}]}, format="json"
    )
    body = res.json()
    assert res.status_code == 400
    assert body["success"] is False
    assert body["field"] == "products"


# --------------------------
# Bulk & sections
# --------------------------

def test_bulk_update_merges_field_by_field(editor_client, api_client):
    _seed(editor_client, {"hero": {"title": "Old", "subtitle": "Stays"}})

    res = editor_client.post("/api/content/bulk/", {"hero": {"title": "New Title"}}, format="json")
    body = res.json()
    assert res.status_code == 200
    assert body["message"].startswith("Bulk update completed: 1/1 sections updated")

    hero = api_client.get("/api/content/hero/").json()["data"]
    assert hero["title"] == "New Title"
    assert hero["subtitle"] == "Stays"


def test_bulk_reports_unknown_sections(editor_client):
    res = editor_client.post(
        "/api/content/bulk/", {"about": {"title": "Story"}, "weather": {"sunny": True}}, format="json"
    )
    body = res.json()
    assert res.status_code == 200
    assert "1/2" in body["message"]
    assert {r["contentType"]: r["success"] for r in body["results"]} == {"about": True, "weather": False}


def test_bulk_with_only_unknown_sections_is_rejected(editor_client):
    res = editor_client.post("/api/content/bulk/", {"weather": {}}, format="json")
    assert res.status_code == 400
    assert res.json()["results"][0]["success"] is False


def test_section_is_404_before_anything_is_stored(api_client):
    assert api_client.get("/api/content/hero/").status_code == 404
    assert api_client.get("/api/content/not-a-section/").status_code == 404


def test_section_post_and_put_alias(editor_client, api_client):
    res = editor_client.post("/api/content/contact/", {"phone": "555-0100"}, format="json")
    assert res.status_code == 200
    assert res.json()["data"]["phone"] == "555-0100"

    editor_client.put("/api/content/contact/", {"email": "hi@aulait.coffee"}, format="json")
    contact = api_client.get("/api/content/contact/").json()["data"]
    assert contact["phone"] == "555-0100"
    assert contact["email"] == "hi@aulait.coffee"


def test_unknown_section_write_is_404(editor_client):
    assert editor_client.post("/api/content/weather/", {"a": 1}, format="json").status_code == 404


# --------------------------
# Degraded writes
# --------------------------

def test_unavailable_primary_saves_to_local_cache(editor_client, api_client, broken_content_file):
    res = editor_client.post("/api/content/bulk/", {"hero": {"title": "Offline edit"}}, format="json")
    body = res.json()

    assert res.status_code == 200
    assert body["degraded"] is True
    assert body["message"] == "Content saved to local cache only (primary storage unavailable)"
    assert body["storage"]["primaryTier"] == "file"
    assert body["storage"]["primaryHealthy"] is False

    read = api_client.get("/api/content/").json()
    assert read["metadata"]["loadedFrom"] == "local"
    assert read["data"]["hero"]["title"] == "Offline edit"


def test_all_tiers_down_is_503(editor_client, broken_content_file, monkeypatch):
    def refuse(self, doc):
        raise AdapterUnavailable("local cache full", tier=self.tier)

    monkeypatch.setattr(LocalCacheAdapter, "set", refuse)
    res = editor_client.post("/api/content/", {"hero": {"title": "Lost"}}, format="json")
    body = res.json()

    assert res.status_code == 503
    assert body["success"] is False
    assert body["tiersAttempted"] == ["file", "local"]


def test_health_route(api_client, content_file):
    body = api_client.get("/api/content/health/").json()
    assert body["data"]["primaryTier"] == "file"
    assert body["data"]["primaryHealthy"] is True
    assert {t["tier"] for t in body["data"]["tiers"]} == {"file", "rows", "kv", "local"}


def test_health_route_flags_unwritable_primary(api_client, broken_content_file):
    body = api_client.get("/api/content/health/").json()
    assert body["data"]["primaryHealthy"] is False
    assert body["message"] == "Primary storage is unavailable"


# --------------------------
# Categories
# --------------------------

def test_category_crud(editor_client, api_client):
    res = editor_client.post("/api/content/categories/", {"name": "Hot Drinks"}, format="json")
    assert res.status_code == 201
    assert res.json()["item"]["id"] == "hot-drinks"

    res = editor_client.post("/api/content/categories/", {"name": "Hot Drinks"}, format="json")
    assert res.json()["item"]["id"] == "hot-drinks-2"

    res = editor_client.put(
        "/api/content/categories/hot-drinks/", {"name": "Espresso Bar", "description": "Shots"}, format="json"
    )
    assert res.status_code == 200
    assert res.json()["item"] == {"id": "hot-drinks", "name": "Espresso Bar", "description": "Shots"}

    listed = api_client.get("/api/content/categories/all/").json()["data"]
    assert [c["id"] for c in listed] == ["hot-drinks", "hot-drinks-2"]

    assert editor_client.delete("/api/content/categories/hot-drinks-2/").status_code == 200
    assert [c["id"] for c in api_client.get("/api/content/categories/").json()["data"]] == ["hot-drinks"]


def test_category_errors(editor_client):
    editor_client.post("/api/content/categories/", {"id": "hot", "name": "Hot"}, format="json")
    assert editor_client.post("/api/content/categories/", {"id": "hot", "name": "Again"}, format="json").status_code == 400
    assert editor_client.post("/api/content/categories/", {}, format="json").status_code == 400
    assert editor_client.delete("/api/content/categories/missing/").status_code == 404
    assert editor_client.put("/api/content/categories/missing/", {"name": "X"}, format="json").status_code == 404


def test_category_list_replaces_section(editor_client, api_client):
    payload = [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}]
    assert editor_client.post("/api/content/categories/", payload, format="json").status_code == 200
    assert [c["id"] for c in api_client.get("/api/content/categories/all/").json()["data"]] == ["a", "b"]


# --------------------------
# Products & menu
# --------------------------

@pytest.fixture
def menu(editor_client):
    _seed(editor_client, {
        "categories": [{"id": "hot", "name": "Hot Drinks"}, {"id": "cold", "name": "Cold Drinks"}],
        "products": [
            {"id": "latte", "name": "Latte", "category": "hot",
             "sizes": [{"size": "12oz", "price": "4.50"}, {"size": "16oz", "price": "5.25"}]},
            {"id": "espresso", "name": "Espresso", "category": "hot", "price": "3.00"},
            {"id": "cold-brew", "name": "Cold Brew", "category": "cold", "price": "5.00"},
        ],
    })


def test_products_carry_display_price(api_client, menu):
    products = {p["id"]: p for p in api_client.get("/api/content/products/all/").json()["data"]}
    assert products["latte"]["displayPrice"] == "From 4.50"
    assert products["espresso"]["displayPrice"] == "3.00"
    assert products["latte"]["categoryName"] == "Hot Drinks"


def test_products_filter_by_category(api_client, menu):
    products = api_client.get("/api/content/products/all/?category=cold").json()["data"]
    assert [p["id"] for p in products] == ["cold-brew"]


def test_product_crud(editor_client, api_client, menu):
    res = editor_client.post(
        "/api/content/products/",
        {"name": "Mocha", "category": "hot", "sizes": [{"size": "12oz", "price": "5.00"}]},
        format="json",
    )
    assert res.status_code == 201
    assert res.json()["item"]["id"] == "mocha"

    res = editor_client.put(
        "/api/content/products/mocha/", {"name": "Mocha", "category": "hot", "price": "4.00"}, format="json"
    )
    assert res.status_code == 200
    assert res.json()["item"]["price"] == "4.00"
    assert "sizes" not in res.json()["item"]

    assert editor_client.delete("/api/content/products/mocha/").status_code == 200
    assert editor_client.delete("/api/content/products/mocha/").status_code == 404
    ids = [p["id"] for p in api_client.get("/api/content/products/all/").json()["data"]]
    assert ids == ["latte", "espresso", "cold-brew"]


def test_product_needs_a_price(editor_client):
    res = editor_client.post("/api/content/products/", {"name": "Free Water"}, format="json")
    assert res.status_code == 400


def test_deleting_category_leaves_products_uncategorized(editor_client, api_client, menu):
    assert editor_client.delete("/api/content/categories/cold/").status_code == 200

    products = {p["id"]: p for p in api_client.get("/api/content/products/all/").json()["data"]}
    assert products["cold-brew"]["category"] == "cold"
    assert products["cold-brew"]["categoryName"] is None

    groups = {g["id"]: g for g in api_client.get("/api/content/menu/").json()["data"]}
    assert list(groups) == ["hot", "uncategorized"]
    assert [p["id"] for p in groups["uncategorized"]["products"]] == ["cold-brew"]
    assert [p["id"] for p in groups["hot"]["products"]] == ["latte", "espresso"]


# --------------------------
# Gallery, settings, footer
# --------------------------

def test_gallery_add_and_delete(editor_client, api_client):
    url = "https://cdn.example.com/latte-art.jpg"
    res = editor_client.post("/api/content/gallery/", {"url": url}, format="json")
    assert res.status_code == 201
    assert res.json()["data"]["images"] == [url]

    assert api_client.get("/api/content/gallery/all/").json()["data"]["images"] == [url]

    assert editor_client.delete(f"/api/content/gallery/?url={url}").status_code == 200
    assert editor_client.delete(f"/api/content/gallery/?url={url}").status_code == 404
    assert editor_client.delete("/api/content/gallery/").status_code == 400


def test_gallery_section_merge(editor_client):
    res = editor_client.post("/api/content/gallery/", {"title": "Inside the shop"}, format="json")
    assert res.status_code == 200
    assert res.json()["data"] == {"title": "Inside the shop", "images": []}


def test_site_setting_key_value(editor_client, api_client):
    res = editor_client.post("/api/content/settings/", {"key": "siteTitle", "value": " Au Lait Cafe "}, format="json")
    assert res.status_code == 200
    settings_section = api_client.get("/api/content/settings/all/").json()["data"]
    assert settings_section["siteTitle"] == "Au Lait Cafe"

    bad = editor_client.post("/api/content/settings/", {"key": "theme", "value": "dark"}, format="json")
    assert bad.status_code == 400


def test_social_links(editor_client, api_client):
    res = editor_client.post(
        "/api/content/footer/social-links/", {"platform": "Instagram", "url": "https://instagram.com/aulait"},
        format="json",
    )
    assert res.status_code == 201
    link = res.json()["item"]
    assert link == {"id": "instagram", "platform": "Instagram", "url": "https://instagram.com/aulait",
                    "icon": "instagram"}

    res = editor_client.put(
        "/api/content/footer/social-links/instagram/", {"platform": "Instagram", "url": "https://ig.me/aulait"},
        format="json",
    )
    assert res.json()["item"]["url"] == "https://ig.me/aulait"

    assert editor_client.delete("/api/content/footer/social-links/instagram/").status_code == 200
    assert api_client.get("/api/content/footer/social-links/").json()["data"] == []
    assert editor_client.delete("/api/content/footer/social-links/instagram/").status_code == 404


def test_added_product_matches_what_was_stored(editor_client, api_client):
    res = editor_client.post(
        "/api/content/products/",
        {"name": "Flat White", "sizes": [{"size": "8oz", "price": "4.00"}, {"size": "12oz", "price": ""}]},
        format="json",
    )
    item = res.json()["item"]
    assert item["sizes"] == [{"size": "8oz", "price": "4.00"}]

    stored = api_client.get("/api/content/products/").json()["data"]
    assert stored == [item]

    res = editor_client.put(
        "/api/content/products/flat-white/",
        {"name": "Flat White", "sizes": [{"size": "8oz", "price": "4.25"}, {"size": "16oz", "price": " "}]},
        format="json",
    )
    assert res.json()["item"]["sizes"] == [{"size": "8oz", "price": "4.25"}]


# --------------------------
# Framework errors keep the envelope
# --------------------------

def test_permission_denied_uses_envelope(api_client):
    res = api_client.post("/api/content/", {"hero": {"title": "X"}}, format="json")
    body = res.json()
    assert res.status_code == 403
    assert body["success"] is False
    assert body["message"] == "Admin passcode required"
    assert body["error"]
    assert "timestamp" in body


def test_malformed_json_uses_envelope(editor_client):
    res = editor_client.post("/api/content/bulk/", data="{not json", content_type="application/json")
    body = res.json()
    assert res.status_code == 400
    assert body["success"] is False
    assert "JSON parse error" in body["message"]
    assert "timestamp" in body


def test_unsupported_method_uses_envelope(editor_client):
    res = editor_client.delete("/api/content/")
    body = res.json()
    assert res.status_code == 405
    assert body["success"] is False
    assert "timestamp" in body


def test_bulk_message_when_only_local_cache_is_configured(editor_client):
    res = editor_client.post("/api/content/bulk/", {"hero": {"title": "X"}}, format="json")
    body = res.json()
    assert body["degraded"] is False
    assert body["storage"]["primaryTier"] == "local"
    assert body["message"] == "Bulk update completed: 1/1 sections updated (local)"
