import json

import pytest

from site_content.adapters import FileAdapter, KeyValueAdapter, LocalCacheAdapter, RowStoreAdapter
from site_content.errors import AdapterUnavailable
from site_content.models import ContentSection
from site_content.schema import normalize


@pytest.fixture
def document():
    return normalize({
        "hero": {"title": "Café du Matin"},
        "categories": [{"id": "hot-drinks", "name": "Hot Drinks"}],
        "products": [{"id": "latte", "name": "Latte", "category": "hot-drinks", "price": "4.75"}],
    })


# --------------------------
# Durable file
# --------------------------

def test_file_adapter_creates_parent_and_pretty_prints(tmp_path, document):
    path = tmp_path / "nested" / "data" / "content.json"
    adapter = FileAdapter(path)

    assert adapter.get() is None
    adapter.set(document)

    text = path.read_text(encoding="utf-8")
    assert "Café du Matin" in text
    assert '\n  "hero": {' in text
    assert json.loads(text) == document
    assert adapter.get() == document


def test_file_adapter_rewrite_is_byte_identical(tmp_path, document):
    path = tmp_path / "content.json"
    adapter = FileAdapter(path)
    adapter.set(document)
    first = path.read_bytes()
    adapter.set(document)
    assert path.read_bytes() == first
    assert [p.name for p in tmp_path.iterdir()] == ["content.json"]


def test_file_adapter_reports_unavailable(tmp_path, document):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    adapter = FileAdapter(blocker / "content.json")
    with pytest.raises(AdapterUnavailable):
        adapter.set(document)


def test_corrupt_file_is_unavailable_not_missing(tmp_path):
    path = tmp_path / "content.json"
    path.write_text("{not json")
    with pytest.raises(AdapterUnavailable):
        FileAdapter(path).get()


def test_unconfigured_file_adapter():
    adapter = FileAdapter("")
    assert not adapter.is_configured()
    with pytest.raises(AdapterUnavailable):
        adapter.get()
    assert adapter.probe() == {"tier": "file", "configured": False, "available": False}


# --------------------------
# Row store
# --------------------------

@pytest.mark.django_db
def test_row_store_upserts_document_and_sections(document):
    adapter = RowStoreAdapter("default")
    assert adapter.is_configured()
    assert adapter.get() is None

    adapter.set(document)
    adapter.set(document)

    assert ContentSection.objects.filter(content_type=ContentSection.DOCUMENT).count() == 1
    assert ContentSection.objects.count() == len(document) + 1
    assert adapter.get() == document
    assert adapter.get_section("products") == document["products"]


@pytest.mark.django_db
def test_row_store_reads_legacy_json_text_rows(document):
    ContentSection.objects.create(content_type=ContentSection.DOCUMENT, content_data=json.dumps(document))
    assert RowStoreAdapter("default").get() == document


def test_row_store_without_alias_is_not_configured():
    adapter = RowStoreAdapter(None)
    assert not adapter.is_configured()
    with pytest.raises(AdapterUnavailable):
        adapter.set({})
    assert not RowStoreAdapter("missing-alias").is_configured()


# --------------------------
# Key-value
# --------------------------

def test_kv_adapter_writes_document_then_sections(kv_cache, document):
    adapter = KeyValueAdapter("content_kv", prefix="test")
    adapter.set(document)

    assert json.loads(kv_cache.get("test:content:document")) == document
    assert adapter.get() == document
    assert adapter.get_section("hero") == document["hero"]
    assert adapter.get_section("categories") == document["categories"]


def test_kv_adapter_without_connection_is_degraded_mode():
    adapter = KeyValueAdapter(None)
    assert not adapter.is_configured()
    with pytest.raises(AdapterUnavailable):
        adapter.get()
    assert not KeyValueAdapter("not-a-cache").is_configured()


# --------------------------
# Local cache
# --------------------------

def test_local_cache_round_trip_and_clear(document):
    adapter = LocalCacheAdapter("content_local", prefix="test")
    assert adapter.get() is None
    adapter.set(document)
    assert adapter.get() == document
    adapter.clear()
    assert adapter.get() is None


def test_local_cache_stores_a_copy(document):
    adapter = LocalCacheAdapter("content_local", prefix="test")
    adapter.set(document)
    document["hero"]["title"] = "mutated after write"
    assert adapter.get()["hero"]["title"] == "Café du Matin"


def test_local_cache_pending_flag(document):
    adapter = LocalCacheAdapter("content_local", prefix="test")
    assert not adapter.is_pending()
    adapter.set(document)
    adapter.set_pending(True)
    assert adapter.is_pending()
    adapter.set_pending(False)
    assert not adapter.is_pending()

    adapter.set_pending(True)
    adapter.clear()
    assert not adapter.is_pending()
    assert adapter.get() is None
