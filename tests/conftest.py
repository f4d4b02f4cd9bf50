import pytest
from django.core.cache import caches
from rest_framework.test import APIClient

from site_content.adapters import BaseAdapter
from site_content.errors import AdapterUnavailable

PASSCODE = "test-passcode"

LOCAL_CACHE = {
    "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    "LOCATION": "site-content-local-tests",
    "TIMEOUT": None,
}
KV_CACHE = {
    "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    "LOCATION": "site-content-kv-tests",
    "TIMEOUT": None,
}


@pytest.fixture(autouse=True)
def content_settings(settings):
    """No external tiers by default: only the in-process local cache."""
    settings.ADMIN_PASSCODE = PASSCODE
    settings.CACHES = {
        "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"},
        "content_local": LOCAL_CACHE,
    }
    settings.CONTENT_STORE = {
        "FILE_PATH": "",
        "ROW_STORE_ALIAS": None,
        "KV_CACHE_ALIAS": None,
        "LOCAL_CACHE_ALIAS": "content_local",
        "KEY_PREFIX": "test",
    }
    caches["content_local"].clear()
    yield settings
    caches["content_local"].clear()


@pytest.fixture
def content_file(settings, tmp_path):
    path = tmp_path / "data" / "content.json"
    settings.CONTENT_STORE = {**settings.CONTENT_STORE, "FILE_PATH": str(path)}
    return path


@pytest.fixture
def broken_content_file(settings, tmp_path):
    """A file path whose parent is a regular file, so every write fails."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    path = blocker / "content.json"
    settings.CONTENT_STORE = {**settings.CONTENT_STORE, "FILE_PATH": str(path)}
    return path


@pytest.fixture
def kv_cache(settings):
    settings.CACHES = {**settings.CACHES, "content_kv": KV_CACHE}
    settings.CONTENT_STORE = {**settings.CONTENT_STORE, "KV_CACHE_ALIAS": "content_kv"}
    cache = caches["content_kv"]
    cache.clear()
    yield cache
    cache.clear()


@pytest.fixture
def row_store(settings, db):
    settings.CONTENT_STORE = {**settings.CONTENT_STORE, "ROW_STORE_ALIAS": "default"}
    return "default"


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def editor_client():
    api = APIClient()
    api.credentials(HTTP_X_ADMIN_PASSCODE=PASSCODE)
    return api


class FakeAdapter(BaseAdapter):
    """In-memory adapter that records calls and can be told to fail."""

    def __init__(self, tier, doc=None, fail_with=None, reject_with=None, configured=True):
        self.tier = tier
        self.doc = doc
        self.fail_with = fail_with
        # writes only; reads still succeed
        self.reject_with = reject_with
        self.configured = configured
        self.pending = False
        self.get_calls = 0
        self.set_calls = 0

    def is_configured(self):
        return self.configured

    def get(self):
        self.get_calls += 1
        if self.fail_with:
            raise self.fail_with(f"{self.tier} down", tier=self.tier)
        return self.doc

    def set(self, doc):
        self.set_calls += 1
        error = self.fail_with or self.reject_with
        if error:
            raise error(f"{self.tier} down", tier=self.tier)
        self.doc = doc

    def is_pending(self):
        return self.pending

    def set_pending(self, pending):
        self.pending = pending


@pytest.fixture
def fake_adapter():
    return FakeAdapter


@pytest.fixture
def unavailable():
    return AdapterUnavailable
