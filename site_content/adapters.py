# ---- STORAGE ADAPTERS ----
"""
Backend adapters for the content document.

Every adapter exposes the same small surface: ``is_configured()``,
``get()`` returning the stored document or ``None``, ``set(doc)`` and
``probe()``. Failures are reported as ``AdapterUnavailable`` or
``WriteFailed``; nothing else escapes an adapter.
"""
import json
import logging
import os
import tempfile
import threading

from django.core.cache import InvalidCacheBackendError, caches
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError, InterfaceError, OperationalError, connections, transaction
from django.db.utils import ConnectionDoesNotExist
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from .errors import AdapterUnavailable, WriteFailed
from .models import ContentSection

logger = logging.getLogger(__name__)

# Single critical section for the in-process cache.
_LOCAL_LOCK = threading.Lock()


def dumps(doc):
    return json.dumps(doc, ensure_ascii=False, indent=2)


class BaseAdapter:
    tier = "base"

    def is_configured(self) -> bool:
        return True

    def get(self):
        raise NotImplementedError

    def set(self, doc):
        raise NotImplementedError

    def probe(self):
        """Health check: configured flag plus whether a read round-trips."""
        if not self.is_configured():
            return {"tier": self.tier, "configured": False, "available": False}
        try:
            self.get()
        except AdapterUnavailable as e:
            return {"tier": self.tier, "configured": True, "available": False, "error": e.message}
        return {"tier": self.tier, "configured": True, "available": True}

    def _unconfigured(self):
        return AdapterUnavailable(f"{self.tier} adapter is not configured", tier=self.tier)

    def __repr__(self):
        return f"<{self.__class__.__name__} tier={self.tier}>"


class FileAdapter(BaseAdapter):
    """Whole document as one pretty-printed UTF-8 JSON file."""
    tier = "file"

    def __init__(self, path):
        self.path = os.fspath(path) if path else ""

    def is_configured(self):
        return bool(self.path)

    def get(self):
        if not self.is_configured():
            raise self._unconfigured()
        if not os.path.isfile(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except OSError as e:
            raise AdapterUnavailable(f"Cannot read {self.path}: {e}", tier=self.tier)
        except json.JSONDecodeError as e:
            raise AdapterUnavailable(f"Corrupt content file {self.path}: {e}", tier=self.tier)
        if not isinstance(data, dict):
            raise AdapterUnavailable(f"Content file {self.path} does not hold an object", tier=self.tier)
        return data

    def probe(self):
        status = super().probe()
        if not status["available"]:
            return status
        # nearest existing ancestor must be a writable directory
        directory = os.path.dirname(os.path.abspath(self.path))
        while not os.path.exists(directory):
            directory = os.path.dirname(directory)
        if not os.path.isdir(directory) or not os.access(directory, os.W_OK):
            return {**status, "available": False, "error": f"{directory} is not a writable directory"}
        return status

    def set(self, doc):
        if not self.is_configured():
            raise self._unconfigured()
        try:
            payload = dumps(doc)
        except (TypeError, ValueError) as e:
            raise WriteFailed(f"Document is not serializable: {e}", tier=self.tier)

        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            # write next to the target and swap, so readers never see half a file
            fd, tmp_path = tempfile.mkstemp(prefix=".content-", suffix=".json", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.write("\n")
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise AdapterUnavailable(f"Cannot write {self.path}: {e}", tier=self.tier)
        finally:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.warning("Could not remove temp file %s", tmp_path)


class RowStoreAdapter(BaseAdapter):
    """
    One ContentSection row per section plus the "document" row. The document
    row is written first inside the same transaction and is the only row read.
    """
    tier = "rows"

    def __init__(self, alias=None):
        self.alias = alias

    def is_configured(self):
        if not self.alias:
            return False
        try:
            engine = connections[self.alias].settings_dict.get("ENGINE", "")
        except ConnectionDoesNotExist:
            return False
        return bool(engine) and not engine.endswith("dummy")

    def get(self):
        if not self.is_configured():
            raise self._unconfigured()
        try:
            row = (
                ContentSection.objects.using(self.alias)
                .filter(content_type=ContentSection.DOCUMENT)
                .only("content_data")
                .first()
            )
        except (OperationalError, InterfaceError, ImproperlyConfigured) as e:
            raise AdapterUnavailable(f"Row store unreachable: {e}", tier=self.tier)
        except DatabaseError as e:
            raise AdapterUnavailable(f"Row store read failed: {e}", tier=self.tier)
        if row is None:
            return None
        data = row.content_data
        if isinstance(data, str):
            # rows written by the old server held JSON text
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                raise AdapterUnavailable(f"Corrupt document row: {e}", tier=self.tier)
        return data if isinstance(data, dict) else None

    def set(self, doc):
        if not self.is_configured():
            raise self._unconfigured()
        rows = [(ContentSection.DOCUMENT, doc)] + list(doc.items())
        try:
            with transaction.atomic(using=self.alias):
                qs = ContentSection.objects.using(self.alias)
                stored = dict(
                    qs.filter(content_type__in=[name for name, _ in rows])
                    .values_list("content_type", "content_data")
                )
                for content_type, data in rows:
                    # unchanged rows keep their updated_at
                    if content_type in stored and stored[content_type] == data:
                        continue
                    qs.update_or_create(content_type=content_type, defaults={"content_data": data})
        except (OperationalError, InterfaceError, ImproperlyConfigured) as e:
            raise AdapterUnavailable(f"Row store unreachable: {e}", tier=self.tier)
        except (DatabaseError, TypeError, ValueError) as e:
            raise WriteFailed(f"Row store rejected the document: {e}", tier=self.tier)

    def get_section(self, name):
        if not self.is_configured():
            raise self._unconfigured()
        try:
            row = ContentSection.objects.using(self.alias).filter(content_type=name).first()
        except DatabaseError as e:
            raise AdapterUnavailable(f"Row store unreachable: {e}", tier=self.tier)
        return row.content_data if row else None


class KeyValueAdapter(BaseAdapter):
    """
    Redis-backed Django cache. The whole document lives under one key; each
    section is replicated under its own key after the document key succeeds.
    Missing configuration is a degraded mode, not an error worth logging.
    """
    tier = "kv"

    def __init__(self, cache_alias=None, prefix="aulait"):
        self.cache_alias = cache_alias
        self.prefix = prefix

    @property
    def document_key(self):
        return f"{self.prefix}:content:document"

    def section_key(self, name):
        return f"{self.prefix}:content:section:{name}"

    def is_configured(self):
        if not self.cache_alias:
            return False
        try:
            caches[self.cache_alias]
        except InvalidCacheBackendError:
            return False
        return True

    def _cache(self):
        if not self.is_configured():
            raise self._unconfigured()
        return caches[self.cache_alias]

    def get(self):
        cache = self._cache()
        try:
            raw = cache.get(self.document_key)
        except (RedisConnectionError, RedisTimeoutError, OSError) as e:
            raise AdapterUnavailable(f"Key-value store unreachable: {e}", tier=self.tier)
        except RedisError as e:
            raise AdapterUnavailable(f"Key-value read failed: {e}", tier=self.tier)
        if raw is None:
            return None
        try:
            data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        except json.JSONDecodeError as e:
            raise AdapterUnavailable(f"Corrupt document key: {e}", tier=self.tier)
        return data if isinstance(data, dict) else None

    def get_section(self, name):
        cache = self._cache()
        try:
            raw = cache.get(self.section_key(name))
        except (RedisError, OSError) as e:
            raise AdapterUnavailable(f"Key-value store unreachable: {e}", tier=self.tier)
        try:
            return json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        except json.JSONDecodeError as e:
            raise AdapterUnavailable(f"Corrupt section key {name}: {e}", tier=self.tier)

    def set(self, doc):
        cache = self._cache()
        try:
            payload = json.dumps(doc, ensure_ascii=False)
            sections = {self.section_key(k): json.dumps(v, ensure_ascii=False) for k, v in doc.items()}
        except (TypeError, ValueError) as e:
            raise WriteFailed(f"Document is not serializable: {e}", tier=self.tier)
        try:
            cache.set(self.document_key, payload, timeout=None)
        except (RedisConnectionError, RedisTimeoutError, OSError) as e:
            raise AdapterUnavailable(f"Key-value store unreachable: {e}", tier=self.tier)
        except RedisError as e:
            raise WriteFailed(f"Key-value store rejected the document: {e}", tier=self.tier)
        try:
            failed = cache.set_many(sections, timeout=None)
        except (RedisError, OSError) as e:
            # the document key is authoritative; section keys are replicas
            logger.warning("Section replication to key-value store failed: %s", e)
            return
        if failed:
            logger.warning("Section keys not replicated: %s", ", ".join(failed))


class LocalCacheAdapter(BaseAdapter):
    """
    In-process last-resort tier. Never the system of record; every write is
    mirrored here so an edit survives a failing primary.
    """
    tier = "local"

    def __init__(self, cache_alias="content_local", prefix="aulait"):
        self.cache_alias = cache_alias
        self.prefix = prefix

    @property
    def key(self):
        return f"{self.prefix}:content:backup"

    def is_configured(self):
        return bool(self.cache_alias)

    def _cache(self):
        try:
            return caches[self.cache_alias]
        except InvalidCacheBackendError as e:
            raise AdapterUnavailable(f"Local cache '{self.cache_alias}' missing: {e}", tier=self.tier)

    def get(self):
        cache = self._cache()
        with _LOCAL_LOCK:
            raw = cache.get(self.key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            raise AdapterUnavailable(f"Corrupt local backup: {e}", tier=self.tier)
        return data if isinstance(data, dict) else None

    def set(self, doc):
        cache = self._cache()
        try:
            payload = json.dumps(doc, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise WriteFailed(f"Document is not serializable: {e}", tier=self.tier)
        with _LOCAL_LOCK:
            cache.set(self.key, payload, timeout=None)

    @property
    def pending_key(self):
        return f"{self.prefix}:content:pending"

    def is_pending(self):
        """True while the local copy holds an edit the primary tier never accepted."""
        cache = self._cache()
        with _LOCAL_LOCK:
            return bool(cache.get(self.pending_key))

    def set_pending(self, pending):
        cache = self._cache()
        with _LOCAL_LOCK:
            if pending:
                cache.set(self.pending_key, True, timeout=None)
            else:
                cache.delete(self.pending_key)

    def clear(self):
        cache = self._cache()
        with _LOCAL_LOCK:
            cache.delete_many([self.key, self.pending_key])
