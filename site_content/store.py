# ---- CONTENT STORE ----
"""
Fallback orchestration over the storage adapters.

Reads walk the tiers in priority order (file, rows, kv, local) and fall back
to the schema default. Writes go to every configured tier exactly once, in
the same order; the first configured tier is the primary, the rest are
write-through replicas, and the local cache always gets a copy. When the
primary misses a write the local copy is flagged pending and served first
until the primary accepts a later write.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from django.conf import settings

from .adapters import FileAdapter, KeyValueAdapter, LocalCacheAdapter, RowStoreAdapter
from .errors import AllTiersExhausted, StoreError, WriteFailed
from .schema import merge, normalize, synthesize_default

logger = logging.getLogger(__name__)

DEFAULT_TIER = "default"


@dataclass
class ReadResult:
    document: dict
    tier: str

    @property
    def initialized(self) -> bool:
        return self.tier != DEFAULT_TIER


@dataclass
class WriteReport:
    tiers_attempted: List[str] = field(default_factory=list)
    stored_in: List[str] = field(default_factory=list)
    failures: List[dict] = field(default_factory=list)
    primary_tier: Optional[str] = None
    primary_healthy: bool = False

    @property
    def degraded(self) -> bool:
        """The write landed somewhere, but not in the primary tier."""
        return bool(self.stored_in) and not self.primary_healthy

    @property
    def stored_tier(self) -> Optional[str]:
        return self.stored_in[0] if self.stored_in else None

    def as_dict(self):
        return {
            "storedIn": self.stored_tier,
            "tiers": list(self.stored_in),
            "tiersAttempted": list(self.tiers_attempted),
            "primaryTier": self.primary_tier,
            "primaryHealthy": self.primary_healthy,
            "degraded": self.degraded,
            "failures": list(self.failures),
        }


class ContentStore:
    def __init__(self, tiers, local):
        self.tiers = list(tiers)
        self.local = local

    @property
    def configured_tiers(self):
        return [t for t in self.tiers if t.is_configured()]

    @property
    def primary(self):
        configured = self.configured_tiers
        return configured[0] if configured else self.local

    # ---- reads ----
    def _local_pending(self):
        try:
            return self.local.is_pending()
        except StoreError as e:
            logger.warning("Could not check local cache for pending edits: %s", e.message)
            return False

    def _mark_pending(self, pending):
        try:
            self.local.set_pending(pending)
        except StoreError as e:
            logger.warning("Could not flag local cache copy: %s", e.message)

    def read(self) -> ReadResult:
        order = self.configured_tiers + [self.local]
        if len(order) > 1 and self._local_pending():
            # the primary missed the latest write; its copy is stale
            logger.warning("Primary tier has not accepted the latest edit; serving the local cache copy first")
            order = [self.local] + order[:-1]

        for adapter in order:
            try:
                data = adapter.get()
            except StoreError as e:
                logger.warning("Read from %s tier failed, falling back: %s", adapter.tier, e.message)
                continue
            if data is None:
                continue
            try:
                document = normalize(data)
            except ValueError as e:
                logger.warning("Stored document in %s tier is not valid, falling back: %s", adapter.tier, e)
                continue
            logger.info("Content served from %s tier", adapter.tier)
            return ReadResult(document=document, tier=adapter.tier)

        logger.info("No stored content found; serving default document")
        return ReadResult(document=synthesize_default(), tier=DEFAULT_TIER)

    def read_section(self, name):
        """Section of the stored document, or None when nothing was ever stored."""
        result = self.read()
        if not result.initialized:
            return None
        return result.document.get(name)

    # ---- writes ----
    def write(self, doc) -> WriteReport:
        """
        Persist a complete document. Validation errors are raised before any
        adapter is touched.
        """
        document = normalize(doc)
        configured = self.configured_tiers
        report = WriteReport(primary_tier=(configured[0].tier if configured else self.local.tier))

        for adapter in configured + [self.local]:
            report.tiers_attempted.append(adapter.tier)
            try:
                adapter.set(document)
            except StoreError as e:
                report.failures.append(e.as_dict())
                if isinstance(e, WriteFailed):
                    logger.error("%s tier rejected the write: %s", adapter.tier, e.message)
                else:
                    logger.warning("%s tier unavailable for write: %s", adapter.tier, e.message)
                continue
            report.stored_in.append(adapter.tier)

        report.primary_healthy = report.primary_tier in report.stored_in
        if not report.stored_in:
            logger.error("Content write lost: no tier accepted it (tried %s)", ", ".join(report.tiers_attempted))
            raise AllTiersExhausted(
                "No storage tier accepted the write",
                tiers_attempted=report.tiers_attempted,
                failures=report.failures,
            )
        self._mark_pending(report.degraded and self.local.tier in report.stored_in)
        if report.degraded:
            logger.warning(
                "Primary tier %s did not accept the write; content held in %s",
                report.primary_tier, ", ".join(report.stored_in),
            )
        else:
            logger.info("Content written to %s", ", ".join(report.stored_in))
        return report

    def update(self, updates):
        """Merge partial ``updates`` over the current document and write it."""
        current = self.read().document
        document = normalize(merge(current, updates))
        report = self.write(document)
        return document, report

    def health(self):
        return [adapter.probe() for adapter in self.tiers + [self.local]]


def build_content_store():
    """Store wired from ``settings.CONTENT_STORE``; cheap enough to build per request."""
    conf = getattr(settings, "CONTENT_STORE", {}) or {}
    prefix = conf.get("KEY_PREFIX") or "aulait"
    tiers = [
        FileAdapter(conf.get("FILE_PATH")),
        RowStoreAdapter(conf.get("ROW_STORE_ALIAS")),
        KeyValueAdapter(conf.get("KV_CACHE_ALIAS"), prefix=prefix),
    ]
    local = LocalCacheAdapter(conf.get("LOCAL_CACHE_ALIAS") or "content_local", prefix=prefix)
    return ContentStore(tiers, local)
