"""
Resolution Cache - Locator records keyed by CacheKey.

Two partitions:
- static: human-authored records, looked up under the unprefixed key,
  always win and are never overwritten by generation
- generated: records written by the resolver at runtime, consulted only
  when no static record exists, never regenerated once present

There is no eviction. Generated records can be persisted to a JSON file
and loaded again on the next run.
"""

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from locator_iq.core.keys import CacheKey, KeyNamespace, normalize_key_path
from locator_iq.exceptions import InvalidCachedRecordError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocatorRecord:
    """
    Ordered candidate selectors for one cache key.

    Attributes:
        candidates: Selectors, most specific first
        description: Human-readable description of the field
    """
    candidates: Tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        # Accept any sequence but store an immutable tuple
        object.__setattr__(self, "candidates", tuple(self.candidates))

    @property
    def is_degenerate(self) -> bool:
        """True when there is no usable selector at all."""
        return not any(c.strip() for c in self.candidates)

    def to_dict(self) -> Dict[str, Any]:
        return {"candidates": list(self.candidates), "description": self.description}

    @classmethod
    def from_value(cls, value: Any, key: Optional[str] = None) -> "LocatorRecord":
        """
        Build a record from stored data.

        Accepts a dict with "candidates" (and optional "description"),
        a list of selectors, or a single selector string.

        Raises:
            InvalidCachedRecordError: If the value cannot be interpreted
        """
        description = key or ""
        if isinstance(value, str):
            candidates: Any = [value]
        elif isinstance(value, list):
            candidates = value
        elif isinstance(value, dict):
            candidates = value.get("candidates")
            description = value.get("description", description)
            if not isinstance(description, str):
                raise InvalidCachedRecordError("Record description must be a string", key)
        else:
            raise InvalidCachedRecordError(
                f"Unsupported record type: {type(value).__name__}", key
            )

        if not isinstance(candidates, list) or not all(isinstance(c, str) for c in candidates):
            raise InvalidCachedRecordError("Record candidates must be a list of strings", key)
        return cls(candidates=tuple(candidates), description=description)


@dataclass
class CacheStats:
    """Lookup and write counters."""
    static_hits: int = 0
    generated_hits: int = 0
    misses: int = 0
    writes: int = 0
    invalid_records: int = 0


class ResolutionCache:
    """
    Process-wide store of locator records.

    Every read and write takes one lock, so independent test contexts can
    share a cache. Nothing here calls into the browser, so the lock is
    never held across a driver call.

    Example:
        >>> cache = ResolutionCache()
        >>> cache.seed_static({"loc.search.searchPage.button.go": ["#go"]})
        >>> cache.lookup(CacheKey("loc.search.searchPage.button.go"))
        LocatorRecord(candidates=('#go',), description='loc.search.searchPage.button.go')
    """

    def __init__(self, static: Optional[Mapping[str, Any]] = None):
        self._static: Dict[str, LocatorRecord] = {}
        self._generated: Dict[str, LocatorRecord] = {}
        self._lock = threading.Lock()
        self.stats = CacheStats()
        if static:
            self.seed_static(static)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _partition(self, namespace: KeyNamespace) -> Dict[str, LocatorRecord]:
        return self._generated if namespace is KeyNamespace.GENERATED else self._static

    def lookup(self, key: CacheKey) -> Optional[LocatorRecord]:
        """
        Return the record stored under key, or None if absent.

        A degenerate record (no usable candidate) counts as absent.
        """
        with self._lock:
            record = self._partition(key.namespace).get(key.path)
            if record is None or record.is_degenerate:
                self.stats.misses += 1
                return None
            if key.is_generated:
                self.stats.generated_hits += 1
            else:
                self.stats.static_hits += 1
            return record

    def contains(self, key: CacheKey) -> bool:
        with self._lock:
            record = self._partition(key.namespace).get(key.path)
        return record is not None and not record.is_degenerate

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def seed_static(self, entries: Mapping[str, Any]) -> int:
        """
        Add human-authored records.

        Key paths are normalized segment by segment, so
        "loc.search.SearchPage.button.PROCEED" is found by the resolver
        under "loc.search.searchPage.button.proceed". A path that is not a
        full key is logged and stored as written. Invalid records are
        logged and skipped.

        Returns:
            Number of entries added
        """
        added = 0
        with self._lock:
            for path, value in entries.items():
                try:
                    record = LocatorRecord.from_value(value, key=path)
                except InvalidCachedRecordError as e:
                    self.stats.invalid_records += 1
                    logger.warning(f"Skipping static locator {path}: {e.message}")
                    continue
                normalized = normalize_key_path(path)
                if normalized is None:
                    logger.warning(
                        f"Static locator {path!r} is not of the form "
                        "<prefix>.<code>.<page>.<type>.<name>; only an exact reference will find it"
                    )
                    normalized = path.strip()
                self._static[normalized] = record
                added += 1
        logger.debug(f"Seeded {added} static locator(s)")
        return added

    def store_generated(self, key: CacheKey, record: LocatorRecord) -> LocatorRecord:
        """
        Store a generated record, unless a usable one is already present.

        Concurrent writers for the same key are harmless: the first usable
        record wins and every caller gets that record back.

        Returns:
            The record now stored under key
        """
        with self._lock:
            existing = self._generated.get(key.path)
            if existing is not None and not existing.is_degenerate:
                return existing
            self._generated[key.path] = record
            self.stats.writes += 1
        logger.debug(f"Stored {len(record.candidates)} candidate(s) under {key}")
        return record

    def clear_generated(self) -> None:
        with self._lock:
            self._generated.clear()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def entries(self, namespace: KeyNamespace) -> Iterator[Tuple[CacheKey, LocatorRecord]]:
        """Snapshot of one partition, sorted by key path."""
        with self._lock:
            items = sorted(self._partition(namespace).items())
        for path, record in items:
            yield CacheKey(path, namespace), record

    def __len__(self) -> int:
        with self._lock:
            return len(self._static) + len(self._generated)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load_generated(self, path: Union[str, Path]) -> int:
        """
        Load generated records from a JSON file written by save_generated().

        A missing file is not an error. Records that fail to parse are
        skipped and will simply be regenerated.

        Returns:
            Number of records loaded
        """
        cache_path = Path(path).expanduser()
        if not cache_path.exists():
            return 0

        try:
            data = json.loads(cache_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable locator cache {cache_path}: {e}")
            return 0
        if not isinstance(data, dict):
            logger.warning(f"Ignoring locator cache {cache_path}: expected a JSON object")
            return 0

        loaded = 0
        with self._lock:
            for key_path, value in data.items():
                try:
                    record = LocatorRecord.from_value(value, key=key_path)
                except InvalidCachedRecordError as e:
                    self.stats.invalid_records += 1
                    logger.warning(f"Invalid cached record {key_path}: {e.message}")
                    continue
                if record.is_degenerate:
                    continue
                self._generated.setdefault(key_path, record)
                loaded += 1
        logger.debug(f"Loaded {loaded} generated locator(s) from {cache_path}")
        return loaded

    def save_generated(self, path: Union[str, Path]) -> int:
        """
        Persist usable generated records as JSON.

        Returns:
            Number of records written
        """
        cache_path = Path(path).expanduser()
        with self._lock:
            data = {
                key_path: record.to_dict()
                for key_path, record in sorted(self._generated.items())
                if not record.is_degenerate
            }
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.write_text(json.dumps(data, indent=2))
        logger.debug(f"Saved {len(data)} generated locator(s) to {cache_path}")
        return len(data)
