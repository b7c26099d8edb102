"""
polycache — Cache Facade

Composes validation, key salting, TTL policy, the Item envelope,
serialization and stampede protection over a StorageBackend.

Write path:
    set(key, value, ttl) -> validate -> salt -> clamp ttl -> Item -> bytes -> raw_set

Read path:
    get(key) -> validate -> salt -> raw_get -> Item -> effective now -> value | default

Backend failures are either swallowed (reads miss, writes return False,
deletes still report success) or raised, as chosen once per instance with
`swallow_backend_errors`. Swallowed failures are logged: warning for
transient errors, error when the store is unavailable.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import timedelta
from typing import Any

from ..clock import Clock, SystemClock
from ..config.schemas import ClearStrategy
from ..errors import BackendUnavailableError, CacheDecodeError, InvalidConfigurationError
from .generation import GenerationCounter
from .interface import TTL, CacheInterface
from .item import LATEST_EXPIRY, MISSING, Item
from .salting import DEFAULT_PREFIX, KeySalter
from .serialization import PickleSerializer, Serializer
from .stampede import StampedeProtection
from .storage import StorageBackend
from .ttl import TTLPolicy, normalize_ttl
from .validation import RESERVED_CHARACTERS, validate_key, validate_keys, validate_pairs

logger = logging.getLogger(__name__)

# Logical key of the generation counter; salted without a generation
GENERATION_KEY = "generation"


class Cache(CacheInterface):
    """
    Cache over a raw storage backend.

    Example:
        cache = Cache(MemoryStorage(), suffix="deploy-42")
        cache.enable_stampede_protection()
        cache.set("user.123", {"name": "Alice"}, ttl=300)
        cache.get("user.123")
    """

    def __init__(
        self,
        storage: StorageBackend,
        *,
        clock: Clock | None = None,
        suffix: str | None = None,
        prefix: str | None = DEFAULT_PREFIX,
        default_ttl: int | timedelta = 0,
        maximum_ttl: int | timedelta = 0,
        serializer: Serializer | None = None,
        stampede: StampedeProtection | None = None,
        clear_strategy: ClearStrategy | str = ClearStrategy.FLUSH,
        swallow_backend_errors: bool = True,
    ):
        """
        Args:
            storage: Backing store
            clock: Time source for expiry (system clock when omitted)
            suffix: Optional namespace appended to every key, e.g. to throw
                away cached data on deploy
            prefix: Key prefix carrying the cache format version
            default_ttl: TTL used when set() is called without one (0 = no expiry)
            maximum_ttl: Ceiling for every TTL (0 = unbounded)
            serializer: Item serializer (pickle when omitted)
            stampede: Stampede protection settings (disabled when omitted)
            clear_strategy: "flush" wipes the store, "generation" abandons old keys
            swallow_backend_errors: Degrade instead of raising when the store fails

        Raises:
            InvalidConfigurationError: If the storage's key delimiter is not a
                reserved key character, or the suffix contains one
        """
        # Salted keys only stay unambiguous if no key or suffix can contain the delimiter
        if len(storage.key_delimiter) != 1 or storage.key_delimiter not in RESERVED_CHARACTERS:
            raise InvalidConfigurationError(
                "key delimiter", storage.key_delimiter, f"One of `{RESERVED_CHARACTERS}`"
            )
        if suffix and any(char in RESERVED_CHARACTERS for char in suffix):
            raise InvalidConfigurationError(
                "suffix", suffix, f"A suffix without any of `{RESERVED_CHARACTERS}`"
            )

        self._storage = storage
        self.clock: Clock = clock or SystemClock()
        self.suffix = suffix or None
        self.salter = KeySalter(prefix, storage.key_delimiter)
        self.ttl_policy = TTLPolicy(normalize_ttl(maximum_ttl))
        self.default_ttl = normalize_ttl(default_ttl)
        self.serializer = serializer or PickleSerializer()
        self.stampede = stampede or StampedeProtection()
        self.clear_strategy = ClearStrategy(clear_strategy)
        self.swallow_backend_errors = swallow_backend_errors

        # Stats
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0
        self._early_expirations = 0
        self._backend_errors = 0

        self._generation: GenerationCounter | None = None
        if self.clear_strategy is ClearStrategy.GENERATION:
            self._generation = GenerationCounter(storage, self.salter.salt(GENERATION_KEY, self.suffix))
            try:
                self._generation.load()
            except BackendUnavailableError as e:
                self._backend_failure(e)

    # ------------ Configuration ------------

    @property
    def storage(self) -> StorageBackend:
        return self._storage

    @property
    def generation(self) -> int | None:
        """Current generation, or None when clear() flushes."""
        return self._generation.current if self._generation else None

    def set_maximum_ttl(self, seconds: int | timedelta) -> None:
        """Set the maximum TTL in seconds (0 = unbounded)."""
        self.ttl_policy.set_maximum_ttl(seconds)

    def enable_stampede_protection(self) -> None:
        self.stampede.enable()

    def set_stampede_beta(self, beta: int) -> None:
        """Set the early expiration scale, an integer from 1 to 10."""
        self.stampede.set_beta(beta)

    def set_stampede_delta(self, delta: int) -> None:
        """Set the percentage of TTL eligible for early expiration, an integer from 1 to 100."""
        self.stampede.set_delta(delta)

    # ------------ Helpers ------------

    def _physical_key(self, key: str) -> str:
        return self.salter.salt(key, self.suffix, self.generation)

    def _backend_failure(self, error: BackendUnavailableError, key: str | None = None) -> None:
        """Count and log a storage failure, or propagate it."""
        self._backend_errors += 1

        if not self.swallow_backend_errors:
            raise error

        level = logging.WARNING if error.transient else logging.ERROR
        logger.log(
            level,
            "Cache backend %s failed during %s, degrading: %s",
            error.backend,
            error.operation,
            error.details.get("error", ""),
            extra={
                "key": key,
                "backend": error.backend,
                "operation": error.operation,
                "transient": error.transient,
                "error_code": error.code.value,
            },
        )

    def _resolve_ttl(self, ttl: TTL) -> int:
        requested = self.default_ttl if ttl is None else normalize_ttl(ttl)
        if requested < 0:
            return requested
        return self.ttl_policy.determine_ttl(requested)

    def _wrap(self, value: Any, ttl: int) -> bytes:
        """Build and encode the envelope for a value."""
        expiry = None
        if ttl > 0:
            try:
                expiry = self.clock.now() + timedelta(seconds=ttl)
            except OverflowError:
                # past the last representable instant
                expiry = LATEST_EXPIRY
        item = Item(value, expiry, ttl if ttl > 0 else None)
        return self.serializer.dumps(item)

    def _decode(self, key: str, raw: bytes | None) -> Item | None:
        if raw is None:
            return None

        try:
            return self.serializer.loads(raw)
        except CacheDecodeError as e:
            logger.warning(
                "Discarding undecodable cache entry for key '%s': %s",
                key,
                e.message,
                extra={"key": key, "serializer": self.serializer.name},
            )
            return None

    def _unwrap(self, key: str, raw: bytes | None) -> Any:
        """Return the live value of a stored payload, or MISSING."""
        item = self._decode(key, raw)
        if item is None:
            return MISSING

        now = self.clock.now()
        value = item.data(self.stampede.effective_now(item, now))

        if value is MISSING and not item.is_expired(now):
            self._early_expirations += 1
            logger.debug("Early expiration of key '%s'", key, extra={"key": key, "original_ttl": item.ttl()})

        return value

    def _record_read(self, value: Any) -> None:
        if value is MISSING:
            self._misses += 1
        else:
            self._hits += 1

    # ------------ Core Interface ------------

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a value, or `default` on a miss or expired entry."""
        validate_key(key)
        physical = self._physical_key(key)

        try:
            raw = self._storage.raw_get(physical)
        except BackendUnavailableError as e:
            self._backend_failure(e, key)
            self._misses += 1
            return default

        value = self._unwrap(key, raw)
        self._record_read(value)
        return default if value is MISSING else value

    def set(self, key: str, value: Any, ttl: TTL = None) -> bool:
        """
        Store a value.

        Storing None deletes the key. This is not part of the usual cache
        contract and is kept for backward compatibility.
        """
        validate_key(key)
        physical = self._physical_key(key)

        # handle deletions
        if value is None:
            return self._delete_physical([physical], key)

        resolved = self._resolve_ttl(ttl)
        if resolved < 0:
            # already expired
            return self._delete_physical([physical], key)

        payload = self._wrap(value, resolved)

        try:
            stored = self._storage.raw_set(physical, payload, resolved)
        except BackendUnavailableError as e:
            self._backend_failure(e, key)
            return False

        if stored:
            self._sets += 1
        return stored

    def _delete_physical(self, physical_keys: list[str], key: str | None = None) -> bool:
        try:
            if len(physical_keys) == 1:
                self._storage.raw_delete(physical_keys[0])
            else:
                self._storage.raw_delete_many(physical_keys)
        except BackendUnavailableError as e:
            self._backend_failure(e, key)
            return True

        self._deletes += len(physical_keys)
        return True

    def delete(self, key: str) -> bool:
        """Delete a key. Always reports success."""
        validate_key(key)
        return self._delete_physical([self._physical_key(key)], key)

    def clear(self) -> bool:
        """
        Remove every entry of this cache.

        With the flush strategy the whole store is wiped, including keys of
        other caches sharing it. With the generation strategy the generation
        counter is bumped: old keys become unreachable and expire on their own.
        """
        try:
            if self._generation is not None:
                self._generation.bump()
                return True

            return self._storage.raw_clear()
        except BackendUnavailableError as e:
            self._backend_failure(e)
            return False

    def has(self, key: str) -> bool:
        """
        Check if a key is present and not expired.

        Subject to races: only use for cache warming, never to decide
        whether a following get() will hit.
        """
        validate_key(key)
        physical = self._physical_key(key)

        try:
            raw = self._storage.raw_get(physical)
        except BackendUnavailableError as e:
            self._backend_failure(e, key)
            return False

        item = self._decode(key, raw)
        return item is not None and not item.is_expired(self.clock.now())

    # ------------ Batch operations ------------

    def get_many(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        """
        Retrieve several values in one storage round-trip.

        Every requested key is present in the result, mapped to `default`
        when missing or expired.
        """
        keys = validate_keys(keys)
        if not keys:
            return {}

        physical = [self._physical_key(key) for key in keys]

        try:
            raws = self._storage.raw_get_many(physical)
        except BackendUnavailableError as e:
            self._backend_failure(e)
            self._misses += len(keys)
            return dict.fromkeys(keys, default)

        result: dict[str, Any] = {}
        for key, raw in zip(keys, raws, strict=True):
            value = self._unwrap(key, raw)
            self._record_read(value)
            result[key] = default if value is MISSING else value

        return result

    def set_many(self, values: Mapping[str, Any] | Iterable[tuple[str, Any]], ttl: TTL = None) -> bool:
        """
        Store several values with the same TTL.

        All keys are validated and all values encoded before anything is
        written. Writes are not transactional: if the store fails midway,
        entries already written stay written.
        """
        pairs = validate_pairs(values)
        if not pairs:
            return True

        resolved = self._resolve_ttl(ttl)

        deletions: list[str] = []
        writes: list[tuple[str, bytes]] = []
        for key, value in pairs:
            physical = self._physical_key(key)
            if value is None or resolved < 0:
                deletions.append(physical)
            else:
                writes.append((physical, self._wrap(value, resolved)))

        if deletions:
            self._delete_physical(deletions)

        if not writes:
            return True

        try:
            stored = self._storage.raw_set_many(writes, resolved)
        except BackendUnavailableError as e:
            self._backend_failure(e)
            return False

        if stored:
            self._sets += len(writes)
        return stored

    def delete_many(self, keys: Iterable[str]) -> bool:
        """Delete several keys. Always reports success."""
        keys = validate_keys(keys)
        if not keys:
            return True

        return self._delete_physical([self._physical_key(key) for key in keys])

    # ------------ Lifecycle ------------

    def get_stats(self) -> dict[str, Any]:
        """Cache statistics, including the storage's own."""
        total_requests = self._hits + self._misses
        hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

        try:
            storage_stats = self._storage.get_stats()
        except BackendUnavailableError as e:
            storage_stats = {"backend": self._storage.name, "error": str(e)}

        return {
            "backend": self._storage.name,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(hit_rate, 2),
            "sets": self._sets,
            "deletes": self._deletes,
            "early_expirations": self._early_expirations,
            "backend_errors": self._backend_errors,
            "suffix": self.suffix,
            "clear_strategy": self.clear_strategy.value,
            "generation": self.generation,
            "maximum_ttl": self.ttl_policy.maximum_ttl,
            "stampede": self.stampede.settings(),
            "storage": storage_stats,
        }

    def close(self) -> None:
        """Close the storage and release resources."""
        self._storage.close()
        logger.debug("Cache closed", extra={"backend": self._storage.name})

    def __enter__(self) -> Cache:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"Cache(storage={self._storage.name!r}, suffix={self.suffix!r}, "
            f"clear_strategy={self.clear_strategy.value!r})"
        )
