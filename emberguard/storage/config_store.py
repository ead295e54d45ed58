"""
EmberGuard - Config Store
=========================

Durable per-community configuration and statistics.

DESIGN:
    One JSON file per community under <data_dir>/communities. Writes go
    to a temp file that is fsynced and then os.replace()d over the old
    record, so a crash leaves either the old or the new version on disk,
    never a torn one.

    Reads never fail. A missing record is the default config; an
    unreadable, oversized or non-object record is moved to
    <data_dir>/quarantine with a .meta.json diagnostic next to it and
    the default config is returned.

    Ids whose escaped form would make an unwieldy file name are stored
    under <data_dir>/communities/hashed as a SHA-256 name, with the id
    kept inside the record so list_communities() can report it.

    Read-modify-write cycles (stats increments, admin edits) go through
    update(), which holds a per-community asyncio.Lock with a bounded
    wait and re-reads the record inside the lock. A lock entry is only
    pruned while no caller holds or waits on it, so two callers never
    end up with different locks for the same community.

    File I/O runs in worker threads via asyncio.to_thread, which keeps
    it the only suspension point on the moderation path.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
import hashlib
import inspect
import json
import os
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Union
from urllib.parse import quote, unquote

from emberguard.core.config import NY_TZ
from emberguard.core.constants import (
    IO_RETRIES,
    IO_RETRY_BASE_DELAY,
    LOCK_TIMEOUT,
    MAX_CONFIG_BYTES,
    SNAPSHOT_MAX_BYTES,
)
from emberguard.core.logger import logger
from emberguard.models.community import CommunityConfig
from emberguard.utils.retry import retry_async


# Escaped file names longer than this are replaced by a hash
MAX_STEM_LENGTH = 150

# Key holding the real id inside hashed records
HASHED_ID_KEY = "_community_id"


# =============================================================================
# Results & Errors
# =============================================================================

@dataclass
class StoreResult:
    """
    Outcome of a store write.

    Truthy when the write succeeded, so `if await store.save(...)` reads
    naturally. `error` is a short machine-readable code on failure:
    "io_error", "oversized", "lock_timeout" or "invalid_id".
    """
    success: bool
    value: Any = None
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.success


class LockTimeoutError(Exception):
    """Raised when a community lock cannot be acquired in time."""

    def __init__(self, community_id: str, timeout: float) -> None:
        super().__init__(f"Lock for community {community_id} not acquired within {timeout}s")
        self.community_id = community_id
        self.timeout = timeout


Mutator = Callable[[CommunityConfig], Union[None, bool, Awaitable[Optional[bool]]]]


# =============================================================================
# Config Store
# =============================================================================

class ConfigStore:
    """
    File-backed store of CommunityConfig records.

    Attributes:
        root: Base data directory.
        lock_timeout: Seconds to wait for a community lock.
        max_bytes: Largest record accepted on read or write.
    """

    def __init__(
        self,
        root: Union[str, Path],
        lock_timeout: float = LOCK_TIMEOUT,
        max_bytes: int = MAX_CONFIG_BYTES,
        io_retries: int = IO_RETRIES,
        retry_base_delay: float = IO_RETRY_BASE_DELAY,
    ) -> None:
        self.root = Path(root)
        self.lock_timeout = lock_timeout
        self.max_bytes = max_bytes
        self._io_retries = io_retries
        self._retry_base_delay = retry_base_delay
        self._communities_dir = self.root / "communities"
        self._quarantine_dir = self.root / "quarantine"
        self._hashed_dir = self._communities_dir / "hashed"
        self._snapshots_dir = self.root / "snapshots"
        self._locks: Dict[str, asyncio.Lock] = {}
        # Callers inside locked() per key, waiting or holding
        self._lock_users: Dict[str, int] = {}
        self._dirs_ready = False

    # =========================================================================
    # Paths
    # =========================================================================

    def _ensure_dirs(self) -> None:
        if self._dirs_ready:
            return
        for directory in (
            self._communities_dir,
            self._hashed_dir,
            self._quarantine_dir,
            self._snapshots_dir,
        ):
            directory.mkdir(parents=True, exist_ok=True)
        self._dirs_ready = True

    @staticmethod
    def _file_stem(name: str) -> str:
        name = str(name)
        if not name:
            raise ValueError("Empty record name")
        return quote(name, safe="-_")

    def _is_hashed(self, path: Path) -> bool:
        return path.parent == self._hashed_dir

    def path_for(self, community_id: str) -> Path:
        """
        File holding a community's record.

        Raises:
            ValueError: If the id is empty.
        """
        stem = self._file_stem(community_id)
        if len(stem) <= MAX_STEM_LENGTH:
            return self._communities_dir / f"{stem}.json"
        digest = hashlib.sha256(str(community_id).encode("utf-8")).hexdigest()
        return self._hashed_dir / f"{digest}.json"

    # =========================================================================
    # Low-level I/O (worker thread)
    # =========================================================================

    @staticmethod
    def _read_sync(path: Path) -> Optional[bytes]:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def _write_atomic_sync(self, path: Path, payload: bytes) -> None:
        self._ensure_dirs()
        tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            with open(tmp, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise

    async def _read(self, path: Path, label: str) -> Optional[bytes]:
        return await retry_async(
            asyncio.to_thread, self._read_sync, path,
            max_retries=self._io_retries,
            base_delay=self._retry_base_delay,
            operation=f"read {label}",
        )

    async def _write(self, path: Path, payload: bytes, label: str) -> None:
        await retry_async(
            asyncio.to_thread, self._write_atomic_sync, path, payload,
            max_retries=self._io_retries,
            base_delay=self._retry_base_delay,
            operation=f"write {label}",
        )

    @staticmethod
    def _serialize(data: Dict[str, Any]) -> bytes:
        return (json.dumps(data, sort_keys=True, indent=2, ensure_ascii=False) + "\n").encode("utf-8")

    # =========================================================================
    # Quarantine
    # =========================================================================

    def _quarantine_sync(self, path: Path, reason: str, error: str, size: int) -> Path:
        self._ensure_dirs()
        stamp = datetime.now(NY_TZ).strftime("%Y%m%d-%H%M%S")
        target = self._quarantine_dir / f"{path.stem}-{stamp}-{uuid.uuid4().hex[:6]}{path.suffix}"
        os.replace(path, target)
        meta = {
            "original_path": str(path),
            "reason": reason,
            "error": error,
            "size_bytes": size,
            "quarantined_at": time.time(),
        }
        target.with_name(target.name + ".meta.json").write_text(
            json.dumps(meta, indent=2, sort_keys=True), encoding="utf-8"
        )
        return target

    async def _quarantine(self, path: Path, label: str, reason: str, error: str, size: int) -> None:
        """Move a bad record aside. Failure to move is logged, not raised."""
        try:
            target = await asyncio.to_thread(self._quarantine_sync, path, reason, error, size)
        except OSError as e:
            logger.error("Quarantine Failed", [
                ("Record", label),
                ("Reason", reason),
                ("Error", str(e)[:100]),
            ])
            return

        logger.tree("Record Quarantined", [
            ("Record", label),
            ("Reason", reason),
            ("Size", f"{size} bytes"),
            ("Moved To", target.name),
        ], emoji="🧯")

    async def _load_json(
        self,
        path: Path,
        label: str,
        limit: Optional[int] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Read and decode a JSON object, quarantining anything unusable.

        Returns:
            The decoded dict, or None when absent, unreadable or quarantined.
        """
        try:
            raw = await self._read(path, label)
        except OSError as e:
            logger.error("Record Read Failed", [
                ("Record", label),
                ("Error Type", type(e).__name__),
                ("Fallback", "defaults"),
            ])
            return None

        if raw is None:
            return None

        limit = limit or self.max_bytes
        if len(raw) > limit:
            await self._quarantine(path, label, "oversized", f"{len(raw)} > {limit}", len(raw))
            return None

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            await self._quarantine(path, label, "corrupt", str(e)[:200], len(raw))
            return None

        if not isinstance(data, dict):
            await self._quarantine(path, label, "not_an_object", type(data).__name__, len(raw))
            return None

        return data

    # =========================================================================
    # Public API
    # =========================================================================

    async def get(self, community_id: str) -> CommunityConfig:
        """
        Get a community's config merged over defaults.

        Never raises and never returns a partially populated config. An
        empty id reads as defaults.
        """
        try:
            path = self.path_for(community_id)
        except ValueError:
            logger.warning("Invalid Community Id", [
                ("Id", repr(community_id)),
                ("Fallback", "defaults"),
            ])
            return CommunityConfig()
        data = await self._load_json(path, f"community {community_id}")
        if data is None:
            return CommunityConfig()
        return CommunityConfig.from_stored(data)

    async def save(self, community_id: str, config: CommunityConfig) -> StoreResult:
        """
        Persist a community's config atomically.

        Returns:
            StoreResult; a failed write is reported, not raised.
        """
        try:
            path = self.path_for(community_id)
        except ValueError:
            return self._invalid_id(community_id, config)

        record = config.to_record()
        if self._is_hashed(path):
            record[HASHED_ID_KEY] = str(community_id)
        payload = self._serialize(record)
        if len(payload) > self.max_bytes:
            logger.error("Config Too Large", [
                ("Community", str(community_id)),
                ("Size", f"{len(payload)} bytes"),
                ("Limit", f"{self.max_bytes} bytes"),
            ])
            return StoreResult(False, value=config, error="oversized")

        try:
            await self._write(path, payload, f"community {community_id}")
        except OSError as e:
            logger.error("Config Save Failed", [
                ("Community", str(community_id)),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:100]),
            ])
            return StoreResult(False, value=config, error="io_error")

        return StoreResult(True, value=config)

    # =========================================================================
    # Locking
    # =========================================================================

    def _lock_for(self, community_id: str) -> asyncio.Lock:
        key = str(community_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def locked(self, community_id: str) -> AsyncIterator[None]:
        """
        Hold the community's lock for the duration of the block.

        Raises:
            LockTimeoutError: If the lock is not acquired within lock_timeout.
        """
        key = str(community_id)
        lock = self._lock_for(key)
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            if not await self._acquire(lock):
                raise LockTimeoutError(key, self.lock_timeout)
            try:
                yield
            finally:
                lock.release()
        finally:
            remaining = self._lock_users[key] - 1
            if remaining:
                self._lock_users[key] = remaining
            else:
                del self._lock_users[key]

    async def _acquire(self, lock: asyncio.Lock) -> bool:
        """
        Acquire lock within lock_timeout.

        The acquire runs as its own task so a timeout or cancellation can
        never leave the lock held with nobody to release it.

        Returns:
            False on timeout.
        """
        acquire = asyncio.ensure_future(lock.acquire())
        try:
            done, _ = await asyncio.wait({acquire}, timeout=self.lock_timeout)
        except asyncio.CancelledError:
            self._abandon_acquire(lock, acquire)
            raise
        if done:
            return True
        self._abandon_acquire(lock, acquire)
        return False

    @staticmethod
    def _abandon_acquire(lock: asyncio.Lock, acquire: "asyncio.Future[bool]") -> None:
        """Cancel a pending acquire; release the lock if it was won anyway."""
        def release_if_won(task: "asyncio.Future[bool]") -> None:
            if not task.cancelled() and task.exception() is None:
                lock.release()

        if acquire.done():
            release_if_won(acquire)
        else:
            acquire.cancel()
            acquire.add_done_callback(release_if_won)

    async def with_lock(self, community_id: str, fn: Callable[[], Any]) -> Any:
        """Run fn (sync or async) while holding the community's lock."""
        async with self.locked(community_id):
            result = fn()
            if inspect.isawaitable(result):
                result = await result
            return result

    async def update(self, community_id: str, mutator: Mutator) -> StoreResult:
        """
        Lock, re-read, mutate and save one community's config.

        Args:
            community_id: Community to update.
            mutator: Callable that edits the config in place (sync or async).
                Returning False skips the write.

        Returns:
            StoreResult whose value is the config as saved. A lock timeout
            gives error="lock_timeout"; an empty id gives error="invalid_id".
        """
        if not str(community_id):
            return self._invalid_id(community_id)

        try:
            async with self.locked(community_id):
                config = await self.get(community_id)
                outcome = mutator(config)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
                if outcome is False:
                    return StoreResult(True, value=config)
                return await self.save(community_id, config)
        except LockTimeoutError as e:
            logger.error("Config Lock Timeout", [
                ("Community", str(community_id)),
                ("Waited", f"{e.timeout}s"),
            ])
            return StoreResult(False, error="lock_timeout")

    def prune_locks(self) -> int:
        """
        Drop locks nobody holds or waits on.

        A lock that is momentarily free while a waiter is about to take it
        still has a user and is kept.

        Returns:
            Number of locks dropped.
        """
        idle = [
            key for key, lock in self._locks.items()
            if key not in self._lock_users and not lock.locked()
        ]
        for key in idle:
            del self._locks[key]
        return len(idle)

    @staticmethod
    def _invalid_id(community_id: Any, config: Optional[CommunityConfig] = None) -> StoreResult:
        logger.warning("Invalid Community Id", [
            ("Id", repr(community_id)),
            ("Outcome", "write skipped"),
        ])
        return StoreResult(False, value=config, error="invalid_id")

    # =========================================================================
    # Listing & Snapshots
    # =========================================================================

    def _hashed_ids_sync(self) -> List[str]:
        ids = []
        for path in self._hashed_dir.glob("*.json"):
            try:
                data = json.loads(path.read_bytes().decode("utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError):
                continue
            if isinstance(data, dict) and isinstance(data.get(HASHED_ID_KEY), str):
                ids.append(data[HASHED_ID_KEY])
        return ids

    async def list_communities(self) -> List[str]:
        """Ids of every community with a stored record."""
        def scan() -> List[str]:
            if not self._communities_dir.exists():
                return []
            ids = [unquote(p.stem) for p in self._communities_dir.glob("*.json")]
            if self._hashed_dir.exists():
                ids.extend(self._hashed_ids_sync())
            return sorted(ids)
        return await asyncio.to_thread(scan)

    def _snapshot_path(self, name: str) -> Path:
        return self._snapshots_dir / f"{self._file_stem(name)}.json"

    async def save_snapshot(self, name: str, data: Dict[str, Any]) -> StoreResult:
        payload = self._serialize(data)
        try:
            await self._write(self._snapshot_path(name), payload, f"snapshot {name}")
        except OSError as e:
            logger.error("Snapshot Save Failed", [
                ("Snapshot", name),
                ("Error", str(e)[:100]),
            ])
            return StoreResult(False, error="io_error")
        return StoreResult(True, value=len(payload))

    async def load_snapshot(self, name: str) -> Optional[Dict[str, Any]]:
        return await self._load_json(
            self._snapshot_path(name), f"snapshot {name}", limit=SNAPSHOT_MAX_BYTES
        )


__all__ = [
    "ConfigStore",
    "StoreResult",
    "LockTimeoutError",
]
