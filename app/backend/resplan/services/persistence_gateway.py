"""Initial-load fallback chain and best-effort mutation propagation."""

from __future__ import annotations

import enum
import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass

from resplan.core.errors import CacheCorrupt, RemoteUnavailable
from resplan.models.records import ResourceAssignment
from resplan.services.bootstrap import BootstrapGenerator
from resplan.services.local_cache import LocalSnapshotCache
from resplan.services.remote_store import RemoteResourceStore

logger = logging.getLogger(__name__)


class LoadSource(str, enum.Enum):
    REMOTE = "remote"
    LOCAL_CACHE = "local_cache"
    BOOTSTRAP = "bootstrap"


@dataclass(slots=True, frozen=True)
class LoadResult:
    records: list[ResourceAssignment]
    source: LoadSource


class PersistenceGateway:
    """Hides the remote store, local cache and bootstrap data behind one contract.

    Failures of any tier are logged and absorbed here; callers never see them.
    Remote writes run on ``executor`` and are never awaited by the caller.
    """

    def __init__(
        self,
        *,
        cache: LocalSnapshotCache,
        bootstrap: BootstrapGenerator,
        remote: RemoteResourceStore | None = None,
        executor: Executor | None = None,
        max_workers: int = 2,
    ) -> None:
        self.cache = cache
        self.bootstrap = bootstrap
        self.remote = remote
        self._executor = executor
        self._owns_executor = executor is None
        self._max_workers = max_workers
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()
        self.remote_enabled = remote is not None
        if not self.remote_enabled:
            logger.info("Remote store not configured; remote persistence disabled for this session")

    # ---------- Initial load ----------
    def load_initial(self) -> LoadResult:
        records = self._load_remote()
        if records:
            return LoadResult(records=records, source=LoadSource.REMOTE)

        records = self._load_cache()
        if records:
            return LoadResult(records=records, source=LoadSource.LOCAL_CACHE)

        records = self.bootstrap()
        logger.info("Loaded %d bootstrap records", len(records))
        return LoadResult(records=records, source=LoadSource.BOOTSTRAP)

    def _load_remote(self) -> list[ResourceAssignment]:
        if not self.remote_enabled or self.remote is None:
            return []
        try:
            records = self.remote.list_all()
        except RemoteUnavailable:
            logger.warning("Remote load failed; disabling remote persistence", exc_info=True)
            self.remote_enabled = False
            return []
        logger.info("Loaded %d records from remote store", len(records))
        return records

    def _load_cache(self) -> list[ResourceAssignment]:
        try:
            records = self.cache.read()
        except CacheCorrupt:
            logger.warning("Local snapshot is corrupt; ignoring it", exc_info=True)
            return []
        logger.info("Loaded %d records from local cache %s", len(records), self.cache.path)
        return records

    # ---------- Mutation propagation ----------
    def persist_upsert(self, record: ResourceAssignment, snapshot: Sequence[ResourceAssignment]) -> None:
        self._write_cache(snapshot)
        if self.remote_enabled and self.remote is not None:
            self._submit(self.remote.upsert, record, description=f"upsert {record.id}")

    def persist_remove(self, record_id: str, snapshot: Sequence[ResourceAssignment]) -> None:
        self._write_cache(snapshot)
        if self.remote_enabled and self.remote is not None:
            self._submit(self.remote.delete, record_id, description=f"delete {record_id}")

    def _write_cache(self, snapshot: Sequence[ResourceAssignment]) -> None:
        try:
            self.cache.write(snapshot)
        except OSError:
            logger.warning("Failed to write local snapshot %s", self.cache.path, exc_info=True)

    def _submit(self, func: Callable[..., object], *args: object, description: str) -> None:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="remote-sync")
        future = self._executor.submit(func, *args)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(lambda done: self._on_remote_done(done, description))

    def _on_remote_done(self, future: Future, description: str) -> None:
        try:
            exc = None if future.cancelled() else future.exception()
            if exc is not None:
                logger.warning("Remote %s failed: %s", description, exc)
            else:
                logger.debug("Remote %s done", description)
        finally:
            with self._pending_lock:
                self._pending.discard(future)

    # ---------- Lifecycle ----------
    def flush(self, timeout: float | None = None) -> None:
        """Block until pending remote tasks finish (or ``timeout`` elapses)."""

        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._pending_lock:
                pending = list(self._pending)
            if not pending:
                return
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                logger.warning("%d remote tasks still pending after flush timeout", len(pending))
                return
            # Done futures whose callbacks have not run yet are still pending.
            wait(pending, timeout=remaining)

    def close(self, timeout: float | None = 5.0) -> None:
        self.flush(timeout)
        if self._executor is not None and self._owns_executor:
            self._executor.shutdown(wait=False)
            self._executor = None
