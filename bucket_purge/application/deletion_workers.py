from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from bucket_purge.application.batch_queue import BatchQueue
from bucket_purge.domain.errors import DeleteBatchError
from bucket_purge.domain.object_store import ObjectStore
from bucket_purge.infrastructure.metrics import PurgeCounters

logger = logging.getLogger("purge.workers")

ProgressCallback = Callable[[int], None]


def drain(
    store: ObjectStore,
    bucket: str,
    batches: BatchQueue,
    counters: PurgeCounters,
    on_deleted: ProgressCallback | None = None,
    dry_run: bool = False,
    cancel: threading.Event | None = None,
) -> None:
    """Delete batches from ``batches`` until it is closed and empty."""
    for batch in batches:
        if cancel is not None and cancel.is_set():
            counters.add_skipped()
            logger.info("cancelled, skipping batch of %d objects", len(batch))
            continue

        if dry_run:
            logger.info("dry run: would delete %d objects", len(batch))
            continue

        try:
            failed = store.delete_keys(bucket, batch)
        except DeleteBatchError as exc:
            counters.add_failed(len(batch))
            logger.warning("Failed to delete objects: %s", exc)
            continue
        except Exception as exc:  # noqa: BLE001
            counters.add_failed(len(batch))
            logger.warning("Failed to delete objects: %s", exc, exc_info=True)
            continue

        deleted = len(batch) - len(failed)
        if failed:
            counters.add_failed(len(failed), batches=0)
        counters.add_deleted(deleted)
        if on_deleted is not None and deleted:
            try:
                on_deleted(deleted)
            except Exception as exc:  # noqa: BLE001
                logger.warning("progress report failed: %s", exc)


class DeletionWorker(threading.Thread):
    def __init__(
        self,
        index: int,
        store: ObjectStore,
        bucket: str,
        batches: BatchQueue,
        counters: PurgeCounters,
        on_deleted: ProgressCallback | None = None,
        dry_run: bool = False,
        cancel: threading.Event | None = None,
    ) -> None:
        super().__init__(name=f"purge-worker-{index}", daemon=True)
        self._store = store
        self._bucket = bucket
        self._batches = batches
        self._counters = counters
        self._on_deleted = on_deleted
        self._dry_run = dry_run
        self._cancel = cancel

    def run(self) -> None:
        drain(
            self._store,
            self._bucket,
            self._batches,
            self._counters,
            on_deleted=self._on_deleted,
            dry_run=self._dry_run,
            cancel=self._cancel,
        )


def start_workers(count: int, *args, **kwargs) -> list[DeletionWorker]:
    workers = [DeletionWorker(index + 1, *args, **kwargs) for index in range(count)]
    for worker in workers:
        worker.start()
    return workers
