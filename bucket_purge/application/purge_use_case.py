from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from bucket_purge.application.batch_queue import BatchQueue
from bucket_purge.application.deletion_workers import ProgressCallback, start_workers
from bucket_purge.application.scanner import scan
from bucket_purge.config import MAX_DELETE_KEYS, settings
from bucket_purge.domain.errors import ConfigError, ListingError
from bucket_purge.domain.object_store import ObjectStore
from bucket_purge.infrastructure.date_parsing import parse_cutoff
from bucket_purge.infrastructure.metrics import PurgeCounters
from bucket_purge.infrastructure.object_storage import S3ObjectStorage

logger = logging.getLogger("purge.use_case")


@dataclass
class PurgeOptions:
    bucket: str = ""
    date: str = ""
    workers: int = settings.purge_workers
    endpoint: str | None = settings.s3_endpoint_url
    region: str = settings.s3_region
    access_key: str | None = settings.s3_access_key
    secret_key: str | None = settings.s3_secret_key
    max_keys: int = settings.purge_max_keys
    prefix: str | None = settings.purge_prefix
    dry_run: bool = False


@dataclass
class PurgeResult:
    deleted: int
    candidates: int
    duration: float
    failed_batches: int = 0
    failed_keys: int = 0
    error: ListingError | None = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.cancelled


StoreFactory = Callable[[PurgeOptions], ObjectStore]


def build_storage(options: PurgeOptions) -> ObjectStore:
    return S3ObjectStorage(
        region=options.region,
        endpoint_url=options.endpoint,
        access_key=options.access_key,
        secret_key=options.secret_key,
    )


def validate_options(options: PurgeOptions) -> None:
    if not options.bucket or not options.date:
        raise ConfigError("bucket name and date are required")
    if options.workers < 1:
        raise ConfigError("workers must be at least 1")
    if not 1 <= options.max_keys <= MAX_DELETE_KEYS:
        raise ConfigError(f"max keys must be between 1 and {MAX_DELETE_KEYS}")


class PurgeUseCase:
    def __init__(
        self,
        store_factory: StoreFactory = build_storage,
        on_deleted: ProgressCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        self._store_factory = store_factory
        self._on_deleted = on_deleted
        self._cancel = cancel

    def execute(self, options: PurgeOptions) -> PurgeResult:
        validate_options(options)
        store = self._store_factory(options)
        cutoff = parse_cutoff(options.date)

        logger.info(
            "purging objects in %s modified before %s (workers=%d, max_keys=%d%s)",
            options.bucket,
            cutoff.isoformat(),
            options.workers,
            options.max_keys,
            ", dry run" if options.dry_run else "",
        )

        counters = PurgeCounters()
        batches = BatchQueue(maxsize=options.workers)
        workers = start_workers(
            options.workers,
            store,
            options.bucket,
            batches,
            counters,
            on_deleted=self._on_deleted,
            dry_run=options.dry_run,
            cancel=self._cancel,
        )

        started = time.perf_counter()
        listing_error: ListingError | None = None
        try:
            candidates = scan(
                store,
                options.bucket,
                cutoff,
                options.max_keys,
                batches,
                prefix=options.prefix,
                cancel=self._cancel,
            )
        except ListingError as exc:
            listing_error = exc
            candidates = exc.candidates
        finally:
            # scan() closes the queue itself; this covers failures before it starts.
            batches.close()
            for worker in workers:
                worker.join()

        counters.set_candidates(candidates)
        snapshot = counters.snapshot()
        return PurgeResult(
            deleted=snapshot["deleted"],
            candidates=snapshot["candidates"],
            duration=time.perf_counter() - started,
            failed_batches=snapshot["failed_batches"],
            failed_keys=snapshot["failed_keys"],
            error=listing_error,
            cancelled=self._cancel is not None and self._cancel.is_set(),
        )
