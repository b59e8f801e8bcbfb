from __future__ import annotations

import logging
from datetime import datetime
from threading import Event

from bucket_purge.application.batch_queue import BatchQueue
from bucket_purge.domain.errors import ListingError
from bucket_purge.domain.object_store import ObjectStore

logger = logging.getLogger("purge.scanner")


def scan(
    store: ObjectStore,
    bucket: str,
    cutoff: datetime,
    max_batch_size: int,
    out: BatchQueue,
    *,
    prefix: str | None = None,
    cancel: Event | None = None,
) -> int:
    """List the bucket and put every key modified before ``cutoff`` on ``out``.

    Keys are grouped into batches of at most ``max_batch_size``. Returns the
    number of candidates found. ``out`` is closed when the scan ends, whether
    it completes, fails or is cancelled. On a listing failure the buffered
    keys are dropped and the ListingError is re-raised with the candidate
    count recorded on it.
    """
    if max_batch_size < 1:
        out.close()
        raise ValueError("max_batch_size must be at least 1")

    candidates = 0
    batch: list[str] = []
    pages = 0

    def cancelled() -> bool:
        return cancel is not None and cancel.is_set()

    try:
        for page in store.iter_object_pages(bucket, prefix):
            if cancelled():
                logger.warning("scan cancelled after %d pages, dropping %d buffered keys", pages, len(batch))
                return candidates
            pages += 1

            for obj in page:
                if not obj.last_modified < cutoff:
                    continue
                batch.append(obj.key)
                candidates += 1

                if len(batch) >= max_batch_size:
                    if cancelled():
                        logger.warning("scan cancelled, dropping %d buffered keys", len(batch))
                        return candidates
                    out.put(batch)
                    batch = []

        if batch and not cancelled():
            out.put(batch)
    except ListingError as exc:
        exc.candidates = candidates
        logger.error("listing failed after %d pages: %s", pages, exc)
        raise
    finally:
        out.close()

    logger.info("scan complete: %d pages, %d candidates", pages, candidates)
    return candidates
