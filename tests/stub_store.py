from __future__ import annotations

from datetime import datetime, timedelta, timezone
from threading import Lock

from bucket_purge.domain.errors import DeleteBatchError
from bucket_purge.domain.object_store import ObjectDescriptor, ObjectStore

CUTOFF = datetime(2024, 1, 1, tzinfo=timezone.utc)


def old(key: str, days: int = 1) -> ObjectDescriptor:
    return ObjectDescriptor(key=key, last_modified=CUTOFF - timedelta(days=days))


def new(key: str, days: int = 1) -> ObjectDescriptor:
    return ObjectDescriptor(key=key, last_modified=CUTOFF + timedelta(days=days))


class StubStore(ObjectStore):
    """In-memory store. A page given as an exception is raised when reached."""

    def __init__(self, pages=None, fail_keys=(), reject_keys=()) -> None:
        self.pages = list(pages or [])
        self.fail_keys = set(fail_keys)
        self.reject_keys = set(reject_keys)
        self.deleted_batches: list[list[str]] = []
        self.listed_prefixes: list[str | None] = []
        self._lock = Lock()

    def iter_object_pages(self, bucket, prefix=None):
        self.listed_prefixes.append(prefix)
        for page in self.pages:
            if isinstance(page, Exception):
                raise page
            yield list(page)

    def delete_keys(self, bucket, keys):
        if self.fail_keys.intersection(keys):
            raise DeleteBatchError("simulated failure", keys)
        with self._lock:
            self.deleted_batches.append(list(keys))
        return [key for key in keys if key in self.reject_keys]

    @property
    def deleted_keys(self) -> list[str]:
        with self._lock:
            return sorted(key for batch in self.deleted_batches for key in batch)
