from __future__ import annotations

from threading import Lock


class PurgeCounters:
    """Run-lifetime totals shared by the scanner and the deletion workers."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._candidates = 0
        self._deleted = 0
        self._failed_batches = 0
        self._failed_keys = 0
        self._skipped_batches = 0

    def set_candidates(self, value: int) -> None:
        with self._lock:
            self._candidates = value

    def add_deleted(self, value: int) -> None:
        with self._lock:
            self._deleted += value

    def add_failed(self, keys: int, batches: int = 1) -> None:
        with self._lock:
            self._failed_batches += batches
            self._failed_keys += keys

    def add_skipped(self) -> None:
        with self._lock:
            self._skipped_batches += 1

    @property
    def deleted(self) -> int:
        with self._lock:
            return self._deleted

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return {
                "candidates": self._candidates,
                "deleted": self._deleted,
                "failed_batches": self._failed_batches,
                "failed_keys": self._failed_keys,
                "skipped_batches": self._skipped_batches,
            }
