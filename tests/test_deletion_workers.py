from __future__ import annotations

import threading

from stub_store import StubStore

from bucket_purge.application.batch_queue import BatchQueue
from bucket_purge.application.deletion_workers import drain, start_workers
from bucket_purge.infrastructure.metrics import PurgeCounters


def _filled_queue(batches: list[list[str]]) -> BatchQueue:
    queue = BatchQueue(maxsize=len(batches) + 1)
    for batch in batches:
        queue.put(batch)
    queue.close()
    return queue


def test_drain_counts_successful_batches_and_reports_progress() -> None:
    store = StubStore()
    counters = PurgeCounters()
    progress: list[int] = []

    drain(store, 'bucket', _filled_queue([['a', 'b'], ['c']]), counters, on_deleted=progress.append)

    assert counters.deleted == 3
    assert progress == [2, 1]
    assert store.deleted_keys == ['a', 'b', 'c']


def test_drain_drops_failed_batch_and_continues() -> None:
    store = StubStore(fail_keys={'bad'})
    counters = PurgeCounters()

    drain(store, 'bucket', _filled_queue([['a', 'bad'], ['c']]), counters)

    snapshot = counters.snapshot()
    assert snapshot['deleted'] == 1
    assert snapshot['failed_batches'] == 1
    assert snapshot['failed_keys'] == 2
    assert store.deleted_keys == ['c']


def test_drain_counts_partial_success_from_per_key_errors() -> None:
    store = StubStore(reject_keys={'locked'})
    counters = PurgeCounters()

    drain(store, 'bucket', _filled_queue([['a', 'locked', 'b']]), counters)

    snapshot = counters.snapshot()
    assert snapshot['deleted'] == 2
    assert snapshot['failed_batches'] == 0
    assert snapshot['failed_keys'] == 1


def test_drain_survives_unexpected_exception() -> None:
    class ExplodingStore(StubStore):
        def delete_keys(self, bucket, keys):
            if keys == ['boom']:
                raise ConnectionError('socket closed')
            return super().delete_keys(bucket, keys)

    store = ExplodingStore()
    counters = PurgeCounters()

    drain(store, 'bucket', _filled_queue([['boom'], ['ok']]), counters)

    assert counters.deleted == 1
    assert counters.snapshot()['failed_batches'] == 1


def test_drain_dry_run_deletes_nothing() -> None:
    store = StubStore()
    counters = PurgeCounters()

    drain(store, 'bucket', _filled_queue([['a']]), counters, dry_run=True)

    assert store.deleted_batches == []
    assert counters.deleted == 0


def test_drain_skips_batches_after_cancel() -> None:
    cancel = threading.Event()
    cancel.set()
    store = StubStore()
    counters = PurgeCounters()

    drain(store, 'bucket', _filled_queue([['a'], ['b']]), counters, cancel=cancel)

    assert store.deleted_batches == []
    assert counters.snapshot()['skipped_batches'] == 2


def test_worker_pool_shares_queue() -> None:
    store = StubStore()
    counters = PurgeCounters()
    queue = BatchQueue(maxsize=3)

    workers = start_workers(3, store, 'bucket', queue, counters)
    for index in range(20):
        queue.put([f'k{index:02d}', f'k{index:02d}-b'])
    queue.close()
    for worker in workers:
        worker.join(timeout=5)

    assert all(not worker.is_alive() for worker in workers)
    assert [worker.name for worker in workers] == ['purge-worker-1', 'purge-worker-2', 'purge-worker-3']
    assert counters.deleted == 40
    assert len(store.deleted_keys) == 40


def test_drain_keeps_going_when_progress_report_fails() -> None:
    store = StubStore()
    counters = PurgeCounters()

    def broken_pipe(count: int) -> None:
        raise BrokenPipeError('stdout closed')

    drain(store, 'bucket', _filled_queue([['a'], ['b'], ['c']]), counters, on_deleted=broken_pipe)

    assert counters.deleted == 3
    assert store.deleted_keys == ['a', 'b', 'c']
