from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading

from bucket_purge.application.purge_use_case import PurgeOptions, PurgeUseCase, StoreFactory, build_storage
from bucket_purge.config import settings
from bucket_purge.domain.errors import PurgeError

logger = logging.getLogger("purge.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bucket-purge",
        description="Delete objects from an S3 bucket that were last modified before a given date.",
        allow_abbrev=False,
    )
    parser.add_argument("--bucket", "-bucket", default=settings.s3_bucket, help="S3 bucket name")
    parser.add_argument(
        "--date",
        "-date",
        default="",
        help="Delete objects older than this date (RFC 3339 or another common format)",
    )
    parser.add_argument(
        "--workers", "-workers", type=int, default=settings.purge_workers, help="Number of concurrent workers"
    )
    parser.add_argument(
        "--endpoint",
        "-endpoint",
        default=settings.s3_endpoint_url,
        help="S3-compatible endpoint (e.g. http://localhost:9000 for MinIO)",
    )
    parser.add_argument("--region", "-region", default=settings.s3_region, help="AWS or custom region")
    parser.add_argument("--access-key", "-access-key", default=settings.s3_access_key, help="Access key")
    parser.add_argument("--secret-key", "-secret-key", default=settings.s3_secret_key, help="Secret key")
    parser.add_argument(
        "--max-keys",
        "-max-keys",
        type=int,
        default=settings.purge_max_keys,
        help="Maximum number of keys per DeleteObjects call",
    )
    parser.add_argument("--prefix", "-prefix", default=settings.purge_prefix, help="Only scan keys under this prefix")
    parser.add_argument("--dry-run", "-dry-run", action="store_true", help="List candidates without deleting")
    parser.add_argument("--log-level", "-log-level", default=settings.log_level, help="Logging level")
    return parser


def _print_deleted(count: int) -> None:
    print(f"Deleted {count} objects", flush=True)


def _install_signal_handlers(cancel: threading.Event) -> dict:
    if threading.current_thread() is not threading.main_thread():
        return {}

    def handle(signum, frame):  # noqa: ARG001
        logger.warning("received signal %d, stopping after in-flight batches", signum)
        cancel.set()

    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, handle)
    return previous


def main(argv: list[str] | None = None, store_factory: StoreFactory = build_storage) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    options = PurgeOptions(
        bucket=args.bucket or "",
        date=args.date or "",
        workers=args.workers,
        endpoint=args.endpoint,
        region=args.region,
        access_key=args.access_key,
        secret_key=args.secret_key,
        max_keys=args.max_keys,
        prefix=args.prefix,
        dry_run=args.dry_run,
    )

    cancel = threading.Event()
    previous_handlers = _install_signal_handlers(cancel)
    use_case = PurgeUseCase(store_factory=store_factory, on_deleted=_print_deleted, cancel=cancel)

    try:
        result = use_case.execute(options)
    except PurgeError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE
    finally:
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)

    print(
        f"Operation complete. Deleted {result.deleted}/{result.candidates} objects in {result.duration:.3f}s",
        flush=True,
    )
    if result.failed_batches or result.failed_keys:
        logger.warning("%d batches failed, %d objects not deleted", result.failed_batches, result.failed_keys)

    if result.error is not None:
        logger.error("Failed to list objects: %s", result.error)
        return EXIT_FAILURE
    if result.cancelled:
        return EXIT_CANCELLED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
