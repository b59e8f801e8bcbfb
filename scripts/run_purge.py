from __future__ import annotations

import logging
import sys

from bucket_purge.application.purge_use_case import PurgeOptions, PurgeUseCase
from bucket_purge.config import settings
from bucket_purge.domain.errors import PurgeError


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    try:
        result = PurgeUseCase().execute(PurgeOptions(bucket=settings.s3_bucket or "", date=settings.purge_date))
    except PurgeError as exc:
        print({"error": str(exc)})
        sys.exit(1)
    print(
        {
            "candidates": result.candidates,
            "deleted": result.deleted,
            "failed_batches": result.failed_batches,
            "duration_sec": round(result.duration, 2),
            "error": str(result.error) if result.error else None,
        }
    )
    sys.exit(0 if result.ok else 1)
