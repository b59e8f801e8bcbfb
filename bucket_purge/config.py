from __future__ import annotations

import os


class Settings:
    s3_bucket: str | None = os.getenv("S3_BUCKET") or None
    s3_endpoint_url: str | None = os.getenv("S3_ENDPOINT_URL") or None
    s3_region: str = os.getenv("S3_REGION", "us-east-1")
    s3_access_key: str | None = os.getenv("S3_ACCESS_KEY")
    s3_secret_key: str | None = os.getenv("S3_SECRET_KEY")
    s3_connect_timeout_seconds: float = float(os.getenv("S3_CONNECT_TIMEOUT_SECONDS", "10"))
    s3_read_timeout_seconds: float = float(os.getenv("S3_READ_TIMEOUT_SECONDS", "60"))
    s3_max_attempts: int = int(os.getenv("S3_MAX_ATTEMPTS", "3"))

    purge_workers: int = int(os.getenv("PURGE_WORKERS", "10"))
    purge_max_keys: int = int(os.getenv("PURGE_MAX_KEYS", "1000"))
    purge_prefix: str | None = os.getenv("PURGE_PREFIX") or None
    purge_date: str = os.getenv("PURGE_DATE", "")

    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()

# Store-imposed ceiling on keys per DeleteObjects call.
MAX_DELETE_KEYS = 1000
