from __future__ import annotations

import logging
from collections.abc import Iterator

from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
import boto3

from bucket_purge.config import settings
from bucket_purge.domain.errors import ClientConstructionError, DeleteBatchError, ListingError
from bucket_purge.domain.object_store import ObjectDescriptor, ObjectStore

logger = logging.getLogger("purge.storage")


class S3ObjectStorage(ObjectStore):
    def __init__(
        self,
        region: str = settings.s3_region,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        client=None,
    ) -> None:
        if client is not None:
            self._client = client
            return

        config_kwargs = {
            "signature_version": "s3v4",
            "connect_timeout": settings.s3_connect_timeout_seconds,
            "read_timeout": settings.s3_read_timeout_seconds,
            "retries": {"max_attempts": settings.s3_max_attempts, "mode": "standard"},
        }
        client_kwargs = {"region_name": region}

        if endpoint_url:
            # S3-compatible service: path-style addressing with static credentials.
            if not access_key or not secret_key:
                raise ClientConstructionError(
                    "access key and secret key are required for S3-compatible services"
                )
            config_kwargs["s3"] = {"addressing_style": "path"}
            client_kwargs.update(
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
            )

        try:
            self._client = boto3.client("s3", config=Config(**config_kwargs), **client_kwargs)
        except (BotoCoreError, ValueError) as exc:
            raise ClientConstructionError(f"failed to create S3 client: {exc}") from exc

        logger.debug("s3 client ready (endpoint=%s, region=%s)", endpoint_url or "aws", region)

    def iter_object_pages(self, bucket: str, prefix: str | None = None) -> Iterator[list[ObjectDescriptor]]:
        paginator = self._client.get_paginator("list_objects_v2")
        params = {"Bucket": bucket}
        if prefix:
            params["Prefix"] = prefix

        pages = iter(paginator.paginate(**params))
        while True:
            try:
                page = next(pages)
            except StopIteration:
                return
            except (ClientError, BotoCoreError) as exc:
                raise ListingError(f"failed to list objects in {bucket}: {exc}") from exc

            yield [
                ObjectDescriptor(key=obj["Key"], last_modified=obj["LastModified"])
                for obj in page.get("Contents", [])
            ]

    def delete_keys(self, bucket: str, keys: list[str]) -> list[str]:
        try:
            response = self._client.delete_objects(
                Bucket=bucket,
                Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
            )
        except (ClientError, BotoCoreError) as exc:
            raise DeleteBatchError(f"failed to delete objects: {exc}", keys) from exc

        failed = []
        for error in response.get("Errors", []):
            logger.warning(
                "failed to delete %s: %s %s",
                error.get("Key"),
                error.get("Code", ""),
                error.get("Message", ""),
            )
            failed.append(error.get("Key", ""))
        return failed
