from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ObjectDescriptor:
    key: str
    last_modified: datetime


class ObjectStore(ABC):
    @abstractmethod
    def iter_object_pages(self, bucket: str, prefix: str | None = None) -> Iterator[list[ObjectDescriptor]]:
        """Yield one list of descriptors per listing page.

        Raises ListingError when a page cannot be fetched.
        """

    @abstractmethod
    def delete_keys(self, bucket: str, keys: list[str]) -> list[str]:
        """Delete up to one batch of keys in a single call.

        Returns the keys the store reported as not deleted. Raises
        DeleteBatchError when the call itself fails.
        """
