from __future__ import annotations


class PurgeError(Exception):
    pass


class ConfigError(PurgeError, ValueError):
    pass


class DateParseError(PurgeError, ValueError):
    pass


class ClientConstructionError(PurgeError, RuntimeError):
    pass


class ListingError(PurgeError):
    """A listing page could not be fetched; the scan stops here."""

    def __init__(self, message: str, candidates: int = 0) -> None:
        super().__init__(message)
        self.candidates = candidates


class DeleteBatchError(PurgeError):
    """A bulk-delete call failed as a whole."""

    def __init__(self, message: str, keys: list[str] | None = None) -> None:
        super().__init__(message)
        self.keys = list(keys or [])
