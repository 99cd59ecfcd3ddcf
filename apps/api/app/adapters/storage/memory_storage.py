"""Deterministic storage adapter for local development and tests."""

from __future__ import annotations

from urllib.parse import quote, urlencode

from app.adapters.storage.base import ObjectStorage, StorageError


class InMemoryObjectStorage(ObjectStorage):
    """Builds URLs without signing anything; records every issued URL for inspection."""

    def __init__(self, base_url: str = "https://storage.example.test/bucket") -> None:
        self._base_url = base_url.rstrip("/")
        self.issued: list[tuple[str, str, int]] = []
        # One-shot failpoint.
        self.presign_failure_message: str | None = None

    def presign_upload(self, key: str, *, content_type: str, expires_in: int) -> str:
        self._maybe_fail()
        self.issued.append(("put", key, expires_in))
        query = urlencode({"op": "put", "content_type": content_type, "expires": expires_in})
        return f"{self._base_url}/{quote(key)}?{query}"

    def presign_download(self, key: str, *, expires_in: int) -> str:
        self._maybe_fail()
        self.issued.append(("get", key, expires_in))
        query = urlencode({"op": "get", "expires": expires_in})
        return f"{self._base_url}/{quote(key)}?{query}"

    def _maybe_fail(self) -> None:
        if self.presign_failure_message is None:
            return

        message = self.presign_failure_message
        self.presign_failure_message = None
        raise StorageError(message)


__all__ = ["InMemoryObjectStorage"]
