"""Object storage interfaces."""

from abc import ABC, abstractmethod


class StorageError(Exception):
    """Raised when a pre-signed URL cannot be issued."""


class ObjectStorage(ABC):
    """Issues short-lived URLs that let clients move bytes directly to and from the bucket."""

    @abstractmethod
    def presign_upload(self, key: str, *, content_type: str, expires_in: int) -> str:
        """Return a URL that allows a single PUT of ``key`` with ``content_type``."""

    @abstractmethod
    def presign_download(self, key: str, *, expires_in: int) -> str:
        """Return a URL that allows a GET of ``key``."""


__all__ = ["ObjectStorage", "StorageError"]
