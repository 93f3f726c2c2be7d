from __future__ import annotations

import abc


class Provider(abc.ABC):
    """
    Base class for all providers.
    Every concrete provider must declare a provider_name ('s3', 'gcp', 'azure' or 'alicloud').
    """

    @property
    @abc.abstractmethod
    def provider_name(self) -> str:
        """The backend family this provider talks to."""
        pass


class BlobStoreProvider(Provider):
    """
    Interface for the remote object store holding the service's blobs.

    Keys are opaque, non-empty strings; values are raw bytes. Implementations hold one
    long-lived SDK client that is shared by concurrent requests and never mutated after
    construction.

    Absence is always reported with `BlobNotFoundError`; every other provider failure
    surfaces as `BlobOperationError` with the original exception chained.
    """

    @abc.abstractmethod
    def ping(self) -> None:
        """Checks the configured bucket/container is reachable. Raises on failure."""
        pass

    @abc.abstractmethod
    def has(self, key: str) -> None:
        """Returns when the object exists, raises `BlobNotFoundError` when it does not."""
        pass

    @abc.abstractmethod
    def get(self, key: str) -> bytes:
        """
        Reads the whole object into memory.
        A failure part-way through the read is an error, never partial data.
        """
        pass

    @abc.abstractmethod
    def put(self, key: str, data: bytes) -> None:
        """Stores (or unconditionally overwrites) an object."""
        pass

    @abc.abstractmethod
    def delete(self, key: str) -> None:
        """Deletes an object; raises `BlobNotFoundError` when it did not exist."""
        pass

    @abc.abstractmethod
    def list(self, prefix: str = "") -> list[str]:
        """Returns every key starting with `prefix`, draining all result pages."""
        pass
