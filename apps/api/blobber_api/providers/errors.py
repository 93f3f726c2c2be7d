from __future__ import annotations


class BlobStoreError(Exception):
    """Base class for storage-layer errors."""


class BlobNotFoundError(BlobStoreError):
    """
    The shared not-found error.

    Every adapter raises this (and only this) when the requested object is absent,
    whatever the provider's own signal looks like.
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"blob not found: {key}")
        self.key = key


class BlobOperationError(BlobStoreError):
    def __init__(self, operation: str, key: str, message: str) -> None:
        super().__init__(f"{operation} failed for {key!r}: {message}")
        self.operation = operation
        self.key = key


class NoValidCredentialsError(BlobStoreError):
    def __init__(self, message: str = "no valid credentials provided") -> None:
        super().__init__(message)


class NoValidBucketError(BlobStoreError):
    def __init__(self, message: str = "no valid bucket provided") -> None:
        super().__init__(message)


class NoValidBlobClientError(BlobStoreError):
    def __init__(self, message: str = "no valid blob client provided") -> None:
        super().__init__(message)


class BucketNotFoundError(BlobStoreError):
    def __init__(self, bucket: str) -> None:
        super().__init__(f"bucket not found: {bucket}")
        self.bucket = bucket


class UnsupportedProviderError(BlobStoreError):
    def __init__(self, provider: str) -> None:
        super().__init__(f"unsupported blob provider: {provider!r}")
        self.provider = provider


class ConfigLoadError(Exception):
    """Configuration could not be read or parsed."""
