"""Blob store: Cloud Storage prefix listing and deletion."""

from __future__ import annotations

import logging

logger = logging.getLogger("accounts.stores.blobs")


class BlobStore:
    """Wraps a ``google.cloud.storage.Bucket``."""

    def __init__(self, bucket) -> None:
        self._bucket = bucket

    @property
    def name(self) -> str:
        return self._bucket.name

    def list_names(self, prefix: str) -> list[str]:
        return [blob.name for blob in self._bucket.list_blobs(prefix=prefix)]

    def delete_prefix(self, prefix: str) -> int:
        """Delete every object under prefix; returns the number deleted."""
        blobs = list(self._bucket.list_blobs(prefix=prefix))
        if blobs:
            self._bucket.delete_blobs(blobs)
        logger.info(
            "Deleted %d objects under %s", len(blobs), prefix,
            extra={"prefix": prefix, "count": len(blobs)},
        )
        return len(blobs)

    def delete_names(self, names: list[str]) -> int:
        """Delete exactly the named objects; returns the number deleted."""
        if not names:
            return 0
        self._bucket.delete_blobs([self._bucket.blob(name) for name in names])
        return len(names)
