"""Document store: Firestore scans, lookups and recursive deletes."""

from __future__ import annotations

import logging
from typing import Optional

from google.cloud.firestore_v1.base_query import FieldFilter

logger = logging.getLogger("accounts.stores.documents")


class DocumentStore:
    """Wraps a ``google.cloud.firestore.Client``."""

    def __init__(self, client) -> None:
        self._client = client

    def list_ids(self, collection: str) -> list[str]:
        """Full collection scan; returns every top-level document id."""
        return [doc.id for doc in self._client.collection(collection).stream()]

    def find_id_by_field(self, collection: str, field_name: str, value: str) -> Optional[str]:
        query = (
            self._client.collection(collection)
            .where(filter=FieldFilter(field_name, "==", value))
            .limit(1)
        )
        docs = query.get()
        return docs[0].id if docs else None

    def is_empty(self, collection: str) -> bool:
        return len(self._client.collection(collection).limit(1).get()) == 0

    def delete_collection(self, collection: str) -> int:
        """Recursively delete a whole collection; returns documents deleted."""
        deleted = self._client.recursive_delete(self._client.collection(collection))
        logger.info(
            "Deleted collection %s (%d documents)", collection, deleted,
            extra={"collection": collection, "count": deleted},
        )
        return deleted

    def delete_document_tree(self, collection: str, doc_id: str) -> bool:
        """Delete a document and everything nested under it.

        Falls back to deleting only the top-level document when the
        recursive delete fails; sub-collections may then survive. Returns
        True if the recursive delete succeeded.
        """
        ref = self._client.collection(collection).document(doc_id)
        try:
            self._client.recursive_delete(ref)
            return True
        except Exception as exc:
            logger.warning(
                "recursive_delete failed for %s/%s, deleting top-level document only: %s",
                collection, doc_id, exc,
                extra={"collection": collection, "uid": doc_id},
            )
        ref.delete()
        return False
