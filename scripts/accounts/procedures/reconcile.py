"""Orphan reconciliation: remove Firestore and Storage data with no Auth user.

A uid found as a ``users`` document id or as the second segment of a
``users/{uid}/...`` object path is orphaned when Firebase Auth reports
user-not-found for it. Any other lookup error aborts the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from scripts.accounts.backend import Backend
from scripts.accounts.procedures.base import BaseProcedure

logger = logging.getLogger("accounts.reconcile")


@dataclass
class ReconcileReport:
    document_orphans: list[str] = field(default_factory=list)
    blob_orphans: list[str] = field(default_factory=list)
    partial_document_deletes: list[str] = field(default_factory=list)
    blobs_deleted: int = 0

    @property
    def total(self) -> int:
        return len(self.document_orphans) + len(self.blob_orphans)

    @property
    def clean(self) -> bool:
        return self.total == 0


def uid_from_path(path: str, prefix: str) -> Optional[str]:
    """Extract the uid segment of ``{prefix}{uid}/...``; None if absent."""
    if not path.startswith(prefix):
        return None
    uid = path[len(prefix):].split("/", 1)[0]
    return uid or None


class Reconcile(BaseProcedure):
    PROCEDURE_NAME = "reconcile"

    def __init__(self, backend: Backend) -> None:
        self.identity = backend.identity
        self.documents = backend.documents
        self.blobs = backend.blobs
        self.collection = backend.config.cleanup.users_collection
        self.prefix = backend.config.cleanup.storage_prefix
        self._verdicts: dict[str, bool] = {}

    def run(self) -> ReconcileReport:
        logger.info("Scanning for orphaned data...")
        self._verdicts = {}
        report = ReconcileReport()
        self._scan_documents(report)
        self._scan_blobs(report)

        if report.clean:
            logger.info("System clean, no orphaned data found.", extra={"count": 0})
        else:
            logger.info(
                "Cleanup complete: %d orphans removed", report.total,
                extra={"count": report.total},
            )
        return report

    def _exists(self, uid: str) -> bool:
        if uid not in self._verdicts:
            self._verdicts[uid] = self.identity.exists(uid)
        return self._verdicts[uid]

    def _scan_documents(self, report: ReconcileReport) -> None:
        logger.info("Checking Firestore '%s'...", self.collection, extra={"collection": self.collection})
        doc_ids = self.documents.list_ids(self.collection)
        if not doc_ids:
            logger.info("Firestore '%s' collection is empty", self.collection)

        for uid in doc_ids:
            if self._exists(uid):
                continue
            logger.info("Found orphan in Firestore, deleting", extra={"uid": uid})
            if not self.documents.delete_document_tree(self.collection, uid):
                report.partial_document_deletes.append(uid)
            report.document_orphans.append(uid)

    def _scan_blobs(self, report: ReconcileReport) -> None:
        logger.info("Checking Storage '%s'...", self.prefix, extra={"prefix": self.prefix})
        names = self.blobs.list_names(self.prefix)
        if not names:
            logger.info("Storage '%s' is empty", self.prefix)
            return

        # dict keeps first-seen order; values are objects stored at {prefix}{uid} itself
        uids: dict[str, list[str]] = {}
        for name in names:
            uid = uid_from_path(name, self.prefix)
            if uid:
                bare = uids.setdefault(uid, [])
                if name == f"{self.prefix}{uid}":
                    bare.append(name)

        for uid, bare in uids.items():
            if self._exists(uid):
                continue
            uid_prefix = f"{self.prefix}{uid}/"
            logger.info("Found orphaned files in Storage, deleting", extra={"uid": uid, "prefix": uid_prefix})
            removed = self.blobs.delete_prefix(uid_prefix) + self.blobs.delete_names(bare)
            if removed:
                report.blobs_deleted += removed
                report.blob_orphans.append(uid)
