"""Total wipe: every Auth user, the configured collections, the users/ prefix.

Irreversible. Each stage is isolated so a failing stage does not stop the
ones after it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from scripts.accounts.backend import Backend
from scripts.accounts.procedures.base import BaseProcedure

logger = logging.getLogger("accounts.bulk_wipe")

COLLECTION_DELETED = "deleted"
COLLECTION_EMPTY = "empty"


@dataclass
class WipeReport:
    users_found: int = 0
    batch_calls: int = 0
    users_deleted: int = 0
    users_failed: int = 0
    user_errors: list[tuple[str, str]] = field(default_factory=list)
    collections: dict[str, str] = field(default_factory=dict)
    blobs_deleted: int = 0
    stage_errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.stage_errors and self.users_failed == 0


class BulkWipe(BaseProcedure):
    PROCEDURE_NAME = "bulk_wipe"

    def __init__(self, backend: Backend) -> None:
        self.identity = backend.identity
        self.documents = backend.documents
        self.blobs = backend.blobs
        self.cleanup = backend.config.cleanup

    def run(self) -> WipeReport:
        logger.warning("STARTING TOTAL WIPE")
        report = WipeReport()
        self._stage("auth", self._wipe_auth, report)
        self._stage("collections", self._wipe_collections, report)
        self._stage("storage", self._wipe_storage, report)
        if report.stage_errors:
            logger.warning("Wipe finished with failed stages: %s", sorted(report.stage_errors))
        else:
            logger.info("Wipe complete, system should now have 0 users.")
        return report

    def _stage(self, name: str, fn: Callable[[WipeReport], None], report: WipeReport) -> None:
        try:
            fn(report)
        except Exception as exc:
            logger.error("Wipe stage %s failed: %s", name, exc, exc_info=True, extra={"stage": name})
            report.stage_errors[name] = str(exc)

    def _wipe_auth(self, report: WipeReport) -> None:
        logger.info("Scanning Auth users", extra={"stage": "auth"})
        uids = self.identity.list_all_uids(self.cleanup.auth_page_size)
        report.users_found = len(uids)
        if not uids:
            logger.info("No users found in Auth", extra={"stage": "auth"})
            return

        logger.info("Found %d users in Auth. Deleting...", len(uids), extra={"stage": "auth"})
        summary = self.identity.delete_uids(uids)
        report.batch_calls = summary.calls
        report.users_deleted = summary.success_count
        report.users_failed = summary.failure_count
        report.user_errors = summary.errors

    def _wipe_collections(self, report: WipeReport) -> None:
        for name in self.cleanup.wipe_collections:
            if self.documents.is_empty(name):
                logger.info("'%s' is already empty", name, extra={"stage": "collections", "collection": name})
                report.collections[name] = COLLECTION_EMPTY
                continue
            logger.info("Deleting '%s' collection...", name, extra={"stage": "collections", "collection": name})
            self.documents.delete_collection(name)
            report.collections[name] = COLLECTION_DELETED

    def _wipe_storage(self, report: WipeReport) -> None:
        prefix = self.cleanup.storage_prefix
        logger.info("Deleting Storage '%s'", prefix, extra={"stage": "storage", "prefix": prefix})
        report.blobs_deleted = self.blobs.delete_prefix(prefix)
