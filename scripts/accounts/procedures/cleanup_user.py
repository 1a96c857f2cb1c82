"""Single-user cleanup: remove one user's Firestore tree and Storage files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from scripts.accounts.backend import Backend
from scripts.accounts.errors import AccountsError, InvalidArgumentError
from scripts.accounts.procedures.base import BaseProcedure

logger = logging.getLogger("accounts.cleanup_user")


@dataclass
class CleanupReport:
    uid: str
    documents_deleted: bool = False
    blobs_deleted: int = 0
    errors: list[str] = field(default_factory=list)


class CleanupUser(BaseProcedure):
    PROCEDURE_NAME = "cleanup_user"

    def __init__(self, backend: Backend, email_or_uid: str) -> None:
        self.identity = backend.identity
        self.documents = backend.documents
        self.blobs = backend.blobs
        self.collection = backend.config.cleanup.users_collection
        self.prefix = backend.config.cleanup.storage_prefix
        self.email_or_uid = (email_or_uid or "").strip()

    def resolve_uid(self) -> Optional[str]:
        """Map the input to a uid: Auth first, then the users collection's email field."""
        if "@" not in self.email_or_uid:
            logger.info("Using provided UID: %s", self.email_or_uid)
            return self.email_or_uid

        email = self.email_or_uid
        logger.info("Searching for user with email: %s", email)
        try:
            uid = self.identity.get_uid_by_email(email)
            logger.info("Found UID from Auth: %s", uid, extra={"uid": uid})
            return uid
        except AccountsError as exc:
            logger.info("User not found in Auth (%s), checking Firestore '%s'", exc.message, self.collection)

        uid = self.documents.find_id_by_field(self.collection, "email", email)
        if uid:
            logger.info("Found UID from Firestore: %s", uid, extra={"uid": uid})
        return uid

    def run(self) -> Optional[CleanupReport]:
        if not self.email_or_uid:
            raise InvalidArgumentError("An email or UID is required.")

        uid = self.resolve_uid()
        if not uid:
            logger.error("Could not find any user matching %s in Auth or Firestore.", self.email_or_uid)
            return None

        logger.info("Starting cleanup", extra={"uid": uid})
        report = CleanupReport(uid=uid)

        try:
            self.documents.delete_document_tree(self.collection, uid)
            report.documents_deleted = True
            logger.info("Firestore data deleted", extra={"uid": uid})
        except Exception as exc:
            logger.error("Error deleting Firestore data: %s", exc, extra={"uid": uid})
            report.errors.append(f"firestore: {exc}")

        uid_prefix = f"{self.prefix}{uid}/"
        try:
            report.blobs_deleted = self.blobs.delete_prefix(uid_prefix)
        except Exception as exc:
            logger.error("Error deleting Storage files: %s", exc, extra={"uid": uid, "prefix": uid_prefix})
            report.errors.append(f"storage: {exc}")

        logger.info("Cleanup complete", extra={"uid": uid})
        return report

