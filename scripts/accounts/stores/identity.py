"""Identity store: Firebase Auth user lookup, password update and deletion."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from firebase_admin import auth
from firebase_admin import exceptions as fb_exceptions

from scripts.accounts.errors import (
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    WeakPasswordError,
)

logger = logging.getLogger("accounts.stores.identity")

# Firebase Auth rejects delete_users() calls with more uids than this.
MAX_BATCH_DELETE = 1000


@dataclass
class BatchDeleteSummary:
    calls: int = 0
    success_count: int = 0
    failure_count: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)  # (uid, reason)


def chunked(items: list, size: int) -> list[list]:
    """Split items into consecutive chunks of at most ``size``."""
    return [items[i : i + size] for i in range(0, len(items), size)]


class IdentityStore:
    """Wraps ``firebase_admin.auth`` for a single initialised app."""

    def __init__(self, app=None) -> None:
        self._app = app

    def get_uid_by_email(self, email: str) -> str:
        try:
            return auth.get_user_by_email(email, app=self._app).uid
        except auth.UserNotFoundError as exc:
            raise NotFoundError(f"No user with email {email}", str(exc))
        except ValueError as exc:
            raise InvalidArgumentError(f"Invalid email: {email}", str(exc))
        except fb_exceptions.FirebaseError as exc:
            raise InternalError("User lookup failed", str(exc))

    def exists(self, uid: str) -> bool:
        """True when Auth has a record for uid; only user-not-found means False."""
        try:
            auth.get_user(uid, app=self._app)
            return True
        except auth.UserNotFoundError:
            return False
        except (ValueError, fb_exceptions.FirebaseError) as exc:
            raise InternalError(f"User lookup failed for {uid}", str(exc))

    def update_password(self, uid: str, password: str) -> None:
        if not isinstance(password, str):
            raise InvalidArgumentError("Password must be a string")
        try:
            auth.update_user(uid, password=password, app=self._app)
        except auth.UserNotFoundError as exc:
            raise NotFoundError(f"No user with uid {uid}", str(exc))
        except ValueError as exc:
            # The SDK validates length client-side before any request is made.
            if "characters long" in str(exc):
                raise WeakPasswordError(f"Password rejected: {exc}", str(exc))
            raise InvalidArgumentError(f"Invalid password update for {uid}", str(exc))
        except fb_exceptions.InvalidArgumentError as exc:
            if "PASSWORD" in str(exc).upper():
                raise WeakPasswordError(f"Password rejected: {exc}", str(exc))
            raise InvalidArgumentError("Password update rejected", str(exc))
        except fb_exceptions.FirebaseError as exc:
            raise InternalError("Password update failed", str(exc))

    def list_all_uids(self, page_size: int = 1000) -> list[str]:
        """Collect every uid by following page tokens until none remain."""
        uids: list[str] = []
        page_token = None
        while True:
            page = auth.list_users(page_token=page_token, max_results=page_size, app=self._app)
            uids.extend(user.uid for user in page.users)
            page_token = page.next_page_token
            if not page_token:
                break
        logger.info("Listed %d auth users", len(uids), extra={"count": len(uids)})
        return uids

    def delete_uids(self, uids: list[str]) -> BatchDeleteSummary:
        """Delete uids in chunks of MAX_BATCH_DELETE.

        Per-uid failures are collected from each result; a chunk whose call
        fails outright is counted as failed and the next chunk still runs.
        """
        summary = BatchDeleteSummary()
        for chunk in chunked(uids, MAX_BATCH_DELETE):
            summary.calls += 1
            try:
                result = auth.delete_users(chunk, app=self._app)
            except fb_exceptions.FirebaseError as exc:
                logger.error("Batch delete of %d users failed: %s", len(chunk), exc)
                summary.failure_count += len(chunk)
                summary.errors.extend((uid, str(exc)) for uid in chunk)
                continue

            summary.success_count += result.success_count
            summary.failure_count += result.failure_count
            logger.info(
                "Deleted batch: %d success, %d failed",
                result.success_count,
                result.failure_count,
                extra={"count": result.success_count},
            )
            for err in result.errors:
                uid = chunk[err.index]
                logger.error("Failed to delete user %s: %s", uid, err.reason, extra={"uid": uid})
                summary.errors.append((uid, err.reason))
        return summary
