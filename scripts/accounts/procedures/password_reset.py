"""Password reset: look up one Auth user by email and replace its password."""

from __future__ import annotations

import logging

from scripts.accounts.errors import InvalidArgumentError
from scripts.accounts.procedures.base import BaseProcedure
from scripts.accounts.stores.identity import IdentityStore

logger = logging.getLogger("accounts.password_reset")


class PasswordReset(BaseProcedure):
    PROCEDURE_NAME = "password_reset"

    def __init__(self, identity: IdentityStore, email: str, new_password: str) -> None:
        self.identity = identity
        self.email = email.strip() if isinstance(email, str) else ""
        self.new_password = new_password if isinstance(new_password, str) else ""

    def run(self) -> str:
        """Returns the uid whose password was replaced.

        Raises InvalidArgumentError, NotFoundError, WeakPasswordError or
        InternalError; a single attempt, no retries.
        """
        if not self.email or not self.new_password:
            raise InvalidArgumentError("Both email and newPassword are required.")

        logger.info("Looking up user: %s", self.email)
        uid = self.identity.get_uid_by_email(self.email)
        logger.info("Found user %s. Updating password...", uid, extra={"uid": uid})
        self.identity.update_password(uid, self.new_password)
        logger.info("Password updated", extra={"uid": uid})
        return uid
