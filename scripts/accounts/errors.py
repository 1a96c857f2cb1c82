"""Error taxonomy shared by stores, procedures, callables and scripts."""

from __future__ import annotations

from typing import Optional


class AccountsError(Exception):
    """Base class. ``code`` is the stable kind surfaced to callers."""

    code: str = "internal"

    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class InvalidArgumentError(AccountsError):
    code = "invalid-argument"


class WeakPasswordError(InvalidArgumentError):
    """The identity backend rejected the password under its strength policy."""


class NotFoundError(AccountsError):
    code = "not-found"


class InternalError(AccountsError):
    code = "internal"


class ConfigError(Exception):
    """Invalid or missing configuration, raised at startup."""


class CredentialError(ConfigError):
    """No usable credential could be resolved."""


class CallableError(Exception):
    """Structured error returned to callable RPC clients."""

    def __init__(self, code: str, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body
