"""Callable RPC handlers, independent of the hosting runtime.

Each handler takes the request payload dict and returns the response dict,
or raises CallableError with one of: invalid-argument, not-found, internal.
"""

from __future__ import annotations

import logging
from typing import Any

from scripts.accounts.errors import AccountsError, CallableError, WeakPasswordError
from scripts.accounts.mailer import Mailer
from scripts.accounts.procedures.otp_email import OtpEmail
from scripts.accounts.procedures.password_reset import PasswordReset

logger = logging.getLogger("accounts.callables")


def _as_callable_error(exc: AccountsError, message: str) -> CallableError:
    if exc.code == "internal":
        return CallableError("internal", message, exc.detail or exc.message)
    return CallableError(exc.code, exc.message, exc.detail)


def update_user_password(data: dict[str, Any], backend) -> dict[str, Any]:
    """updateUserPassword(email, newPassword) -> {success, message}."""
    data = data if isinstance(data, dict) else {}
    email = data.get("email")
    new_password = data.get("newPassword")
    if (
        not isinstance(email, str)
        or not isinstance(new_password, str)
        or not email
        or not new_password
    ):
        raise CallableError(
            "invalid-argument",
            "The function must be called with email and newPassword.",
        )

    try:
        PasswordReset(backend.identity, email, new_password).run_with_tracking()
    except WeakPasswordError as exc:
        raise CallableError("invalid-argument", "Password does not meet the strength policy.", exc.detail)
    except AccountsError as exc:
        raise _as_callable_error(exc, "Error updating password")
    except Exception as exc:
        logger.error("Error updating password: %s", exc, exc_info=True)
        raise CallableError("internal", "Error updating password", str(exc))

    return {"success": True, "message": "Password updated successfully"}


def send_otp_email(data: dict[str, Any], mailer: Mailer) -> dict[str, Any]:
    """sendOTPEmail(email, otp) -> {success}."""
    data = data if isinstance(data, dict) else {}
    email = data.get("email")
    otp = data.get("otp")
    if (
        not isinstance(email, str)
        or not email
        or isinstance(otp, bool)
        or not isinstance(otp, (str, int))
        or str(otp) == ""
    ):
        raise CallableError("invalid-argument", "The function must be called with email and otp.")

    try:
        OtpEmail(mailer, email, otp).run_with_tracking()
    except AccountsError as exc:
        raise _as_callable_error(exc, "Error sending OTP email")
    except Exception as exc:
        logger.error("Error sending OTP email: %s", exc, exc_info=True)
        raise CallableError("internal", "Error sending OTP email", str(exc))

    return {"success": True}
