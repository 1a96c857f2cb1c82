"""Firebase Cloud Functions (2nd gen) entry point for the callable endpoints.

Deployed from a functions directory whose main.py re-exports these names:

  from scripts.accounts.entrypoints.cloud_functions import updateUserPassword, sendOTPEmail
"""

from __future__ import annotations

import functools
import logging
import os

from firebase_functions import https_fn

from scripts.accounts import callables
from scripts.accounts.backend import Backend, init_backend
from scripts.accounts.config import load_config, load_mail_config, resolve_credential
from scripts.accounts.errors import CallableError
from scripts.accounts.logging_config import configure_logging
from scripts.accounts.mailer import Mailer

logger = logging.getLogger("accounts.cloud_functions")

configure_logging(os.environ.get("LOG_LEVEL", "INFO"))


@functools.lru_cache(maxsize=1)
def _backend() -> Backend:
    config = load_config()
    return init_backend(config, resolve_credential("ambient"))


@functools.lru_cache(maxsize=1)
def _mailer() -> Mailer:
    return Mailer(load_mail_config())


def _to_https_error(exc: CallableError) -> https_fn.HttpsError:
    return https_fn.HttpsError(
        code=https_fn.FunctionsErrorCode(exc.code),
        message=exc.message,
        details=exc.details,
    )


@https_fn.on_call()
def updateUserPassword(req: https_fn.CallableRequest) -> dict:
    try:
        return callables.update_user_password(req.data, _backend())
    except CallableError as exc:
        raise _to_https_error(exc)


@https_fn.on_call()
def sendOTPEmail(req: https_fn.CallableRequest) -> dict:
    try:
        return callables.send_otp_email(req.data, _mailer())
    except CallableError as exc:
        raise _to_https_error(exc)
