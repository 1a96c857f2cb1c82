"""CLI entry points: reset-password, cleanup-user, wipe-all, wipe-orphans.

Each command is also installed as a standalone script (reset_password,
cleanup_user_data, wipe_all_users, wipe_orphaned_data). Commands return a
process exit code and never let an exception escape.
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import Callable, Optional, Sequence

from scripts.accounts.backend import Backend, init_backend
from scripts.accounts.config import load_config, resolve_credential
from scripts.accounts.errors import AccountsError, ConfigError
from scripts.accounts.logging_config import configure_logging
from scripts.accounts.procedures.bulk_wipe import BulkWipe
from scripts.accounts.procedures.cleanup_user import CleanupUser
from scripts.accounts.procedures.password_reset import PasswordReset
from scripts.accounts.procedures.reconcile import Reconcile

logger = logging.getLogger("accounts.cli")


def _open_backend(policy: str) -> Backend:
    """Load config and resolve credentials; raises ConfigError on failure."""
    config = load_config()
    credential = resolve_credential(policy, config.key_file)
    return init_backend(config, credential)


def cmd_reset_password(args: argparse.Namespace) -> int:
    if not args.email or not args.new_password:
        logger.error("Usage: reset_password <email> <newPassword>")
        return 1

    try:
        backend = _open_backend("ambient")
    except ConfigError as exc:
        logger.error("Error initializing app: %s", exc)
        return 1

    try:
        PasswordReset(backend.identity, args.email, args.new_password).run_with_tracking()
    except AccountsError as exc:
        logger.error("Error updating password: %s", exc.message)
        return 1
    except Exception as exc:
        logger.error("Error updating password: %s", exc, exc_info=True)
        return 1
    finally:
        backend.close()

    logger.info("Password updated successfully!")
    return 0


def cmd_cleanup_user(args: argparse.Namespace) -> int:
    if not args.email_or_uid:
        logger.error("Usage: cleanup_user_data <email_or_uid>")
        return 1

    try:
        backend = _open_backend("ambient")
    except ConfigError as exc:
        logger.error("Error initializing app: %s", exc)
        return 1

    try:
        report = CleanupUser(backend, args.email_or_uid).run_with_tracking()
    except Exception as exc:
        logger.error("Cleanup failed: %s", exc, exc_info=True)
        return 1
    finally:
        backend.close()

    if report is None:
        return 1
    for err in report.errors:
        logger.warning("Cleanup sub-step failed: %s", err, extra={"uid": report.uid})
    return 0


def cmd_wipe_all(args: argparse.Namespace) -> int:
    try:
        backend = _open_backend("explicit")
    except ConfigError as exc:
        logger.error("Cannot wipe data safely: %s", exc)
        return 1

    try:
        report = BulkWipe(backend).run_with_tracking()
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=True)
        return 1
    finally:
        backend.close()

    logger.info(
        "Wipe summary: users deleted=%d failed=%d, collections=%s, blobs deleted=%d",
        report.users_deleted,
        report.users_failed,
        report.collections,
        report.blobs_deleted,
    )
    return 0


def cmd_wipe_orphans(args: argparse.Namespace) -> int:
    try:
        backend = _open_backend("prefer-explicit")
    except ConfigError as exc:
        logger.error("Initialization error: %s", exc)
        return 1

    try:
        report = Reconcile(backend).run_with_tracking()
    except Exception as exc:
        logger.error("Orphan scan aborted: %s", exc, exc_info=True)
        return 1
    finally:
        backend.close()

    logger.info(
        "Orphans removed: %d (firestore=%d, storage=%d)",
        report.total,
        len(report.document_orphans),
        len(report.blob_orphans),
    )
    return 0


def _add_reset_password_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("email", nargs="?", help="Email of the account to update")
    parser.add_argument("new_password", nargs="?", metavar="newPassword", help="Replacement password")
    parser.set_defaults(func=cmd_reset_password)


def _add_cleanup_user_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("email_or_uid", nargs="?", help="Email address or Firebase UID")
    parser.set_defaults(func=cmd_cleanup_user)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="accounts",
        description="LifeGuardian account maintenance tools",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    _add_reset_password_args(
        subparsers.add_parser("reset-password", help="Set a new password for an account")
    )
    _add_cleanup_user_args(
        subparsers.add_parser("cleanup-user", help="Delete one user's Firestore and Storage data")
    )

    wipe_parser = subparsers.add_parser(
        "wipe-all", help="Delete ALL users, collections and storage (irreversible)"
    )
    wipe_parser.set_defaults(func=cmd_wipe_all)

    orphans_parser = subparsers.add_parser(
        "wipe-orphans", help="Delete Firestore/Storage data whose Auth user is gone"
    )
    orphans_parser.set_defaults(func=cmd_wipe_orphans)

    return parser


def _run(parser: argparse.ArgumentParser, argv: Optional[Sequence[str]]) -> int:
    configure_logging(os.environ.get("LOG_LEVEL", "INFO"), os.environ.get("LOG_FORMAT", "text"))
    args = parser.parse_args(argv)
    return args.func(args)


def _script(prog: str, description: str, add_args: Optional[Callable] = None, func=None):
    def entry(argv: Optional[Sequence[str]] = None) -> int:
        parser = argparse.ArgumentParser(prog=prog, description=description)
        if add_args is not None:
            add_args(parser)
        else:
            parser.set_defaults(func=func)
        return _run(parser, argv)

    entry.__name__ = prog
    return entry


reset_password = _script("reset_password", "Set a new password for an account", _add_reset_password_args)
cleanup_user_data = _script("cleanup_user_data", "Delete one user's data", _add_cleanup_user_args)
wipe_all_users = _script("wipe_all_users", "Delete ALL users and data", func=cmd_wipe_all)
wipe_orphaned_data = _script("wipe_orphaned_data", "Delete orphaned user data", func=cmd_wipe_orphans)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    return _run(build_parser(), argv)


if __name__ == "__main__":
    raise SystemExit(main())
