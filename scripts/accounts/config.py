"""Configuration via environment variables with secret support.

Supports:
  - Environment variables and ``.env`` files (local dev)
  - GCP Secret Manager references (gcp-secret://name) for relay passwords
  - A service-account key file or Application Default Credentials
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Union

from dotenv import load_dotenv

from scripts.accounts.errors import ConfigError, CredentialError
from scripts.accounts.secrets import resolve_secret

DEFAULT_PROJECT_ID = "lifeguardian-app"
DEFAULT_KEY_FILE = "serviceAccountKey.json"
DEFAULT_WIPE_COLLECTIONS = ("users", "groups", "invite_codes")

CREDENTIAL_POLICIES = ("explicit", "prefer-explicit", "ambient")


@dataclass(frozen=True)
class ExplicitCredential:
    path: str


@dataclass(frozen=True)
class AmbientCredential:
    pass


CredentialSource = Union[ExplicitCredential, AmbientCredential]


@dataclass(frozen=True)
class FirebaseConfig:
    project_id: str
    storage_bucket: str


@dataclass(frozen=True)
class CleanupConfig:
    users_collection: str = "users"
    storage_prefix: str = "users/"
    wipe_collections: tuple[str, ...] = DEFAULT_WIPE_COLLECTIONS
    auth_page_size: int = 1000


@dataclass(frozen=True)
class MailConfig:
    server: str
    username: str
    password: str
    sender: str
    port: int = 587
    starttls: bool = True
    otp_expiry_minutes: int = 5
    otp_subject: str = "Your LifeGuardian verification code"


@dataclass(frozen=True)
class AccountsConfig:
    firebase: FirebaseConfig
    cleanup: CleanupConfig = field(default_factory=CleanupConfig)
    key_file: str = DEFAULT_KEY_FILE


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def _bool_env(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_config() -> AccountsConfig:
    """Load Firebase and cleanup configuration from the environment."""
    load_dotenv()

    project_id = os.environ.get("FIREBASE_PROJECT_ID", DEFAULT_PROJECT_ID)
    bucket = os.environ.get("FIREBASE_STORAGE_BUCKET") or f"{project_id}.firebasestorage.app"

    collections_raw = os.environ.get("WIPE_COLLECTIONS", "")
    collections = tuple(s.strip() for s in collections_raw.split(",") if s.strip())

    prefix = os.environ.get("USERS_STORAGE_PREFIX", "users/")
    if not prefix.endswith("/"):
        prefix += "/"

    cleanup = CleanupConfig(
        users_collection=os.environ.get("USERS_COLLECTION", "users"),
        storage_prefix=prefix,
        wipe_collections=collections or DEFAULT_WIPE_COLLECTIONS,
        auth_page_size=_int_env("AUTH_PAGE_SIZE", 1000),
    )
    if not 1 <= cleanup.auth_page_size <= 1000:
        raise ConfigError("AUTH_PAGE_SIZE must be between 1 and 1000")

    return AccountsConfig(
        firebase=FirebaseConfig(project_id=project_id, storage_bucket=bucket),
        cleanup=cleanup,
        key_file=os.environ.get("SERVICE_ACCOUNT_KEY_FILE", DEFAULT_KEY_FILE),
    )


def load_mail_config() -> MailConfig:
    """Load SMTP relay settings. The password may be a secret reference."""
    load_dotenv()

    server = os.environ.get("MAIL_SERVER", "")
    username = os.environ.get("MAIL_USERNAME", "")
    password_raw = os.environ.get("MAIL_PASSWORD", "")
    if not (server and username and password_raw):
        raise ConfigError("MAIL_SERVER, MAIL_USERNAME and MAIL_PASSWORD are required")

    return MailConfig(
        server=server,
        username=username,
        password=resolve_secret(password_raw),
        sender=os.environ.get("MAIL_FROM") or username,
        port=_int_env("MAIL_PORT", 587),
        starttls=_bool_env("MAIL_STARTTLS", True),
        otp_expiry_minutes=_int_env("OTP_EXPIRY_MINUTES", 5),
        otp_subject=os.environ.get("OTP_SUBJECT", MailConfig.otp_subject),
    )


def resolve_credential(policy: str, key_file: Optional[str] = None) -> CredentialSource:
    """Decide once, at startup, which credential the process will use.

    "explicit" requires the key file; "prefer-explicit" uses it when present
    and otherwise falls back to Application Default Credentials; "ambient"
    always uses ADC. A missing key file or missing ADC raises CredentialError.
    """
    if policy not in CREDENTIAL_POLICIES:
        raise ConfigError(f"Unknown credential policy {policy!r}")

    key_file = key_file or DEFAULT_KEY_FILE
    if policy != "ambient" and os.path.isfile(key_file):
        return ExplicitCredential(path=os.path.abspath(key_file))
    if policy == "explicit":
        raise CredentialError(
            f"No service account key found at {key_file}. "
            "Download one from Firebase Console -> Project Settings -> Service Accounts."
        )

    import google.auth
    from google.auth.exceptions import DefaultCredentialsError

    try:
        google.auth.default()
    except DefaultCredentialsError as exc:
        raise CredentialError(
            "No Application Default Credentials available. "
            "Run 'gcloud auth application-default login' or set GOOGLE_APPLICATION_CREDENTIALS."
        ) from exc
    return AmbientCredential()
