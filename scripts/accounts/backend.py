"""Process-wide Firebase handle: one app, three store clients."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import firebase_admin
from firebase_admin import credentials, firestore, storage

from scripts.accounts.config import AccountsConfig, CredentialSource, ExplicitCredential
from scripts.accounts.errors import CredentialError
from scripts.accounts.stores.blobs import BlobStore
from scripts.accounts.stores.documents import DocumentStore
from scripts.accounts.stores.identity import IdentityStore

logger = logging.getLogger("accounts.backend")


@dataclass
class Backend:
    """Constructed once at startup and passed into every procedure."""

    identity: IdentityStore
    documents: DocumentStore
    blobs: BlobStore
    config: AccountsConfig
    app: object = None

    def close(self) -> None:
        if self.app is not None:
            firebase_admin.delete_app(self.app)
            self.app = None


def init_backend(config: AccountsConfig, credential: CredentialSource) -> Backend:
    """Initialise the Firebase app with an already-resolved credential.

    An unreadable or malformed key file, or an app that cannot be
    initialised, raises CredentialError.
    """
    try:
        if isinstance(credential, ExplicitCredential):
            logger.info("Using service account key %s", credential.path)
            cred = credentials.Certificate(credential.path)
        else:
            logger.info("Using Application Default Credentials")
            cred = credentials.ApplicationDefault()

        app = firebase_admin.initialize_app(
            cred,
            options={
                "projectId": config.firebase.project_id,
                "storageBucket": config.firebase.storage_bucket,
            },
        )
    except (ValueError, OSError) as exc:
        raise CredentialError(f"Cannot initialise Firebase: {exc}") from exc
    return Backend(
        identity=IdentityStore(app),
        documents=DocumentStore(firestore.client(app)),
        blobs=BlobStore(storage.bucket(app=app)),
        config=config,
        app=app,
    )
