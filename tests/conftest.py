"""Shared fixtures: in-memory stand-ins for the three Firebase stores."""

import logging
from types import SimpleNamespace

import pytest

from scripts.accounts import config as config_module
from scripts.accounts.config import AccountsConfig, CleanupConfig, FirebaseConfig
from scripts.accounts.errors import InternalError, NotFoundError, WeakPasswordError
from scripts.accounts.stores.identity import MAX_BATCH_DELETE, BatchDeleteSummary, chunked


class FakeIdentityStore:
    """Auth users keyed by uid, with an email index and plaintext passwords."""

    def __init__(self):
        self.users = {}  # uid -> {"email": ..., "password": ...}
        self.broken_uids = set()
        self.lookups = []
        self.delete_calls = []

    def add(self, uid, email=None, password="initial-pass"):
        self.users[uid] = {"email": email, "password": password}

    def check_password(self, email, password):
        return any(u["email"] == email and u["password"] == password for u in self.users.values())

    def get_uid_by_email(self, email):
        for uid, user in self.users.items():
            if user["email"] == email:
                return uid
        raise NotFoundError(f"No user with email {email}")

    def exists(self, uid):
        self.lookups.append(uid)
        if uid in self.broken_uids:
            raise InternalError(f"User lookup failed for {uid}", "PERMISSION_DENIED")
        return uid in self.users

    def update_password(self, uid, password):
        if uid not in self.users:
            raise NotFoundError(f"No user with uid {uid}")
        if len(password) < 6:
            raise WeakPasswordError(
                "Password rejected: Password must be a string at least 6 characters long."
            )
        self.users[uid]["password"] = password

    def list_all_uids(self, page_size=1000):
        return list(self.users)

    def delete_uids(self, uids):
        summary = BatchDeleteSummary()
        for chunk in chunked(uids, MAX_BATCH_DELETE):
            self.delete_calls.append(len(chunk))
            summary.calls += 1
            for uid in chunk:
                self.users.pop(uid, None)
            summary.success_count += len(chunk)
        return summary


class FakeDocumentStore:
    """Collections of documents; ``nested`` tracks sub-collections per document."""

    def __init__(self):
        self.collections = {}  # name -> {doc_id: fields}
        self.nested = {}  # (collection, doc_id) -> [sub-collection names]
        self.recursive_broken = False
        self.fail_collections = set()

    def add(self, collection, doc_id, fields=None, subcollections=()):
        self.collections.setdefault(collection, {})[doc_id] = dict(fields or {})
        if subcollections:
            self.nested[(collection, doc_id)] = list(subcollections)

    def list_ids(self, collection):
        return list(self.collections.get(collection, {}))

    def find_id_by_field(self, collection, field_name, value):
        for doc_id, fields in self.collections.get(collection, {}).items():
            if fields.get(field_name) == value:
                return doc_id
        return None

    def is_empty(self, collection):
        if collection in self.fail_collections:
            raise RuntimeError(f"listing {collection} failed")
        return not self.collections.get(collection)

    def delete_collection(self, collection):
        docs = self.collections.pop(collection, {})
        for doc_id in docs:
            self.nested.pop((collection, doc_id), None)
        return len(docs)

    def delete_document_tree(self, collection, doc_id):
        self.collections.get(collection, {}).pop(doc_id, None)
        if self.recursive_broken:
            return False
        self.nested.pop((collection, doc_id), None)
        return True


class FakeBlobStore:
    def __init__(self):
        self.names = set()
        self.fail = False

    def add(self, *names):
        self.names.update(names)

    def list_names(self, prefix):
        return sorted(n for n in self.names if n.startswith(prefix))

    def delete_prefix(self, prefix):
        if self.fail:
            raise RuntimeError("storage unavailable")
        doomed = self.list_names(prefix)
        self.names.difference_update(doomed)
        return len(doomed)

    def delete_names(self, names):
        if self.fail:
            raise RuntimeError("storage unavailable")
        present = self.names.intersection(names)
        self.names.difference_update(present)
        return len(present)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep stray .env files and configure_logging() from leaking between tests."""
    monkeypatch.setattr(config_module, "load_dotenv", lambda *a, **k: None)
    yield
    root = logging.getLogger("accounts")
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)


@pytest.fixture
def identity():
    return FakeIdentityStore()


@pytest.fixture
def documents():
    return FakeDocumentStore()


@pytest.fixture
def blobs():
    return FakeBlobStore()


@pytest.fixture
def accounts_config():
    return AccountsConfig(
        firebase=FirebaseConfig(project_id="test-project", storage_bucket="test-project.firebasestorage.app"),
        cleanup=CleanupConfig(),
    )


@pytest.fixture
def backend(identity, documents, blobs, accounts_config):
    return SimpleNamespace(
        identity=identity,
        documents=documents,
        blobs=blobs,
        config=accounts_config,
        close=lambda: None,
    )
