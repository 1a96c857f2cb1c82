import pytest

from scripts.accounts.errors import InternalError
from scripts.accounts.procedures.reconcile import Reconcile, uid_from_path


def test_uid_from_path():
    assert uid_from_path("users/abc/photo.jpg", "users/") == "abc"
    assert uid_from_path("users/abc", "users/") == "abc"
    assert uid_from_path("users//x", "users/") is None
    assert uid_from_path("other/abc/x", "users/") is None


def test_clean_system_reports_zero(backend, identity, documents, blobs):
    identity.add("alive", "a@x.com")
    documents.add("users", "alive")
    blobs.add("users/alive/avatar.png")

    report = Reconcile(backend).run()

    assert report.clean
    assert report.total == 0
    assert documents.list_ids("users") == ["alive"]
    assert blobs.names == {"users/alive/avatar.png"}


def test_orphaned_document_and_subcollections_removed(backend, identity, documents):
    identity.add("alive")
    documents.add("users", "alive")
    documents.add("users", "ghost", {"email": "g@x.com"}, subcollections=["contacts", "alerts"])

    report = Reconcile(backend).run()

    assert report.document_orphans == ["ghost"]
    assert documents.list_ids("users") == ["alive"]
    assert ("users", "ghost") not in documents.nested


def test_fallback_delete_is_reported(backend, documents):
    documents.add("users", "ghost", subcollections=["contacts"])
    documents.recursive_broken = True

    report = Reconcile(backend).run()

    assert report.document_orphans == ["ghost"]
    assert report.partial_document_deletes == ["ghost"]
    assert documents.list_ids("users") == []


def test_orphaned_blobs_removed_and_nothing_else(backend, identity, blobs):
    identity.add("V")
    blobs.add("users/U/a.txt", "users/U/b.txt", "users/V/c.txt", "public/U/d.txt")

    report = Reconcile(backend).run()

    assert report.blob_orphans == ["U"]
    assert report.blobs_deleted == 2
    assert blobs.names == {"users/V/c.txt", "public/U/d.txt"}


def test_uid_checked_once_across_stores(backend, identity, documents, blobs):
    documents.add("users", "ghost")
    blobs.add("users/ghost/a.txt", "users/ghost/b.txt")

    report = Reconcile(backend).run()

    assert identity.lookups == ["ghost"]
    assert report.document_orphans == ["ghost"]
    assert report.blob_orphans == ["ghost"]
    assert report.total == 2
    assert blobs.names == set()


def test_second_run_is_noop(backend, identity, documents, blobs):
    identity.add("alive")
    documents.add("users", "alive")
    documents.add("users", "ghost", subcollections=["alerts"])
    blobs.add("users/ghost/a.txt", "users/alive/b.txt")

    first = Reconcile(backend).run()
    second = Reconcile(backend).run()

    assert first.total == 2
    assert second.total == 0
    assert second.clean


def test_lookup_error_aborts_run(backend, identity, documents, blobs):
    documents.add("users", "broken")
    documents.add("users", "ghost")
    blobs.add("users/ghost/a.txt")
    identity.broken_uids.add("broken")

    with pytest.raises(InternalError):
        Reconcile(backend).run()

    assert "ghost" in documents.list_ids("users")
    assert blobs.names == {"users/ghost/a.txt"}


def test_object_at_bare_uid_path_removed_once(backend, blobs):
    blobs.add("users/U", "users/U/a.txt")

    first = Reconcile(backend).run()
    second = Reconcile(backend).run()

    assert first.blob_orphans == ["U"]
    assert first.blobs_deleted == 2
    assert blobs.names == set()
    assert second.total == 0


def test_bare_uid_object_alone_is_idempotent(backend, blobs):
    blobs.add("users/U")

    first = Reconcile(backend).run()
    second = Reconcile(backend).run()

    assert first.blob_orphans == ["U"]
    assert second.clean
