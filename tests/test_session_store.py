# tests/test_session_store.py
import json
import uuid

from conftest import NOW
from streamrent.models.session import SessionSnapshot
from streamrent.repositories.session_store import FileSessionStore


def test_missing_file_means_logged_out(session_store):
    assert session_store.load() is None


def test_snapshot_is_a_flat_record(session_store):
    user_id = uuid.uuid4()
    snapshot = SessionSnapshot(
        user_id=user_id,
        username="alice",
        full_name="Alice",
        role="user",
        currency="MXN$",
        subscription_end_date=NOW,
    )

    session_store.save(snapshot)

    raw = json.loads(session_store.path.read_text("utf-8"))
    assert raw["user_id"] == str(user_id)
    assert raw["username"] == "alice"
    assert all(not isinstance(v, (dict, list)) for v in raw.values())
    assert session_store.load() == snapshot


def test_corrupt_file_is_ignored(session_store):
    session_store.path.write_text("{not json", "utf-8")
    assert session_store.load() is None


def test_clear_is_idempotent(session_store):
    session_store.save(SessionSnapshot(user_id=uuid.uuid4(), username="alice"))
    session_store.clear()
    session_store.clear()
    assert not session_store.path.exists()


def test_creates_parent_directories(tmp_path):
    store = FileSessionStore(tmp_path / "nested" / "dir" / "session.json")
    store.save(SessionSnapshot(user_id=uuid.uuid4(), username="alice"))
    assert store.load().username == "alice"


def test_undecodable_file_is_ignored(session_store):
    session_store.path.write_bytes(b"\xff\xfe\x00garbage")
    assert session_store.load() is None
