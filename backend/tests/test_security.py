import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "secret")
os.environ.setdefault("SKIP_CREATE_ALL", "1")

from hrms.core.security import get_password_hash, new_session_id, verify_password


def test_password_hash_round_trip():
    password_hash = get_password_hash("correct horse")

    assert password_hash != "correct horse"
    assert verify_password("correct horse", password_hash) is True
    assert verify_password("wrong horse", password_hash) is False


def test_empty_hash_never_verifies():
    assert verify_password("anything", "") is False


def test_session_ids_are_opaque_and_url_safe():
    session_id = new_session_id()
    assert len(session_id) >= 40
    assert all(ch.isalnum() or ch in "-_" for ch in session_id)
