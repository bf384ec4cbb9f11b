import secrets

from werkzeug.security import check_password_hash, generate_password_hash


def get_password_hash(password: str) -> str:
    return generate_password_hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, plain_password)


def new_session_id() -> str:
    """Opaque, URL-safe session identifier for the session cookie."""
    return secrets.token_urlsafe(32)
