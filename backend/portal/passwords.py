"""Password hashing helpers."""
from passlib.context import CryptContext

# scrypt is memory-hard; the stored string embeds salt and cost parameters
password_context = CryptContext(
    schemes=["scrypt"],
    deprecated="auto",
)

# Verified when no account matched so a lookup miss costs as much as a bad password.
DUMMY_PASSWORD_HASH = password_context.hash("portal-dummy-password")


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    return password_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a plain password against the stored hash.

    Returns ``False`` for a missing, malformed or unrecognised hash instead of
    raising.
    """
    if not password_hash:
        return False
    try:
        return password_context.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def needs_rehash(password_hash: str) -> bool:
    try:
        return password_context.needs_update(password_hash)
    except (ValueError, TypeError):
        return True
