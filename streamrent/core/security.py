# streamrent/core/security.py
from passlib.context import CryptContext

# pbkdf2_sha256 for new hashes; bcrypt hashes from older rows still verify.
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256", "bcrypt_sha256", "bcrypt"],
    default="pbkdf2_sha256",
    deprecated="auto",
)


def hash_password(plaintext: str) -> str:
    """Return a salted one-way hash of `plaintext`."""
    return pwd_context.hash(plaintext)


def verify_password(plaintext: str, password_hash: str | None) -> bool:
    """
    Check `plaintext` against a stored hash.

    Unknown or malformed hashes never verify.
    """
    if not password_hash:
        return False
    try:
        return pwd_context.verify(plaintext, password_hash)
    except (ValueError, TypeError):
        return False
