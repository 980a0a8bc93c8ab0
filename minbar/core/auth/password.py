"""Password hashing helpers."""

from functools import lru_cache

from minbar.extensions import bcrypt


def hash_password(plain_password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return bcrypt.generate_password_hash(plain_password).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Validate a plaintext password against a stored hash."""
    try:
        return bcrypt.check_password_hash(hashed_password, plain_password)
    except ValueError:
        # Malformed stored hash (e.g. seeded placeholder rows).
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("minbar-unknown-account")


def burn_password_check(plain_password: str) -> None:
    """Spend the same bcrypt work as a real comparison when there is no stored hash."""
    verify_password(plain_password, _dummy_hash())
