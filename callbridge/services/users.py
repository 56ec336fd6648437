"""User registration and login."""
import hashlib
import hmac
import logging
import secrets
from typing import Dict, Optional

from callbridge.core.exceptions import AuthError, ConflictError, ValidationError
from callbridge.services.persistence.users import UserPersistenceService

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 260_000


def hash_password(password: str, salt: Optional[str] = None) -> str:
    """Hash a password with PBKDF2-SHA256. Returns ``salt$hexdigest``."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), bytes.fromhex(salt), PBKDF2_ITERATIONS
    )
    return f"{salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    """Check ``password`` against a value produced by :func:`hash_password`."""
    salt, _, expected = stored.partition("$")
    if not salt or not expected:
        return False
    candidate = hash_password(password, salt).partition("$")[2]
    return hmac.compare_digest(candidate, expected)


class UserService:
    """Registers and authenticates users."""

    def __init__(self, persistence: UserPersistenceService):
        self.persistence = persistence

    async def register(
        self, username: Optional[str], mobile: Optional[str], password: Optional[str]
    ) -> Dict[str, str]:
        if not username or not mobile or not password:
            raise ValidationError("All fields are required.")

        if await self.persistence.get_user_by_username(username):
            raise ConflictError("Username already exists.")

        user = await self.persistence.create_user(username, mobile, hash_password(password))
        logger.info(f"Registered user {user.username}")
        return {"username": user.username, "mobile": user.mobile}

    async def login(self, username: Optional[str], password: Optional[str]) -> Dict[str, str]:
        if not username or not password:
            raise ValidationError("All fields are required.")

        user = await self.persistence.get_user_by_username(username)
        if not user or not verify_password(password, user.password_hash):
            raise AuthError("Invalid username or password.")

        return {"username": user.username, "mobile": user.mobile}
