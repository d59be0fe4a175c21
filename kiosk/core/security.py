"""
Credentials and Session Tokens

Passwords are stored as bcrypt hashes. Sessions are signed, timestamped
tokens (itsdangerous) carried in HttpOnly cookies. There are two
independent token types:

    - admin_token: back-office sessions, 24h, admin accounts only
    - user_token: staff/client sessions, 7 days, any account

Each type signs with its own salt, so a client token never verifies as
an admin token even though both share SECRET_KEY.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import bcrypt
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from kiosk.core.config import get_settings

logger = logging.getLogger(__name__)

ADMIN_COOKIE_NAME = "admin_token"
CLIENT_COOKIE_NAME = "user_token"

ROLE_ADMIN = "admin"
ROLE_CLIENT = "client"


# =============================================================================
# PASSWORDS
# =============================================================================

def hash_password(password: str) -> str:
    """Hash a password with the configured bcrypt cost."""
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Rejected login against a malformed password hash")
        return False


# =============================================================================
# SESSION TOKENS
# =============================================================================

@dataclass
class SessionClaims:
    """Verified contents of a session token."""
    user_id: int
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class SessionSigner:
    """
    Issues and verifies one type of session token.

    Attributes:
        role: Role stamped into every token this signer issues
        max_age: Token lifetime in seconds (also used as cookie max-age)
    """

    def __init__(self, secret_key: str, role: str, max_age: int):
        self.role = role
        self.max_age = max_age
        self._serializer = URLSafeTimedSerializer(secret_key, salt=f"kiosk-{role}-session")

    def issue(self, user_id: int, username: str) -> str:
        return self._serializer.dumps({"uid": user_id, "username": username, "role": self.role})

    def verify(self, token: Optional[str]) -> Optional[SessionClaims]:
        """
        Verify a token.

        Returns:
            SessionClaims if the signature is valid, unexpired and issued
            for this signer's role; None otherwise.
        """
        if not token:
            return None
        try:
            payload = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired:
            logger.debug(f"Expired {self.role} session token")
            return None
        except BadSignature:
            logger.debug(f"Invalid {self.role} session token")
            return None

        if not isinstance(payload, dict) or payload.get("role") != self.role:
            return None

        return SessionClaims(
            user_id=int(payload["uid"]),
            username=str(payload["username"]),
            role=self.role,
        )


@lru_cache()
def get_admin_signer() -> SessionSigner:
    settings = get_settings()
    return SessionSigner(settings.secret_key, ROLE_ADMIN, settings.admin_token_max_age)


@lru_cache()
def get_client_signer() -> SessionSigner:
    settings = get_settings()
    return SessionSigner(settings.secret_key, ROLE_CLIENT, settings.client_token_max_age)
