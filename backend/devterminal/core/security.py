"""Security helpers for password hashing and bearer token signing."""
from __future__ import annotations

from itsdangerous import BadSignature, URLSafeTimedSerializer
from passlib.context import CryptContext

from .config import Settings, get_settings


_password_context = CryptContext(schemes=["argon2"], deprecated="auto")


class InvalidTokenError(ValueError):
    """Raised when a bearer token is tampered with, malformed, or expired."""


class PasswordHasher:
    """Hash and verify user passwords using Argon2id."""

    @staticmethod
    def hash(password: str) -> str:
        return _password_context.hash(password)

    @staticmethod
    def verify(password: str, hashed: str) -> bool:
        try:
            return _password_context.verify(password, hashed)
        except ValueError:
            # Unrecognised or corrupt digest
            return False


class TokenSigner:
    """Issue and verify signed, time-limited identity tokens.

    The token carries ``{"id": <user id>}`` plus the signing timestamp added
    by itsdangerous. Validity depends only on the signature and its age, so a
    token cannot be revoked before it expires.
    """

    def __init__(self, settings: Settings | None = None, salt: str = "devterminal-auth") -> None:
        settings = settings or get_settings()
        self._serializer = URLSafeTimedSerializer(settings.secret_key, salt=salt)
        self._max_age = settings.access_token_expire_minutes * 60

    def issue(self, user_id: int) -> str:
        return self._serializer.dumps({"id": user_id})

    def verify(self, token: str) -> int:
        try:
            payload = self._serializer.loads(token, max_age=self._max_age)
        except BadSignature as exc:
            # SignatureExpired is a BadSignature too; callers never see which
            raise InvalidTokenError("Invalid or expired token") from exc

        user_id = payload.get("id") if isinstance(payload, dict) else None
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise InvalidTokenError("Invalid token payload")
        return user_id
