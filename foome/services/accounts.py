"""User accounts: registration, credential checks, email confirmation and password reset."""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
import structlog
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: TC002 - runtime DI type

from foome.exceptions import AuthenticationError, ConflictError, ValidationError
from foome.models.database import User, _utc_now
from foome.services.mailer import Mailer

logger = structlog.get_logger(__name__)

_ALGORITHM = "pbkdf2_sha256"
_JWT_ALGORITHM = "HS256"


def hash_password(password: str, iterations: int = 600_000) -> str:
    """Hash ``password`` as ``pbkdf2_sha256$<iterations>$<salt>$<b64 digest>``."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return f"{_ALGORITHM}${iterations}${salt}${base64.b64encode(digest).decode()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, expected = encoded.split("$", 3)
    except ValueError:
        return False
    if algorithm != _ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), int(iterations))
    return hmac.compare_digest(base64.b64encode(digest).decode(), expected)


class EmailNotConfirmedError(ValidationError):
    """Correct credentials, but the account's email is not confirmed yet."""

    def __init__(self) -> None:
        super().__init__("Email not confirmed", emailNotConfirmed=True)


class AccountService:
    """Data access and token handling for ``users``."""

    def __init__(
        self,
        db: AsyncSession,
        secret_key: str,
        mailer: Mailer,
        *,
        require_confirmation: bool = True,
        confirmation_ttl: int = 172800,
        reset_ttl: int = 3600,
        hash_iterations: int = 600_000,
    ) -> None:
        self._db = db
        self._secret = secret_key
        self._mailer = mailer
        self._require_confirmation = require_confirmation
        self._confirmation_ttl = confirmation_ttl
        self._reset_ttl = reset_ttl
        self._hash_iterations = hash_iterations

    @property
    def requires_confirmation(self) -> bool:
        return self._require_confirmation

    async def get(self, user_id: str) -> User | None:
        return await self._db.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(col(User.email) == email.lower())
        return (await self._db.execute(stmt)).scalars().first()

    async def register(
        self,
        full_name: str,
        email: str,
        password: str,
        phone: str | None = None,
    ) -> User:
        email = email.lower()
        if await self.get_by_email(email):
            raise ConflictError("Email already registered")

        user = User(
            email=email,
            password_hash=hash_password(password, self._hash_iterations),
            full_name=full_name,
            phone=phone,
            email_confirmed_at=None if self._require_confirmation else _utc_now(),
        )
        self._db.add(user)
        try:
            await self._db.commit()
        except IntegrityError as exc:
            await self._db.rollback()
            raise ConflictError("Email already registered") from exc
        await self._db.refresh(user)
        logger.info("user_registered", user_id=user.id)

        if self._require_confirmation:
            self._mailer.send_confirmation(user.email, self._issue_token(user, "confirm"))
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Check credentials. Unconfirmed accounts fail with a distinct error."""
        user = await self.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("login_failed", reason="invalid_credentials")
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            logger.info("login_failed", reason="inactive", user_id=user.id)
            raise AuthenticationError("Invalid email or password")
        if self._require_confirmation and user.email_confirmed_at is None:
            logger.info("login_failed", reason="email_not_confirmed", user_id=user.id)
            raise EmailNotConfirmedError
        return user

    async def confirm_email(self, token: str) -> User:
        user = await self._user_from_token(token, "confirm")
        if user.email_confirmed_at is None:
            user.email_confirmed_at = _utc_now()
            user.updated_at = _utc_now()
            self._db.add(user)
            await self._db.commit()
            await self._db.refresh(user)
            logger.info("email_confirmed", user_id=user.id)
        return user

    async def resend_confirmation(self, email: str) -> None:
        user = await self.get_by_email(email)
        if user is None or user.email_confirmed_at is not None:
            return
        self._mailer.send_confirmation(user.email, self._issue_token(user, "confirm"))

    async def request_password_reset(self, email: str) -> None:
        user = await self.get_by_email(email)
        if user is None or not user.is_active:
            return
        self._mailer.send_password_reset(user.email, self._issue_token(user, "reset"))
        logger.info("password_reset_requested", user_id=user.id)

    async def reset_password(self, token: str, password: str) -> User:
        user = await self._user_from_token(token, "reset")
        user.password_hash = hash_password(password, self._hash_iterations)
        user.updated_at = _utc_now()
        self._db.add(user)
        await self._db.commit()
        await self._db.refresh(user)
        logger.info("password_reset", user_id=user.id)
        return user

    def _issue_token(self, user: User, purpose: str) -> str:
        ttl = self._confirmation_ttl if purpose == "confirm" else self._reset_ttl
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": user.id,
            "purpose": purpose,
            # A reset token stops working once the password it was issued for changes
            "pwd": user.password_hash[-12:],
            "iat": now,
            "exp": now + timedelta(seconds=ttl),
        }
        return jwt.encode(payload, self._secret, algorithm=_JWT_ALGORITHM)

    async def _user_from_token(self, token: str, purpose: str) -> User:
        try:
            claims = jwt.decode(token, self._secret, algorithms=[_JWT_ALGORITHM])
        except jwt.PyJWTError as exc:
            logger.info("account_token_invalid", purpose=purpose, error=str(exc))
            raise ValidationError("Invalid or expired token") from exc

        if claims.get("purpose") != purpose:
            raise ValidationError("Invalid or expired token")
        user = await self.get(str(claims.get("sub", "")))
        if user is None or claims.get("pwd") != user.password_hash[-12:]:
            raise ValidationError("Invalid or expired token")
        return user
