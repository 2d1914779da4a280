"""Cookie-based session authentication backed by the auth_sessions table."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import timedelta

import structlog
from sqlmodel import col, delete, select
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: TC002 - runtime DI type

from foome.access.context import Principal
from foome.models.database import AuthSession, User, _utc_now

logger = structlog.get_logger(__name__)


def _hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


class SessionAuth:
    """Issues, validates and revokes signed session tokens.

    The cookie carries ``<token>.<signature>``; only a SHA-256 of the raw token
    is stored, so a leaked table cannot be replayed as cookies.
    """

    def __init__(self, db: AsyncSession, secret_key: str, max_age: int = 86400) -> None:
        self._db = db
        self._secret = secret_key.encode()
        self._max_age = max_age

    async def create_session(self, user_id: str) -> str:
        """Create a new session and return the signed cookie value."""
        token = secrets.token_urlsafe(32)
        now = _utc_now()
        self._db.add(
            AuthSession(
                token_hash=_hash_token(token),
                user_id=user_id,
                created_at=now,
                expires_at=now + timedelta(seconds=self._max_age),
            )
        )
        await self._db.commit()
        logger.info("session_created", user_id=user_id)
        return f"{token}.{self._sign(token)}"

    async def validate_session(self, signed_token: str) -> str | None:
        """Return the session's user id, or None when invalid or expired."""
        raw_token = self._verify(signed_token)
        if raw_token is None:
            return None

        stmt = (
            select(AuthSession, User)
            .join(User, col(User.id) == col(AuthSession.user_id))
            .where(col(AuthSession.token_hash) == _hash_token(raw_token))
        )
        row = (await self._db.execute(stmt)).first()
        if row is None:
            return None

        session, user = row
        if session.expires_at <= _utc_now():
            await self._db.delete(session)
            await self._db.commit()
            logger.info("session_expired", user_id=session.user_id)
            return None
        if not user.is_active:
            return None
        return session.user_id

    async def destroy_session(self, signed_token: str) -> None:
        """Remove a session. Unknown or badly signed tokens are ignored."""
        raw_token = self._verify(signed_token)
        if raw_token is None:
            return
        await self._db.execute(
            delete(AuthSession).where(col(AuthSession.token_hash) == _hash_token(raw_token))
        )
        await self._db.commit()
        logger.info("session_destroyed")

    async def destroy_user_sessions(self, user_id: str) -> None:
        await self._db.execute(delete(AuthSession).where(col(AuthSession.user_id) == user_id))
        await self._db.commit()
        logger.info("user_sessions_destroyed", user_id=user_id)

    def _verify(self, signed_token: str) -> str | None:
        if not signed_token or "." not in signed_token:
            return None
        raw_token, signature = signed_token.rsplit(".", 1)
        if not hmac.compare_digest(signature, self._sign(raw_token)):
            return None
        return raw_token

    def _sign(self, data: str) -> str:
        """Create HMAC signature for a token."""
        return hmac.new(self._secret, data.encode(), hashlib.sha256).hexdigest()[:32]


async def resolve_current_principal(
    db: AsyncSession,
    signed_token: str | None,
    secret_key: str,
    max_age: int,
) -> Principal | None:
    """Resolve the caller from their session cookie.

    Never raises: a missing cookie, a bad signature, an expired session and a
    failing credential store all mean "no principal".
    """
    if not signed_token:
        return None
    try:
        user_id = await SessionAuth(db, secret_key, max_age).validate_session(signed_token)
    except Exception as exc:
        logger.warning("identity_resolution_failed", error=str(exc))
        await db.rollback()
        return None
    if user_id is None:
        return None
    return Principal(user_id=user_id)
