"""Identity service - sign-up, sign-in, sessions and session-change observers."""

import uuid
from collections.abc import Callable
from datetime import timedelta

from sqlalchemy import delete, event as sa_event, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from meetcal.config import settings
from meetcal.core.errors import AuthenticationError, ConflictError, InvalidInputError
from meetcal.core.logging import get_logger
from meetcal.core.security import (
    create_access_token,
    decode_token,
    hash_password,
    utcnow,
    verify_password,
)
from meetcal.models.credential import AuthSession, Credential
from meetcal.models.profile import Profile, normalize_email
from meetcal.schemas.auth import TokenPair

logger = get_logger(__name__)

SIGNED_UP = "SIGNED_UP"
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

SessionListener = Callable[[str, str], None]


class IdentityService:
    def __init__(self):
        self._listeners: list[SessionListener] = []

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register listener(event, user_id); returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, user_id: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, user_id)
            except Exception:
                logger.exception("session_listener_failed", auth_event=event, user_id=user_id)

    def _notify_on_commit(self, db: AsyncSession, auth_event: str, user_id: str) -> None:
        """Queue the event until the session commits; a rollback discards it."""
        key = ("identity_events", id(self))
        pending = db.info.get(key)
        if pending is None:
            pending = db.info[key] = []

            @sa_event.listens_for(db.sync_session, "after_commit")
            def _deliver(session):
                queued = list(pending)
                pending.clear()
                for queued_event, queued_user in queued:
                    self._notify(queued_event, queued_user)

            @sa_event.listens_for(db.sync_session, "after_soft_rollback")
            def _discard(session, previous_transaction):
                if previous_transaction.parent is None:  # savepoint rollbacks keep the queue
                    pending.clear()

        pending.append((auth_event, user_id))

    async def sign_up(
        self, db: AsyncSession, email: str, password: str, full_name: str
    ) -> Profile:
        email = normalize_email(email)
        full_name = full_name.strip()
        if not full_name:
            raise InvalidInputError("Full name is required")
        if len(password) < settings.MIN_PASSWORD_LENGTH:
            raise InvalidInputError(
                f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
            )

        existing = await db.execute(select(Profile.id).where(Profile.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("User with this email already exists")

        profile = Profile(id=str(uuid.uuid4()), full_name=full_name, email=email)
        try:
            async with db.begin_nested():
                db.add(profile)
                db.add(Credential(profile_id=profile.id, hashed_password=hash_password(password)))
        except IntegrityError:
            raise ConflictError("User with this email already exists")

        logger.info("signed_up", user_id=profile.id)
        self._notify_on_commit(db, SIGNED_UP, profile.id)
        return profile

    async def sign_in(self, db: AsyncSession, email: str, password: str) -> TokenPair:
        email = normalize_email(email)
        result = await db.execute(
            select(Profile, Credential)
            .join(Credential, Credential.profile_id == Profile.id)
            .where(Profile.email == email)
        )
        row = result.one_or_none()
        if row is None or not verify_password(password, row.Credential.hashed_password):
            logger.info("sign_in_rejected")
            raise AuthenticationError("Invalid email or password")

        profile = row.Profile
        session = AuthSession(
            id=str(uuid.uuid4()),
            profile_id=profile.id,
            expires_at=utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        db.add(session)
        await db.flush()

        logger.info("signed_in", user_id=profile.id, session_id=session.id)
        self._notify_on_commit(db, SIGNED_IN, profile.id)
        return TokenPair(
            access_token=create_access_token(profile.id, session.id, session.expires_at),
            user_id=profile.id,
        )

    async def current_session(self, db: AsyncSession, token: str) -> str | None:
        """User id behind a live token, or None if invalid, expired or signed out."""
        claims = decode_token(token)
        if not claims or "jti" not in claims or "sub" not in claims:
            return None
        session = await db.get(AuthSession, claims["jti"])
        if session is None or session.profile_id != claims["sub"]:
            return None
        if session.expires_at <= utcnow():
            return None
        return session.profile_id

    async def sign_out(self, db: AsyncSession, token: str) -> None:
        """End the token's session. Signing out a dead token is a no-op."""
        claims = decode_token(token)
        if not claims or "jti" not in claims:
            return
        result = await db.execute(
            delete(AuthSession).where(AuthSession.id == claims["jti"])
        )
        if result.rowcount:
            logger.info("signed_out", user_id=claims.get("sub"), session_id=claims["jti"])
            self._notify_on_commit(db, SIGNED_OUT, claims.get("sub"))


identity_service = IdentityService()
