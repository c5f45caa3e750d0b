"""Admin login and bearer-token sessions."""

from __future__ import annotations

import logging
import secrets

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from . import config, utils
from .database import get_session
from .errors import AuthenticationError, ConfigurationError
from .models import AdminSession

logger = logging.getLogger("uvicorn.error")

# Sessions last a fixed 24 hours and are never renewed.
SESSION_TTL_MS = 24 * 60 * 60 * 1000


def _new_token() -> str:
    return secrets.token_hex(32)


def login(session: Session, password: str) -> AdminSession:
    """Check ``password`` against the shared secret and open a session."""
    expected = config.admin_password()
    if not expected:
        logger.error("Admin login attempted but no admin password is configured")
        raise ConfigurationError("Admin password not configured")
    if not secrets.compare_digest(
        (password or "").encode("utf-8"), expected.encode("utf-8")
    ):
        logger.warning("Rejected admin login with an invalid password")
        raise AuthenticationError("Invalid password")

    admin_session = AdminSession(
        token=_new_token(),
        expires_at=utils.now_ms() + SESSION_TTL_MS,
    )
    session.add(admin_session)
    session.flush()
    logger.info(
        "Admin session opened; expires at %s",
        utils.ms_to_iso(admin_session.expires_at),
    )
    return admin_session


def _fetch_session(session: Session, token: str | None) -> AdminSession | None:
    if not token:
        return None
    stmt = select(AdminSession).where(AdminSession.token == token)
    return session.scalars(stmt).first()


def _is_live(admin_session: AdminSession | None, *, now: int | None = None) -> bool:
    if admin_session is None:
        return False
    current = utils.now_ms() if now is None else now
    return current < admin_session.expires_at


def validate_session(session: Session, token: str | None) -> bool:
    return _is_live(_fetch_session(session, token))


def require_admin(session: Session, token: str | None) -> AdminSession:
    """Return the live session for ``token`` or raise ``AuthenticationError``."""
    if not token:
        raise AuthenticationError("Missing session token")
    admin_session = _fetch_session(session, token)
    if not _is_live(admin_session):
        logger.warning("Rejected admin request with an invalid or expired session token")
        raise AuthenticationError("Invalid or expired session")
    return admin_session


def prune_expired_sessions(session: Session | None = None) -> int:
    """Delete session rows that can no longer authenticate."""
    if session is None:
        with get_session() as owned:
            return prune_expired_sessions(owned)
    stmt = delete(AdminSession).where(AdminSession.expires_at <= utils.now_ms())
    removed = session.execute(stmt).rowcount or 0
    if removed:
        logger.info("Pruned %d expired admin sessions", removed)
    return removed
