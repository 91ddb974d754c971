"""Admin credentials: password login and opaque session tokens.

Callers only see :class:`CredentialValidator`; the plaintext implementation
below can be replaced by a hashed-password / signed-token one without
touching the routes.
"""

import uuid
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from donation_api.db.base_class import utcnow
from donation_api.models.admin_session import AdminSession

SESSION_TTL = timedelta(hours=24)


class CredentialValidator:
    async def login(self, db: AsyncSession, password: str) -> Optional[AdminSession]:
        """Return a fresh session for a correct password, ``None`` otherwise."""
        raise NotImplementedError

    async def validate(self, db: AsyncSession, token: Optional[str]) -> Optional[AdminSession]:
        """Return the live session behind ``token``, ``None`` if it is not one."""
        raise NotImplementedError


class PlaintextSessionValidator(CredentialValidator):
    """Password compared as-is against the configured secret; random uuid tokens."""

    def __init__(self, admin_password: Optional[str], ttl: timedelta = SESSION_TTL):
        self.admin_password = admin_password
        self.ttl = ttl

    async def login(self, db: AsyncSession, password: str) -> Optional[AdminSession]:
        if not self.admin_password or password != self.admin_password:
            return None

        session = AdminSession(token=str(uuid.uuid4()), expires_at=utcnow() + self.ttl)
        db.add(session)
        await db.commit()
        await db.refresh(session)
        return session

    async def validate(self, db: AsyncSession, token: Optional[str]) -> Optional[AdminSession]:
        if not token:
            return None
        result = await db.execute(
            select(AdminSession).where(
                AdminSession.token == token,
                AdminSession.expires_at > utcnow(),
            )
        )
        return result.scalars().first()


def expires_at_iso(expires_at: datetime) -> str:
    return expires_at.isoformat(timespec="milliseconds") + "Z"
