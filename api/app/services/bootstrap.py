"""Startup tasks: schema creation and the bootstrap admin account."""

import logging

from sqlalchemy import select

from app.core.auth import hash_password
from app.core.config import settings
from app.core.database import async_session_factory, engine
from app.models import Base, User, UserRole

logger = logging.getLogger(__name__)


async def init_models() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ensure_admin_user() -> User | None:
    """Create the configured admin once. Existing accounts are left untouched."""
    if not settings.admin_email or not settings.admin_password:
        return None

    async with async_session_factory() as db:
        result = await db.execute(select(User).where(User.email == settings.admin_email))
        admin = result.scalar_one_or_none()
        if admin:
            return admin

        admin = User(
            name=settings.admin_name,
            email=settings.admin_email,
            hashed_password=hash_password(settings.admin_password),
            role=UserRole.ADMIN,
        )
        db.add(admin)
        await db.commit()
        logger.info("Created admin user %s", admin.email)
        return admin
