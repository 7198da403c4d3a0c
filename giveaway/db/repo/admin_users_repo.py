from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.db.models.admin_users import AdminUser
from giveaway.db.models.campaigns import Campaign


class AdminUsersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, admin_user_id: UUID) -> AdminUser | None:
        return await session.get(AdminUser, admin_user_id)

    @staticmethod
    async def get_by_email(session: AsyncSession, email: str) -> AdminUser | None:
        stmt = select(AdminUser).where(AdminUser.email == email)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_all(session: AsyncSession) -> list[AdminUser]:
        stmt = select(AdminUser).order_by(AdminUser.created_at.desc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create(session: AsyncSession, *, user: AdminUser) -> AdminUser:
        session.add(user)
        await session.flush()
        return user

    @staticmethod
    async def has_created_campaigns(session: AsyncSession, admin_user_id: UUID) -> bool:
        stmt = select(Campaign.id).where(Campaign.created_by == admin_user_id).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def delete(session: AsyncSession, admin_user_id: UUID) -> int:
        stmt = delete(AdminUser).where(AdminUser.id == admin_user_id)
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
