from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from turismo.core import BaseRepository
from turismo.models import User


class UserRepository(BaseRepository[User]):
    """Operator account repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email (emails are stored lowercase)"""
        query = select(User).where(User.email == email.strip().lower())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        query = select(User.id).where(User.email == email.strip().lower())
        result = await self.session.execute(query)
        return result.scalar() is not None
