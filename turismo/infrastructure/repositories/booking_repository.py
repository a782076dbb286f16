from typing import Optional, List, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from turismo.core import BaseRepository
from turismo.models import Booking, Package


class BookingRepository(BaseRepository[Booking]):
    """Booking repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Booking, session)

    async def list_with_packages(
        self,
        *,
        skip: int = 0,
        limit: int = 20
    ) -> List[Tuple[Booking, Optional[Package]]]:
        """Newest bookings first, each paired with its package when it still exists"""
        query = (
            select(Booking, Package)
            .outerjoin(Package, Package.id == Booking.package_id)
            .order_by(Booking.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [(booking, package) for booking, package in result.all()]

    async def get_with_package(self, id: str) -> Optional[Tuple[Booking, Optional[Package]]]:
        query = (
            select(Booking, Package)
            .outerjoin(Package, Package.id == Booking.package_id)
            .where(Booking.id == id)
        )
        result = await self.session.execute(query)
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]
