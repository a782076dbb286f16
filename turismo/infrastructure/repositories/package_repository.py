from typing import Optional, List, Tuple, Any
from datetime import datetime
from sqlalchemy import select, and_, or_, func
from sqlalchemy.ext.asyncio import AsyncSession

from turismo.core import BaseRepository
from turismo.models import Package


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def promo_window_clause(now: datetime):
    """SQL condition for a promotion that is flagged and running at *now*"""
    return and_(
        Package.is_promo.is_(True),
        or_(Package.promo_start_at.is_(None), Package.promo_start_at <= now),
        or_(Package.promo_end_at.is_(None), Package.promo_end_at >= now),
    )


class PackageRepository(BaseRepository[Package]):
    """Package catalog repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Package, session)

    async def get_by_slug(self, slug: str) -> Optional[Package]:
        query = select(Package).where(Package.slug == slug)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_active(self, id: Any) -> Optional[Package]:
        """Get package by id only when it is bookable"""
        query = select(Package).where(Package.id == id, Package.active.is_(True))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str, *, exclude_id: Optional[str] = None) -> bool:
        query = select(Package.id).where(Package.slug == slug)
        if exclude_id:
            query = query.where(Package.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar() is not None

    async def search(
        self,
        *,
        now: datetime,
        q: Optional[str] = None,
        city: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        max_duration: Optional[int] = None,
        promo: Optional[str] = None,
        active: Optional[bool] = True,
        sort: str = "recent",
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Package], int]:
        """Search packages with filters; returns the page and the total match count"""
        conditions = []
        if active is not None:
            conditions.append(Package.active.is_(active))
        if q:
            pattern = f"%{_escape_like(q.strip())}%"
            conditions.append(or_(
                Package.title.ilike(pattern, escape="\\"),
                Package.description.ilike(pattern, escape="\\"),
            ))
        if city:
            conditions.append(Package.city == city)
        if category:
            conditions.append(Package.category == category)
        if min_price is not None:
            conditions.append(Package.price >= min_price)
        if max_price is not None:
            conditions.append(Package.price <= max_price)
        if max_duration is not None:
            conditions.append(Package.duration_hours <= max_duration)
        if promo == "any":
            conditions.append(Package.is_promo.is_(True))
        elif promo == "active":
            conditions.append(promo_window_clause(now))

        if sort == "price_asc":
            order = (Package.price.asc(), Package.created_at.desc())
        elif sort == "price_desc":
            order = (Package.price.desc(), Package.created_at.desc())
        else:
            order = (Package.created_at.desc(),)

        query = select(Package)
        count_query = select(func.count()).select_from(Package)
        if conditions:
            query = query.where(and_(*conditions))
            count_query = count_query.where(and_(*conditions))

        query = query.order_by(*order).offset(skip).limit(limit)
        result = await self.session.execute(query)
        total = await self.session.execute(count_query)
        return list(result.scalars().all()), total.scalar() or 0
