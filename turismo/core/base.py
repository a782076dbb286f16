from typing import Generic, TypeVar, Optional, Any, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

ModelType = TypeVar('ModelType')


class BaseRepository(Generic[ModelType]):
    """Primary-key access shared by the package, booking and user repositories"""

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get(self, id: Any) -> Optional[ModelType]:
        return await self.session.get(self.model, id)

    async def create(self, *, obj_in: Dict[str, Any]) -> ModelType:
        """Add a row built from *obj_in* and flush so defaults (id, timestamps) are set"""
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self.session.flush()
        return db_obj

    async def delete(self, *, id: Any) -> bool:
        """Hard delete; False when the row does not exist"""
        db_obj = await self.get(id)
        if not db_obj:
            return False

        await self.session.delete(db_obj)
        await self.session.flush()
        return True

    async def count(self, *, filters: Optional[Dict[str, Any]] = None) -> int:
        query = select(func.count()).select_from(self.model)

        for key, value in (filters or {}).items():
            query = query.where(getattr(self.model, key) == value)

        result = await self.session.execute(query)
        return result.scalar() or 0


class BaseService:
    """Services share one AsyncSession per request"""

    def __init__(self, session: AsyncSession):
        self.session = session
