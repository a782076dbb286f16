from typing import Generic, List, TypeVar
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Wire models speak camelCase; python code uses snake_case"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Page(CamelModel, Generic[T]):
    """Paginated listing envelope"""
    page: int
    limit: int
    total: int
    pages: int
    items: List[T]


class OkResponse(CamelModel):
    ok: bool = True
