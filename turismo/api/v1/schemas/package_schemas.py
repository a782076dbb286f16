from typing import Optional, List, Union
from datetime import datetime
from decimal import Decimal
from pydantic import Field

from .common import CamelModel

StringList = Union[List[str], str]


class MediaItem(CamelModel):
    """Media entry; any type other than ``video`` is stored as an image"""
    type: Optional[str] = "image"
    url: Optional[str] = None
    caption: Optional[str] = None


class Location(CamelModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class PackageIn(CamelModel):
    """Schema for creating packages"""
    title: str = Field(..., min_length=2, max_length=200)
    description: str = Field("", max_length=8000)
    price: Decimal = Field(..., ge=0)
    currency: Optional[str] = Field(None, max_length=5)
    city: Optional[str] = Field(None, max_length=80)
    country: Optional[str] = Field(None, max_length=80)
    category: Optional[str] = Field(None, max_length=80)
    duration_hours: Optional[int] = Field(None, ge=1, le=240)
    languages: Optional[StringList] = None
    highlights: Optional[StringList] = None
    includes: Optional[StringList] = None
    excludes: Optional[StringList] = None
    media: Optional[List[MediaItem]] = None
    location: Optional[Location] = None
    active: Optional[bool] = None
    # Promotions
    is_promo: Optional[bool] = None
    promo_percent: Optional[Decimal] = None
    promo_price: Optional[Decimal] = None
    promo_start_at: Optional[datetime] = None
    promo_end_at: Optional[datetime] = None


class PackageUpdate(CamelModel):
    """Schema for updating packages; only the fields sent are changed"""
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, max_length=8000)
    price: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, max_length=5)
    city: Optional[str] = Field(None, max_length=80)
    country: Optional[str] = Field(None, max_length=80)
    category: Optional[str] = Field(None, max_length=80)
    duration_hours: Optional[int] = Field(None, ge=1, le=240)
    languages: Optional[StringList] = None
    highlights: Optional[StringList] = None
    includes: Optional[StringList] = None
    excludes: Optional[StringList] = None
    media: Optional[List[MediaItem]] = None
    location: Optional[Location] = None
    active: Optional[bool] = None
    is_promo: Optional[bool] = None
    promo_percent: Optional[Decimal] = None
    promo_price: Optional[Decimal] = None
    promo_start_at: Optional[datetime] = None
    promo_end_at: Optional[datetime] = None


class MediaOut(CamelModel):
    type: str
    url: str
    caption: Optional[str] = None


class LocationOut(CamelModel):
    lat: float
    lng: float


class PackageOut(CamelModel):
    """Schema for package responses, derived pricing included"""
    id: str
    title: str
    slug: str
    description: str
    short_description: str
    city: str
    country: str
    category: str
    price: float
    currency: str
    duration_hours: int
    languages: List[str]
    highlights: List[str]
    includes: List[str]
    excludes: List[str]
    media: List[MediaOut]
    main_image: Optional[str] = None
    main_video: Optional[str] = None
    location: Optional[LocationOut] = None
    has_location: bool
    is_promo: bool
    promo_percent: Optional[float] = None
    promo_price: Optional[float] = None
    promo_start_at: Optional[datetime] = None
    promo_end_at: Optional[datetime] = None
    is_promo_active: bool
    effective_price: Optional[float] = None
    discount_percent: int
    active: bool
    created_at: datetime
    updated_at: datetime


class PackageDeleted(CamelModel):
    ok: bool = True
    id: str
