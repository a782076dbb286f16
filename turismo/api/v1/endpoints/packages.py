from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from turismo.api.v1.schemas import (
    PackageIn, PackageUpdate, PackageOut, PackageDeleted, Page,
)
from turismo.deps import SessionDep, ClockDep, BaseUrlDep
from turismo.roles import Role, role_satisfies
from turismo.security import optional_user, role_required
from turismo.services import PackageService, CatalogQueryService


router = APIRouter()

agent_only = [Depends(role_required(Role.agent))]


def _flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() not in ("", "0", "false")


def _can_preview(preview: Optional[str], user: Optional[dict]) -> bool:
    """Preview is an operator privilege; anonymous callers silently lose it"""
    return _flag(preview) and user is not None and role_satisfies(user.get("role"), Role.agent)


@router.get("", response_model=Page[PackageOut])
async def list_packages(
    sess: SessionDep,
    clock: ClockDep,
    base_url: BaseUrlDep,
    q: Optional[str] = None,
    city: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    max_dur: Optional[str] = Query(None, alias="maxDur"),
    sort: Optional[str] = None,
    promo: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    preview: Optional[str] = None,
    active: Optional[str] = None,
    user: Optional[dict] = Depends(optional_user),
):
    """Public catalog listing"""
    service = CatalogQueryService(sess, clock=clock, base_url=base_url)
    return await service.list_packages(
        q=q,
        city=city,
        category=category,
        min_price=min_price,
        max_price=max_price,
        max_duration=max_dur,
        sort=sort,
        promo=promo,
        page=page,
        limit=limit,
        preview=_can_preview(preview, user),
        active=active,
    )


@router.get("/id/{package_id}", response_model=PackageOut, dependencies=agent_only)
async def get_package_by_id(package_id: str, sess: SessionDep, clock: ClockDep, base_url: BaseUrlDep):
    """Get any package by id, inactive ones included"""
    package = await PackageService(sess).get_package(package_id)
    return CatalogQueryService(sess, clock=clock, base_url=base_url).serialize(package)


@router.get("/{slug}", response_model=PackageOut)
async def get_package_by_slug(
    slug: str,
    sess: SessionDep,
    clock: ClockDep,
    base_url: BaseUrlDep,
    preview: Optional[str] = None,
    user: Optional[dict] = Depends(optional_user),
):
    """Public package detail"""
    service = CatalogQueryService(sess, clock=clock, base_url=base_url)
    return await service.get_by_slug(slug, preview=_can_preview(preview, user))


@router.post("", response_model=PackageOut, status_code=status.HTTP_201_CREATED, dependencies=agent_only)
async def create_package(payload: PackageIn, sess: SessionDep, clock: ClockDep, base_url: BaseUrlDep):
    """Create a package; the slug is derived from the title"""
    package = await PackageService(sess).create_package(payload.model_dump(exclude_unset=True))
    return CatalogQueryService(sess, clock=clock, base_url=base_url).serialize(package)


@router.put("/{package_id}", response_model=PackageOut, dependencies=agent_only)
async def update_package(
    package_id: str,
    payload: PackageUpdate,
    sess: SessionDep,
    clock: ClockDep,
    base_url: BaseUrlDep,
):
    """Partial update; a new title re-derives the slug"""
    package = await PackageService(sess).update_package(package_id, payload.model_dump(exclude_unset=True))
    return CatalogQueryService(sess, clock=clock, base_url=base_url).serialize(package)


@router.post("/{package_id}/deactivate", response_model=PackageOut, dependencies=agent_only)
async def deactivate_package(package_id: str, sess: SessionDep, clock: ClockDep, base_url: BaseUrlDep):
    package = await PackageService(sess).deactivate_package(package_id)
    return CatalogQueryService(sess, clock=clock, base_url=base_url).serialize(package)


@router.delete(
    "/{package_id}",
    response_model=PackageDeleted,
    dependencies=[Depends(role_required(Role.admin))],
)
async def delete_package(package_id: str, sess: SessionDep):
    """Hard delete; existing bookings are kept"""
    deleted_id = await PackageService(sess).delete_package(package_id)
    return PackageDeleted(id=deleted_id)
