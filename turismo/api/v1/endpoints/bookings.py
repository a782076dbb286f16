from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, status

from turismo.api.v1.schemas import BookingIn, BookingOut, BookingStatusUpdate, Page
from turismo.deps import SessionDep, ClockDep, NotifierDep
from turismo.roles import Role
from turismo.security import role_required
from turismo.services import BookingService


router = APIRouter()

agent_only = [Depends(role_required(Role.agent))]


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingIn,
    sess: SessionDep,
    clock: ClockDep,
    notifier: NotifierDep,
    background_tasks: BackgroundTasks,
):
    """Public booking form. The total is always computed from the stored package."""
    service = BookingService(sess, clock=clock, notifier=notifier)
    booking, package = await service.create_booking(payload.model_dump())

    # The notice goes out only once the booking is durable
    await sess.commit()
    background_tasks.add_task(service.notify, service.build_notice(booking, package))

    return BookingOut.from_row(booking, package)


@router.get("", response_model=Page[BookingOut], dependencies=agent_only)
async def list_bookings(
    sess: SessionDep,
    page: Optional[str] = None,
    limit: Optional[str] = None,
):
    """Newest first, with a summary of each booking's package"""
    result = await BookingService(sess).list_bookings(page=page, limit=limit)
    result["items"] = [BookingOut.from_row(b, p) for b, p in result["items"]]
    return result


@router.get("/{booking_id}", response_model=BookingOut, dependencies=agent_only)
async def get_booking(booking_id: str, sess: SessionDep):
    booking, package = await BookingService(sess).get_booking(booking_id)
    return BookingOut.from_row(booking, package)


@router.patch("/{booking_id}/status", response_model=BookingOut, dependencies=agent_only)
async def change_booking_status(booking_id: str, payload: BookingStatusUpdate, sess: SessionDep):
    """Move a booking forward in its lifecycle"""
    booking, package = await BookingService(sess).change_status(booking_id, payload.status)
    return BookingOut.from_row(booking, package)
