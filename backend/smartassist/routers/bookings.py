# smartassist/routers/bookings.py
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from smartassist.deps import get_current_user_id, get_storage
from smartassist.schemas import BookingIn, BookingOut, BookingUpdate
from smartassist.storage import Storage, StorageError

router = APIRouter(prefix="/api/bookings", tags=["bookings"])
log = logging.getLogger(__name__)


@router.get("", response_model=List[BookingOut])
def list_bookings(
    storage: Storage = Depends(get_storage),
    user_id: str = Depends(get_current_user_id),
):
    return storage.get_user_bookings(user_id)


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: str, storage: Storage = Depends(get_storage)):
    booking = storage.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


@router.post("", response_model=BookingOut, status_code=201)
def create_booking(
    payload: BookingIn,
    storage: Storage = Depends(get_storage),
    user_id: str = Depends(get_current_user_id),
):
    """
    Request a technician. The scheduled date is taken as given; past dates are
    refused by the booking page, not here.
    """
    try:
        booking = storage.create_booking({**payload.model_dump(), "user_id": user_id})
    except StorageError as e:
        raise HTTPException(status_code=400, detail=f"Error creating booking: {e}")
    log.info("booking created id=%s technician=%s", booking.id, booking.technician_id)
    return booking


@router.patch("/{booking_id}", response_model=BookingOut)
def update_booking(
    booking_id: str,
    payload: BookingUpdate,
    storage: Storage = Depends(get_storage),
):
    try:
        booking = storage.update_booking(booking_id, payload.model_dump(exclude_unset=True))
    except StorageError as e:
        raise HTTPException(status_code=400, detail=f"Error updating booking: {e}")
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking
