# smartassist/routers/technicians.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from smartassist.deps import get_storage
from smartassist.schemas import BookingOut, ReviewOut, TechnicianIn, TechnicianOut
from smartassist.storage import Storage, StorageError

router = APIRouter(prefix="/api/technicians", tags=["technicians"])


@router.get("", response_model=List[TechnicianOut])
def list_technicians(
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    specialty: Optional[str] = Query(None),
    storage: Storage = Depends(get_storage),
):
    """
    Search technicians. city/state must match exactly; specialty matches any
    specialty containing it (case-insensitive). No filters -> all, best rated first.
    """
    return storage.search_technicians(city=city, state=state, specialty=specialty)


@router.post("", response_model=TechnicianOut, status_code=201)
def create_technician(payload: TechnicianIn, storage: Storage = Depends(get_storage)):
    try:
        return storage.create_technician(payload.model_dump())
    except StorageError as e:
        raise HTTPException(status_code=400, detail=f"Error creating technician: {e}")


@router.get("/{technician_id}", response_model=TechnicianOut)
def get_technician(technician_id: str, storage: Storage = Depends(get_storage)):
    technician = storage.get_technician(technician_id)
    if not technician:
        raise HTTPException(status_code=404, detail="Technician not found")
    return technician


@router.get("/{technician_id}/reviews", response_model=List[ReviewOut])
def list_technician_reviews(technician_id: str, storage: Storage = Depends(get_storage)):
    return storage.get_technician_reviews(technician_id)


@router.get("/{technician_id}/bookings", response_model=List[BookingOut])
def list_technician_bookings(technician_id: str, storage: Storage = Depends(get_storage)):
    if not storage.get_technician(technician_id):
        raise HTTPException(status_code=404, detail="Technician not found")
    return storage.get_technician_bookings(technician_id)
