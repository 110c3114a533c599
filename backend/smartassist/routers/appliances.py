# smartassist/routers/appliances.py
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from smartassist.deps import get_current_user_id, get_storage
from smartassist.schemas import ApplianceIn, ApplianceOut, ApplianceUpdate
from smartassist.storage import Storage, StorageError

router = APIRouter(prefix="/api/appliances", tags=["appliances"])
log = logging.getLogger(__name__)


@router.get("", response_model=List[ApplianceOut])
def list_appliances(
    storage: Storage = Depends(get_storage),
    user_id: str = Depends(get_current_user_id),
):
    """The current user's appliances, newest first."""
    return storage.get_user_appliances(user_id)


@router.get("/{appliance_id}", response_model=ApplianceOut)
def get_appliance(appliance_id: str, storage: Storage = Depends(get_storage)):
    appliance = storage.get_appliance(appliance_id)
    if not appliance:
        raise HTTPException(status_code=404, detail="Appliance not found")
    return appliance


@router.post("", response_model=ApplianceOut, status_code=201)
def create_appliance(
    payload: ApplianceIn,
    storage: Storage = Depends(get_storage),
    user_id: str = Depends(get_current_user_id),
):
    try:
        appliance = storage.create_appliance({**payload.model_dump(), "user_id": user_id})
    except StorageError as e:
        raise HTTPException(status_code=400, detail=f"Error creating appliance: {e}")
    log.info("appliance created id=%s type=%s", appliance.id, appliance.type)
    return appliance


@router.patch("/{appliance_id}", response_model=ApplianceOut)
def update_appliance(
    appliance_id: str,
    payload: ApplianceUpdate,
    storage: Storage = Depends(get_storage),
):
    try:
        appliance = storage.update_appliance(appliance_id, payload.model_dump(exclude_unset=True))
    except StorageError as e:
        raise HTTPException(status_code=400, detail=f"Error updating appliance: {e}")
    if not appliance:
        raise HTTPException(status_code=404, detail="Appliance not found")
    return appliance


@router.delete("/{appliance_id}", status_code=204)
def delete_appliance(appliance_id: str, storage: Storage = Depends(get_storage)):
    """
    Delete an appliance. Diagnoses and bookings that referenced it are kept
    with their appliance reference cleared. Deleting an unknown id is a no-op.
    """
    try:
        deleted = storage.delete_appliance(appliance_id)
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Error deleting appliance: {e}")
    log.info("appliance delete id=%s deleted=%s", appliance_id, deleted)
    return Response(status_code=204)
