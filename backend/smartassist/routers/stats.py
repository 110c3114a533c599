# smartassist/routers/stats.py
from fastapi import APIRouter, Depends, HTTPException

from smartassist.deps import get_current_user_id, get_storage
from smartassist.schemas import StatsOut, UserOut
from smartassist.stats import compute_stats
from smartassist.storage import Storage

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/stats", response_model=StatsOut)
def get_stats(
    storage: Storage = Depends(get_storage),
    user_id: str = Depends(get_current_user_id),
):
    """Dashboard counters for the current user, computed on read."""
    return compute_stats(
        storage.get_user_appliances(user_id),
        storage.get_user_diagnoses(user_id),
        storage.get_user_bookings(user_id),
    )


@router.get("/me", response_model=UserOut)
def get_me(
    storage: Storage = Depends(get_storage),
    user_id: str = Depends(get_current_user_id),
):
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
