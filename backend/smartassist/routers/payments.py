# smartassist/routers/payments.py
from __future__ import annotations

import logging
import math

from fastapi import APIRouter, Depends, HTTPException

from smartassist.deps import get_payment_gateway, get_storage
from smartassist.payments import PaymentError, PaymentGateway
from smartassist.schemas import PaymentIntentIn, PaymentIntentOut
from smartassist.storage import Storage, StorageError

router = APIRouter(prefix="/api", tags=["payments"])
log = logging.getLogger(__name__)


@router.post("/create-payment-intent", response_model=PaymentIntentOut)
def create_payment_intent(
    payload: PaymentIntentIn,
    storage: Storage = Depends(get_storage),
    payments: PaymentGateway = Depends(get_payment_gateway),
):
    """
    amount is in major units (dollars); the processor receives cents.
    Zero, negative, missing or non-finite (NaN, Infinity) amounts are refused before the processor is touched.
    """
    if payload.amount is None or not math.isfinite(payload.amount) or payload.amount <= 0:
        raise HTTPException(status_code=400, detail="Invalid amount")

    booking = None
    if payload.booking_id:
        booking = storage.get_booking(payload.booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")

    try:
        intent = payments.create_payment_intent(payload.amount)
    except PaymentError as e:
        log.error("payment intent failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Error creating payment intent: {e}")

    if booking is not None:
        try:
            storage.update_booking(booking.id, {"stripe_payment_intent_id": intent.id})
        except StorageError as e:
            raise HTTPException(status_code=500, detail=f"Error creating payment intent: {e}")

    return PaymentIntentOut(client_secret=intent.client_secret)
