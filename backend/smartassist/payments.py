"""
smartassist/payments.py
Payment delegate: creates payment intents on the Stripe REST API.

PaymentGateway is the once-initialized handle kept on app.state. It is built
from Settings at startup, but the underlying client is only constructed on
first use, so the API boots (and every other route works) without a key.
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import httpx

from .config import Settings
from .timing import timed_block


class PaymentError(RuntimeError):
    """Payment provider is not configured or rejected the request."""


@dataclass
class PaymentIntent:
    id: str
    client_secret: str
    amount: int
    currency: str


def to_minor_units(amount: float) -> int:
    """170.5 -> 17050 (cents). Half-up rounding on the decimal value, not the float."""
    if not math.isfinite(amount):
        raise PaymentError(f"amount must be a finite number, got {amount!r}")
    cents = (Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)


class StripeClient:
    def __init__(self, secret_key: str, api_base: str, timeout: float = 30.0) -> None:
        self.secret_key = secret_key
        self.api_base = api_base
        self.timeout = timeout

    def create_payment_intent(self, amount_minor: int, currency: str) -> PaymentIntent:
        url = f"{self.api_base}/payment_intents"
        form = {
            "amount": str(amount_minor),
            "currency": currency,
            "automatic_payment_methods[enabled]": "true",
        }
        with timed_block("payment-intent", amount=amount_minor, currency=currency):
            try:
                with httpx.Client(timeout=self.timeout) as client:
                    resp = client.post(url, data=form, auth=(self.secret_key, ""))
            except httpx.HTTPError as e:
                raise PaymentError(f"{type(e).__name__}: {e}") from e

            if resp.status_code >= 400:
                try:
                    message = resp.json()["error"]["message"]
                except (ValueError, KeyError, TypeError):
                    message = resp.text[:500]
                raise PaymentError(f"HTTP {resp.status_code}: {message}")

            try:
                data = resp.json()
                return PaymentIntent(
                    id=data["id"],
                    client_secret=data["client_secret"],
                    amount=int(data.get("amount", amount_minor)),
                    currency=data.get("currency", currency),
                )
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                raise PaymentError(f"unexpected response format: {e}") from e


class PaymentGateway:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._client: Optional[StripeClient] = None
        self._lock = threading.Lock()

    def client(self) -> StripeClient:
        if self._client is None:
            with self._lock:
                if self._client is None:
                    if not self.settings.stripe_secret_key:
                        raise PaymentError("STRIPE_SECRET_KEY is not configured")
                    self._client = StripeClient(
                        self.settings.stripe_secret_key,
                        self.settings.stripe_api_base,
                    )
        return self._client

    def create_payment_intent(self, amount: float) -> PaymentIntent:
        return self.client().create_payment_intent(
            to_minor_units(amount), self.settings.payment_currency
        )
