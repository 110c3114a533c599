from __future__ import annotations

import os
import tempfile
from typing import List

import pytest
from fastapi.testclient import TestClient

# Point the app at a throwaway in-memory database and log dir BEFORE importing
# it, so the engine and settings are built from these values.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="smartassist-logs-")
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("STRIPE_SECRET_KEY", None)

from smartassist.config import PLACEHOLDER_USER_ID, get_settings  # noqa: E402

get_settings.cache_clear()

from smartassist.ai import (  # noqa: E402
    AIError, DiagnosisResult, ImageAnalysisResult, extract_identified_issues,
)
from smartassist.db import SessionLocal, engine  # noqa: E402
from smartassist.deps import get_ai_client, get_payment_gateway  # noqa: E402
from smartassist.main import app  # noqa: E402
from smartassist.models import Base  # noqa: E402
from smartassist.payments import PaymentError, PaymentIntent, to_minor_units  # noqa: E402
from smartassist.seed import seed_database  # noqa: E402

DEFAULT_REPLY = "I can see error code E4 and a small leak near the door seal. 1. Unplug the unit..."


class FakeAI:
    """Stands in for AIClient; records calls, never touches the network."""

    def __init__(self, reply: str = DEFAULT_REPLY):
        self.reply = reply
        self.fail_with = None
        self.calls: List[tuple] = []

    def diagnose_issue(self, issue, appliance_type=None, brand=None, model=None, conversation_history=None):
        self.calls.append(("diagnose", issue, list(conversation_history or [])))
        if self.fail_with:
            raise AIError(f"Failed to get AI diagnosis: {self.fail_with}")
        return DiagnosisResult(self.reply, self.reply, self.reply)

    def analyze_appliance_image(self, base64_image, appliance_type=None, user_description=None):
        self.calls.append(("image", base64_image, user_description))
        if self.fail_with:
            raise AIError(f"Failed to analyze image: {self.fail_with}")
        return ImageAnalysisResult(self.reply, self.reply, extract_identified_issues(self.reply))


class FakePayments:
    """Stands in for PaymentGateway."""

    def __init__(self):
        self.calls: List[float] = []
        self.fail_with = None

    def create_payment_intent(self, amount: float) -> PaymentIntent:
        self.calls.append(amount)
        if self.fail_with:
            raise PaymentError(self.fail_with)
        n = len(self.calls)
        return PaymentIntent(id=f"pi_test_{n}", client_secret=f"pi_test_{n}_secret_abc",
                             amount=to_minor_units(amount), currency="usd")


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Session-wide FastAPI test client."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def fresh_db():
    """Empty schema plus the placeholder user for every test."""
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    db = SessionLocal()
    try:
        seed_database(db, technicians=False)
    finally:
        db.close()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fake_ai() -> FakeAI:
    fake = FakeAI()
    app.dependency_overrides[get_ai_client] = lambda: fake
    return fake


@pytest.fixture
def fake_payments() -> FakePayments:
    fake = FakePayments()
    app.dependency_overrides[get_payment_gateway] = lambda: fake
    return fake


@pytest.fixture
def technicians(db_session):
    """The demo technicians, as JSON-ish dicts keyed by email."""
    seed_database(db_session, user_id=PLACEHOLDER_USER_ID)
    from smartassist.models import Technician
    return {t.email: t.id for t in db_session.query(Technician).all()}
