# smartassist/deps.py
"""
FastAPI dependencies shared by the routers.

Everything here reads the Settings the running app was created with
(app.state.settings), never the process-wide environment.

get_current_user_id is the one place that decides who "the current user" is.
There is no login yet, so it returns the configured placeholder id; a real
session lookup replaces this function and nothing else.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .ai import AIClient
from .config import Settings
from .db import get_db
from .payments import PaymentGateway
from .storage import Storage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(db: Session = Depends(get_db)) -> Storage:
    return Storage(db)


def get_current_user_id(settings: Settings = Depends(get_app_settings)) -> str:
    return settings.placeholder_user_id


def get_ai_client(settings: Settings = Depends(get_app_settings)) -> AIClient:
    return AIClient(settings)


def get_payment_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payments
