# smartassist/main.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# --- Local imports ---
from .config import Settings, get_settings
from . import db
from .db_check import check_db
from .logging_utils import configure_logging, log_kv, setup_logger
from .payments import PaymentGateway

# Routers
from smartassist.routers import appliances as appliances_router    # /api/appliances
from smartassist.routers import bookings as bookings_router        # /api/bookings
from smartassist.routers import diagnoses as diagnoses_router      # /api/diagnose, /api/diagnoses, /api/analyze-image
from smartassist.routers import payments as payments_router        # /api/create-payment-intent
from smartassist.routers import reviews as reviews_router          # /api/reviews
from smartassist.routers import stats as stats_router              # /api/stats, /api/me
from smartassist.routers import technicians as technicians_router  # /api/technicians


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging()
    app = FastAPI(title="SmartAssist Backend", version="0.1.0")

    # every per-request dependency reads these, not the environment
    app.state.settings = settings
    if settings.database_url == get_settings().database_url:
        app.state.engine, app.state.session_factory = db.engine, db.SessionLocal
    else:
        app.state.engine = db.make_engine(settings.database_url)
        app.state.session_factory = db.make_session_factory(app.state.engine)

    # payment client is built lazily on first use, from these settings
    app.state.payments = PaymentGateway(settings)

    # ---------------------------
    # CORS for the SPA dev server
    # ---------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------------------------
    # Validation errors are 400 with a readable message
    # ---------------------------
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        log_kv(setup_logger("api"), logging.WARNING, event="validation-error", path=request.url.path, detail=message)
        return JSONResponse(status_code=400, content={"detail": message})

    # ---------------------------
    # Register routers
    # ---------------------------
    app.include_router(appliances_router.router)
    app.include_router(diagnoses_router.router)
    app.include_router(technicians_router.router)
    app.include_router(bookings_router.router)
    app.include_router(reviews_router.router)
    app.include_router(payments_router.router)
    app.include_router(stats_router.router)

    # ---------------------------
    # Health routes
    # ---------------------------
    @app.get("/ping")
    def ping():
        return {"message": "pong"}

    @app.get("/health/db")
    def health_db():
        return check_db(app.state.engine)

    return app


app = create_app()


if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run("smartassist.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
