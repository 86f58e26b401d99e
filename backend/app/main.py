# PhysioDesk backend entrypoint: FastAPI app for patients, attendance and invoices.

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.api import analytics
from backend.app.api import attendance
from backend.app.api import invoices
from backend.app.api import login
from backend.app.api import patients
from backend.app.api import profile
from backend.app.api import register
from backend.app.core.dev_seed import ensure_default_dev_therapist
from backend.app.core.errors import (
    NotFoundError,
    NumberingUnavailable,
    PersistenceFailed,
    PhysioError,
    RenderFailed,
    StoreUnavailable,
    ValidationError,
)
from backend.app.core.logging_config import configure_logging
from backend.app.core.settings import get_settings
from backend.app.crud.memory import get_memory_stores
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.dependencies.stores import get_stores

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.app_name, version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.store_backend == "memory":
    app.dependency_overrides[get_stores] = get_memory_stores
    logger.info("Serving patients, attendance and invoices from in-memory stores")

app.include_router(register.router)
app.include_router(login.router)
app.include_router(profile.router)
app.include_router(patients.router)
app.include_router(attendance.router)
app.include_router(invoices.router)
app.include_router(analytics.router)

ERROR_STATUS = {
    ValidationError: 422,
    NotFoundError: 404,
    NumberingUnavailable: 503,
    StoreUnavailable: 503,
    PersistenceFailed: 500,
    RenderFailed: 500,
}


def status_for(exc: PhysioError) -> int:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


@app.exception_handler(PhysioError)
async def handle_physio_error(request: Request, exc: PhysioError):
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_payload())


@app.get("/")
def read_root():
    return {"app": "PhysioDesk backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def seed_default_dev_therapist():
    db = SessionLocal()
    try:
        ensure_default_dev_therapist(db)
    finally:
        db.close()
