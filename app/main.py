# app/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging_setup import setup_logging
from app.api.router import api_router
from app.api.exception_handlers import register_exception_handlers

setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.on_event("startup")
def _sync_permission_catalog():
    if not settings.PERMISSIONS_SYNC_ON_STARTUP:
        return

    from app.db.base import Base, import_models
    from app.db.session import SessionLocal, engine
    from app.navigation.nav_generator import log_routes_missing_nav
    from app.services.permission_sync import sync_permissions

    import_models()
    Base.metadata.create_all(bind=engine)
    if settings.is_development:
        log_routes_missing_nav()

    db = SessionLocal()
    try:
        result = sync_permissions(db)
        logger.info("Startup permission sync: %s", result.reason)
    finally:
        db.close()


# Health
@app.get("/")
def root():
    return {"message": f"{settings.PROJECT_NAME} API running", "version": "v1"}
