# mushi/main.py
import asyncio

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from mushi.core.config import settings
from mushi.core.error_handlers import (
    fetch_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from mushi.core.exceptions import FetchError
from mushi.core.logging import setup_logging
from mushi.db.database import get_database
from mushi.db.store import USERS
from mushi.middleware.session_redirect import SessionRedirectMiddleware

# Routers
from mushi.routes.profile import profile_router
from mushi.routes.seed import seed_router
from mushi.routes.templates import template_router

logger = setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)

# ------------------------
# App init
# ------------------------
app = FastAPI(title="Mushi Templates API")

# ------------------------
# CORS / session routing
# ------------------------
app.add_middleware(SessionRedirectMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ------------------------
# Routes
# ------------------------
app.include_router(template_router, prefix="/api/templates")
app.include_router(profile_router, prefix="/api")
app.include_router(seed_router, prefix="/api/seed")

# ------------------------
# Exception handlers
# ------------------------
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(FetchError, fetch_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


# ------------------------
# Health & root
# ------------------------
@app.get("/")
async def root():
    return {"message": "Welcome to Mushi Templates API"}


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


# ------------------------
# DB connectivity check
# ------------------------
@app.on_event("startup")
async def startup_db_check():
    try:
        await asyncio.wait_for(get_database()[USERS].find_one({}), timeout=5)
        logger.info("MongoDB connected successfully.")
    except Exception as e:
        logger.error("MongoDB connection failed: %s", e)
