# clubhouse/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .db import create_db_and_tables
from .errors import ClubhouseError
from . import models  # noqa: F401  registers tables on SQLModel.metadata
from .routers import (
    addresses_routes,
    appointments_routes,
    auth_routes,
    clubs_routes,
    consists_routes,
    evenings_routes,
    hours_routes,
    users_routes,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("Clubhouse API started (%s)", settings.APP_ENV)
    yield


app = FastAPI(title="Clubhouse", lifespan=lifespan)


@app.exception_handler(ClubhouseError)
async def clubhouse_error_handler(request: Request, exc: ClubhouseError):
    logger.debug("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(clubs_routes.router)
app.include_router(addresses_routes.router)
app.include_router(consists_routes.router)
app.include_router(appointments_routes.router)
app.include_router(evenings_routes.router)
app.include_router(hours_routes.router)
