import logging
import sqlite3
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from onboarding.config import settings
from onboarding.database import init_db
from onboarding.routers import (
    auth,
    company,
    data,
    documents,
    flat_services,
    gear,
    offers,
    overrides,
    profiles,
    public,
    render,
    signature_links,
    signatures,
    templates,
    tiers,
)
from onboarding.utils.filesystem import ensure_data_dirs

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("onboarding")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create the data dir, apply schema, integrity-check
    ensure_data_dirs()
    init_db(settings.db_path)
    try:
        conn = sqlite3.connect(str(settings.db_path))
        result = conn.execute("PRAGMA integrity_check").fetchone()
        conn.close()
        if result and result[0] == "ok":
            logger.info("Database integrity check passed.")
        else:
            logger.error("DATABASE INTEGRITY CHECK FAILED: %s", result)
    except sqlite3.Error as exc:
        logger.error("Could not run startup integrity check: %s", exc)
    yield


app = FastAPI(
    title="Onboarding Documents",
    description="Hiree onboarding documents, pricing schedules and signing links",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Could not save changes. Please try again."})


app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(company.router, prefix=settings.api_prefix)
app.include_router(profiles.router, prefix=settings.api_prefix)
app.include_router(flat_services.router, prefix=settings.api_prefix)
app.include_router(tiers.router, prefix=settings.api_prefix)
app.include_router(gear.router, prefix=settings.api_prefix)
app.include_router(gear.profile_router, prefix=settings.api_prefix)
app.include_router(overrides.router, prefix=settings.api_prefix)
app.include_router(offers.router, prefix=settings.api_prefix)
app.include_router(templates.router, prefix=settings.api_prefix)
app.include_router(signatures.router, prefix=settings.api_prefix)
app.include_router(documents.router, prefix=settings.api_prefix)
app.include_router(signature_links.router, prefix=settings.api_prefix)
app.include_router(data.router, prefix=settings.api_prefix)
app.include_router(public.router, prefix=settings.api_prefix)
app.include_router(public.page_router)
app.include_router(render.router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("onboarding.main:app", host=settings.host, port=settings.port)
