"""Learning Center Admin - FastAPI Application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api.pages import router as pages_router
from app.api.v1.router import api_router
from app.core.config import settings
from app.core.logging_config import configure_logging
from app.services.identity import IdentityProvider
from app.services.session import SessionRegistry

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.identity_provider = IdentityProvider()
    app.state.session_registry = SessionRegistry()
    yield
    await app.state.identity_provider.aclose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Include API routes
app.include_router(api_router, prefix=settings.API_V1_PREFIX)

# Uploaded receipts
app.mount("/static", StaticFiles(directory="static", check_dir=False), name="static")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


# Pages last: the page router catches every remaining GET path
app.include_router(pages_router)
