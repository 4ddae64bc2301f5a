"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import DBAPIError

from meetcal.config import settings
from meetcal.core.errors import AppError, app_exception_handler, store_exception_handler
from meetcal.core.logging import setup_logging
from meetcal.db.database import engine, Base

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables (dev only; use migrations in production)
    import meetcal.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    # Shutdown: close connections
    await engine.dispose()


app = FastAPI(
    title="Meetcal API",
    description="Shared availability calendar with friend meetup suggestions",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AppError, app_exception_handler)
app.add_exception_handler(DBAPIError, store_exception_handler)

# --- Routes ---
from meetcal.api.routes import auth, profile, friends, availability, suggestions  # noqa: E402

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(profile.router, prefix="/api/profile", tags=["profile"])
app.include_router(friends.router, prefix="/api/friends", tags=["friends"])
app.include_router(availability.router, prefix="/api/availability", tags=["availability"])
app.include_router(suggestions.router, prefix="/api/suggestions", tags=["suggestions"])


@app.get("/health")
async def health_check():
    return {"status": "ok"}
