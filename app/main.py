from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import inspect

from app.config import settings
from app.database import engine
from app.logging_config import setup_logging
from app.middleware.logging import LoggingMiddleware
from app.middleware.rate_limit import limiter
from app.routers import challenges, licenses
from app.services.integrity_service import RESPONSE_HASH_HEADER

# Database tables are managed by Alembic migrations
# Run: alembic upgrade head
REQUIRED_TABLES = {"licenses"}


def check_database_tables() -> None:
    """Fail fast if migrations have not been applied."""
    existing = set(inspect(engine).get_table_names())
    missing = REQUIRED_TABLES - existing
    if missing:
        raise RuntimeError(
            f"Database tables missing: {', '.join(sorted(missing))}. "
            "Run `alembic upgrade head` before starting the server."
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and verify the database on startup."""
    setup_logging()
    check_database_tables()
    yield


app = FastAPI(
    title="License Integrity Service",
    description="License validation with challenge-bound response hashes",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Request logging / correlation IDs
app.add_middleware(LoggingMiddleware)

# CORS (browser verifiers must be able to read the hash header)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[RESPONSE_HASH_HEADER, "X-Correlation-ID"],
)

# Routers
app.include_router(challenges.router, prefix="/api/v1", tags=["challenges"])
app.include_router(licenses.router, prefix="/api/v1", tags=["license"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
