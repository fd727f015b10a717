"""FastAPI application for the device fingerprint registration gate.

Flow:
1. POST /registrations/check - Before creating an account (403 on deny)
2. Pipeline creates and commits the account
3. POST /registrations/complete - Record the fingerprint association
4. GET /fingerprints/{fingerprint}/count - Inspect a fingerprint's count
5. DELETE /users/{user_id}/fingerprints - Account deletion cleanup
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import Depends, FastAPI
from pydantic import BaseModel

from fingerprint_gate.config import GateConfig
from fingerprint_gate.db.database import init_db
from fingerprint_gate.routes import get_gate_config
from fingerprint_gate.routes import router as gate_router

load_dotenv(".env.local")
load_dotenv()  # Also try default .env

logger = logging.getLogger("fingerprint-gate-api")


# =============================================================================
# App Lifecycle
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate configuration and optionally create tables on startup."""
    config = get_gate_config()
    logger.info(
        f"Fingerprint gate starting: threshold={config.threshold}, "
        f"store_timeout={config.store_timeout_seconds}s"
    )
    if os.getenv("FINGERPRINT_GATE_CREATE_TABLES", "").lower() in ("1", "true", "yes"):
        # Development only; use Alembic migrations in production
        await init_db()
    yield


app = FastAPI(
    title="Fingerprint Gate API",
    description="Registration-time device fingerprint threshold gate",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(gate_router)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    threshold: int


@app.get("/health", response_model=HealthResponse)
async def health_check(config: GateConfig = Depends(get_gate_config)):
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        threshold=config.threshold,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
