import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tournament_scheduler.database import init_db
from tournament_scheduler.logging_config import setup_logging
from tournament_scheduler.routes import blockers, courts, matches, players, tournaments, validation

APP_NAME = "Tournament Scheduler API"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()  # Use centralized init_db() which imports models and creates tables
    logger.info("%s started with %d routes", APP_NAME, len(app.routes))
    yield


app = FastAPI(title=APP_NAME, lifespan=lifespan)

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(tournaments.router, prefix="/api", tags=["tournaments"])
app.include_router(players.router, prefix="/api", tags=["players"])
app.include_router(courts.router, prefix="/api", tags=["courts"])
app.include_router(matches.router, prefix="/api", tags=["matches"])

# Conflict engine: drag-drop validation and the conflicts panel
app.include_router(validation.router, prefix="/api", tags=["validation"])
app.include_router(blockers.router, prefix="/api", tags=["blockers"])


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint to verify the service is up"""
    return {"app_name": APP_NAME, "status": "healthy"}
