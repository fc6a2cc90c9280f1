# app/main.py
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.api import routes_draft, routes_league
from app.db.engine import SessionLocal, engine
from app.db.models import Base
from app.services.sweeper import run_sweeper

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.validate_at_startup()
    Base.metadata.create_all(bind=engine)

    # Deadlines are advisory unless the sweeper is switched on
    stop = asyncio.Event()
    sweeper = None
    if settings.DRAFT_AUTOPICK_SWEEP:
        sweeper = asyncio.create_task(run_sweeper(SessionLocal, settings.DRAFT_SWEEP_INTERVAL_SECONDS, stop))
    try:
        yield
    finally:
        stop.set()
        if sweeper is not None:
            await sweeper


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

logger.info("CORS allow_origins = %s", settings.CORS_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)

# Routers
app.include_router(routes_draft.router)
app.include_router(routes_league.router)
app.include_router(routes_league.goals_router)


@app.get("/health")
def health():
    return {"ok": True, "env": settings.APP_ENV}
