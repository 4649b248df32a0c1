import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import get_llm_client
from app.api.routes import api_router
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.db.session import engine, init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        init_db()
    except SQLAlchemyError as e:
        # requests will surface 503 until the database is reachable
        logger.error("Database initialisation failed: %s", e)
    yield
    engine.dispose()


app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Model-Used"],
)

register_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_PREFIX)


def _database_status() -> str:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Health check could not reach the database: %s", e)
        return "disconnected"
    return "connected"


@app.get("/health")
def health():
    return {
        "uptime": time.monotonic() - STARTED_AT,
        "message": "OK",
        "timestamp": int(time.time() * 1000),
        "database": _database_status(),
        "llmApi": "configured" if get_llm_client().configured else "not configured",
    }


@app.get("/")
def root():
    return {
        "message": f"{settings.APP_NAME} is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
