from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.database import Base, SessionLocal, engine
from .core.errors import register_exception_handlers
from .core.logging_config import configure_logging
from .routers import register_routers
from .schemas import HealthOut
from .seed import seed_dev_data

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
    if settings.DEV_SEED:
        db = SessionLocal()
        try:
            seed_dev_data(db)
        finally:
            db.close()
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENV)
    yield
    engine.dispose()


configure_logging(settings.LOG_LEVEL)

app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/api/health", response_model=HealthOut)
def health():
    return HealthOut(ok=True)


register_routers(app)
