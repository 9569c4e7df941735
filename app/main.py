import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.auth import router as auth_router
from app.api.dashboard import router as dashboard_router
from app.api.reports import router as reports_router
from app.api.transactions import router as transactions_router
from app.db.session import build_engine, build_sessionmaker
from app.db.settings import get_settings
from app.services.auth import ensure_admin

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    engine = build_engine(settings)
    app.state.sessionmaker = build_sessionmaker(engine)
    logger.info("Database engine ready")

    if settings.seed_admin:
        async with app.state.sessionmaker() as session:
            await ensure_admin(session, settings)

    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Database engine disposed")


app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)


@app.get("/health", tags=["health"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(transactions_router)
app.include_router(dashboard_router)
app.include_router(reports_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.app_host, port=settings.app_port, log_level=settings.log_level.lower())
