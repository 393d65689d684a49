import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.db import create_service
from app.fitness.refresh import RefreshTask
from app.fitness.router import raw_router
from app.fitness.router import router as fitness_router
from app.middleware import log_requests

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    service = create_service(settings)
    app.state.service = service
    await service.ensure_loaded()
    refresher = RefreshTask(service, settings.refresh_interval_seconds)
    app.state.refresher = refresher
    refresher.start()
    logger.info("Server starting on port %s (storage=%s)", settings.port, service.backend.name)
    try:
        yield
    finally:
        await refresher.stop()
        await service.aclose()


app = FastAPI(title="Fitness Tracker", version="0.1.0", lifespan=lifespan)
app.middleware("http")(log_requests)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)
app.include_router(fitness_router)
app.include_router(raw_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "fitness": {
            "list": "/api/fitness",
            "all": "/api/fitness/all",
            "by_date": "/api/fitness/{date}",
            "by_year": "/api/fitness/year/{year}",
            "by_month": "/api/fitness/year/{year}/month/{month}",
            "upsert": "POST /api/fitness",
            "raw": "/get?date=YYYY-MM-DD",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
