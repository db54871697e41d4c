from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from loguru import logger

from gym_planner.api.dashboard import router as dashboard_router
from gym_planner.api.plans import router as plans_router
from gym_planner.config.settings import settings
from gym_planner.core.logger import setup_logger
from gym_planner.db.session import init_db

setup_logger(level=settings.log_level, log_file=settings.log_file or None, json_logs=settings.log_json)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Ensure database tables exist before serving requests."""
    try:
        init_db()
    except Exception as e:
        logger.error(f"Database initialization failed (non-fatal): {e}")

    if settings.rate_limit_backend == "memory":
        logger.info(
            "Rate limiter state is in-process: counters reset on restart and are not shared across instances"
        )

    yield
    logger.info("Shutting down gym planner API")


app = FastAPI(title="Gym Planner", lifespan=lifespan)

app.include_router(plans_router)
app.include_router(dashboard_router)

logger.info("FastAPI application initialized")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests."""
    logger.debug(f"Request: {request.method} {request.url.path}")
    response = await call_next(request)
    logger.debug(f"Response: {response.status_code} for {request.method} {request.url.path}")
    return response
