"""Date Poll web application."""
import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from datepoll.core.config import settings
from datepoll.core.errors import register_exception_handlers
from datepoll.core.scheduler import shutdown_scheduler, start_scheduler
from datepoll.poll.service import EventService
from datepoll.poll.sweeper import ExpirySweeper
from datepoll.routes import events, responses, sweep
from datepoll.storage import build_storage

# Configure logging
log_kwargs = {}
if settings.log_file:
    log_path = Path(settings.log_file).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    log_kwargs["filename"] = str(log_path)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    **log_kwargs,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    # Startup
    logger.info("Starting Date Poll application")
    storage = build_storage(settings)
    storage.open()
    app.state.event_service = EventService(storage.events, storage.responses)
    app.state.sweeper = ExpirySweeper(
        storage.events,
        storage.responses,
        retention=timedelta(days=settings.retention_days),
    )
    scheduler = start_scheduler(app.state.sweeper, settings.sweep_interval_minutes)
    yield
    # Shutdown
    shutdown_scheduler(scheduler)
    storage.close()
    logger.info("Date Poll application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Scheduling polls: propose dates, collect availability, find the best slot",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(events.router)
app.include_router(responses.router)
app.include_router(sweep.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
