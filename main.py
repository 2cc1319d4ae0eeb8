import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventcraft.config import get_settings
from eventcraft.infrastructure.database import engine, initialize_database
from eventcraft.infrastructure.realtime import notification_publisher
from eventcraft.interfaces.api.routes import register_routes
from eventcraft.jobs.scheduled_tasks import start_scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the database and background scheduler, release them on shutdown."""

    settings = get_settings()
    initialize_database()
    notification_publisher.bind_loop(asyncio.get_running_loop())
    stop_scheduler = start_scheduler(settings) if settings.scheduler_enabled else None
    yield
    if stop_scheduler is not None:
        stop_scheduler.set()
    notification_publisher.bind_loop(None)
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    app = FastAPI(title="EventCraft Notifications", lifespan=lifespan)

    # Allow requests from the web client.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app_base_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
