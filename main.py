import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notification_engine.application.use_cases.notifications import (
    shutdown_delivery_executor,
)
from notification_engine.config import get_settings
from notification_engine.infrastructure.database import SessionLocal, engine, initialize_database
from notification_engine.infrastructure.repositories import RoleRepository
from notification_engine.interfaces.api.routes import register_routes


def configure_logging() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the database on startup and release resources on shutdown."""

    initialize_database()
    session = SessionLocal()
    try:
        RoleRepository(session).ensure_defaults()
    finally:
        session.close()
    yield
    shutdown_delivery_executor(wait=False)
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    configure_logging()
    app = FastAPI(title="Notification Engine", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
