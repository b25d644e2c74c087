import logging
from contextlib import asynccontextmanager

from anyio import to_thread
from anyio.from_thread import BlockingPortal
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.application.use_cases.notifications import BackgroundDispatcher, DeliveryRecordStore
from app.config import get_settings
from app.infrastructure.database import SessionLocal, engine, initialize_database
from app.infrastructure.logging import setup_logging
from app.infrastructure.notifications import realtime_push_gateway
from app.interfaces.api.dependencies import build_orchestrator
from app.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the notification services on startup and release them on shutdown."""

    settings = get_settings()
    setup_logging(settings.log_level)
    initialize_database()

    orchestrator = build_orchestrator(settings, SessionLocal, realtime_push_gateway)
    dispatcher = BackgroundDispatcher(max_workers=settings.background_max_workers)
    dispatcher.start()

    app.state.session_factory = SessionLocal
    app.state.record_store = DeliveryRecordStore(SessionLocal)
    app.state.push_gateway = realtime_push_gateway
    app.state.orchestrator = orchestrator
    app.state.dispatcher = dispatcher

    async with BlockingPortal() as portal:
        realtime_push_gateway.bind_portal(portal)
        logger.info("Notification service started (%s)", settings.app_env)
        try:
            yield
        finally:
            # Running dispatches may still need the portal to reach websockets.
            await to_thread.run_sync(dispatcher.shutdown)
            await to_thread.run_sync(orchestrator.close)
            realtime_push_gateway.bind_portal(None)

    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title="Parts notification service", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[get_settings().app_base_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
