"""FastAPI application: lifecycle, routes, dispatcher."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import settings
from app.db import create_tables, dispose_db, init_db
from app.routes import accounts_router, content_router, images_router, published_router, schedule_router
from app.services.dispatcher import ScheduleDispatcher, set_dispatcher
from app.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: logging, DB tables, dispatcher (restoring pending jobs). Shutdown: dispatcher, engine."""
    setup_logging()
    factory = init_db()
    try:
        await create_tables()
    except Exception as e:
        logger.warning("create_tables_failed", error=str(e))
    dispatcher = None
    if settings.dispatch_enabled:
        dispatcher = ScheduleDispatcher()
        dispatcher.start()
        async with factory() as session:
            await dispatcher.restore(session)
    set_dispatcher(dispatcher)
    yield
    if dispatcher is not None:
        dispatcher.shutdown()
    set_dispatcher(None)
    await dispose_db()


app = FastAPI(
    title="Bingo Social",
    description="Schedule social posts and generate social images with Gemini",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(schedule_router)
app.include_router(images_router)
app.include_router(content_router)
app.include_router(accounts_router)
app.include_router(published_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
