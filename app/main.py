from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.error_handler import custom_exception_handler, request_validation_handler
from app.core.exceptions import BaseAPIException
from app.core.log_config import logger

from app.api.auth import router as auth_router
from app.api.users import router as user_router
from app.api.chats import router as chat_router
from sqlalchemy.exc import SQLAlchemyError

from app.database.engine import async_session, engine, initialize_db
from app.services.persistence_service import PersistenceManager
from app.utils.timing_middleware import TimingMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await initialize_db(engine)
    except SQLAlchemyError as e:
        # Tables are created again on the first successful flush
        logger.warning(f"Could not initialize snapshot store, continuing in memory: {e}")
    persistence = PersistenceManager(async_session, interval=settings.flush_interval_seconds)
    state = await persistence.load()
    if settings.eager_flush:
        state.add_listener(persistence.schedule_flush)
    persistence.start()

    app.state.chat_state = state
    logger.info(f"AmbientChat ready with {len(state.users)} users")
    yield
    await persistence.stop()
    await engine.dispose()

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(BaseAPIException, custom_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_middleware(TimingMiddleware)

app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(user_router, prefix=settings.api_prefix)
app.include_router(chat_router, prefix=settings.api_prefix)
