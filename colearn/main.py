import logging
import random
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from colearn import __version__, config
from colearn.ai.gemini_core import GeminiKeyManager
from colearn.ai.services import AIService
from colearn.arena.router import router as arena_router
from colearn.auth.router import router as auth_router
from colearn.chat.router import router as chat_router
from colearn.classes.router import router as classes_router
from colearn.courses.router import router as courses_router
from colearn.errors import AIServiceError, CoLearnError
from colearn.gamification.router import router as gamification_router
from colearn.log import setup_logging
from colearn.storage import DocumentStore, MongoDocumentStore, create_store
from colearn.system.router import router as system_router

logger = logging.getLogger(__name__)


def create_ai_service() -> AIService:
    manager = GeminiKeyManager(
        keys={
            "primary": config.GEMINI_API_KEY,
            "tutor": config.GEMINI_TUTOR_API_KEY,
            "backup": config.GEMINI_BACKUP_API_KEY,
        },
        model_name=config.GEMINI_MODEL,
    )
    return AIService(manager)


def create_app(
    store: Optional[DocumentStore] = None,
    ai: Optional[AIService] = None,
    rng: Optional[random.Random] = None
) -> FastAPI:
    """
    Build the API. Anything not passed in is created at startup from config.
    """
    app = FastAPI(title="CoLearn API", version=__version__)

    app.state.store = store
    app.state.ai = ai
    app.state.rng = rng

    @app.on_event("startup")
    async def startup_event():
        setup_logging()
        if app.state.store is None:
            app.state.store = create_store(config.STORE_BACKEND, config.MONGO_URL, config.MONGO_DB_NAME)
            if isinstance(app.state.store, MongoDocumentStore):
                await app.state.store.create_indexes()
        if app.state.ai is None:
            app.state.ai = create_ai_service()
        if app.state.rng is None:
            app.state.rng = random.Random()
        logger.info("CoLearn API %s started", __version__)

    @app.on_event("shutdown")
    async def shutdown_event():
        if app.state.store is not None:
            await app.state.store.close()

    @app.exception_handler(CoLearnError)
    async def colearn_error_handler(request: Request, exc: CoLearnError):
        if isinstance(exc, AIServiceError):
            logger.error("AI failure on %s %s: %s", request.method, request.url.path, exc.message, exc_info=exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ==================== ROUTER REGISTRATION ====================
    app.include_router(auth_router)
    app.include_router(courses_router)
    app.include_router(gamification_router)
    app.include_router(arena_router)
    app.include_router(classes_router)
    app.include_router(chat_router)
    app.include_router(system_router)
    # ============================================================

    return app


app = create_app()
