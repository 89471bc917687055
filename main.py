import inspect
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from openai import AsyncOpenAI

from dal.history_dal import HistoryStore, KeyValueStorage, SQLiteKeyValueStorage
from routes.analysis_route import router as analysis_router
from routes.chat_route import router as chat_router
from routes.history_route import router as history_router
from services.chat.chat_service import ChatService
from services.chat.conversation import ConversationResponder
from services.chat.input_normalizer import InputNormalizer
from services.chat.playback import PlaybackController
from services.chat.session_store import SessionStore
from services.chat.speech_renderer import SpeechRenderer
from services.openai.dictation_service import DictationService
from services.openai.speech_service import SpeechSynthesizer
from utils.database_init import AsyncDatabaseInitializer
from utils.languages import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"

load_dotenv()  # Load environment variables from .env file if present

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def attach_services(state: Any, openai_client: Any, storage: KeyValueStorage) -> None:
    """Wire the shared services onto `app.state`."""
    state.openai_client = openai_client
    state.history_store = HistoryStore(storage)

    session_store = SessionStore()
    state.session_store = session_store
    state.chat_service = ChatService(
        session_store,
        InputNormalizer(DictationService(openai_client)),
        ConversationResponder(openai_client),
    )
    state.speech_renderer = SpeechRenderer(session_store, SpeechSynthesizer(openai_client))
    state.playback_controller = PlaybackController(session_store)


async def _close_client(client: Any) -> None:
    aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
    if aclose is None:
        return
    try:
        if inspect.iscoroutinefunction(aclose):
            await aclose()
        else:
            result = aclose()
            if inspect.isawaitable(result):
                await result
    except Exception as exc:
        logger.warning("Error while closing OpenAI client: %s", exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the SQLite key-value database (at DATABASE_DIR/app.db)
      - the OpenAI async client
      - the chat session store and the services built on it
    and attach them to `app.state`.
    """
    db_initializer = AsyncDatabaseInitializer()
    await db_initializer.ensure_database()
    app.state.db_initializer = db_initializer

    if not os.getenv("OPENAI_API_KEY"):
        raise RuntimeError("OPENAI_API_KEY environment variable is not set")

    try:
        openai_client = AsyncOpenAI()
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc

    attach_services(app.state, openai_client, SQLiteKeyValueStorage(db_initializer))
    logger.info("Verdant Sentinel started (database at %s)", db_initializer.db_path)

    try:
        yield
    finally:
        client = getattr(app.state, "openai_client", None)
        if client is not None:
            await _close_client(client)


def create_app(use_lifespan: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Tests pass `use_lifespan=False` and wire `app.state` with `attach_services`.
    """
    app = FastAPI(title="Verdant Sentinel", lifespan=lifespan if use_lifespan else None)

    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the frontend index page from the public directory.
        """
        index_path = PUBLIC_DIR / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_path)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that reports which shared services are available.
        """
        has_history = hasattr(request.app.state, "history_store")
        has_openai = getattr(request.app.state, "openai_client", None) is not None
        return {"ok": True, "history_available": has_history, "openai_available": has_openai}

    @app.get("/languages")
    async def languages():
        return {
            "default": DEFAULT_LANGUAGE,
            "supported": [{"value": code, "label": label} for code, label in SUPPORTED_LANGUAGES.items()],
        }

    app.include_router(chat_router)
    app.include_router(analysis_router)
    app.include_router(history_router)

    return app


app = create_app()
