import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from dal.credential_dal import CredentialDAL
from routes.chat_route import router as chat_router
from routes.chat_ws import router as chat_ws_router
from services.chat.credential_store import CredentialStore
from services.chat.reference_loader import ReferenceContextLoader
from services.chat.reply_router import ReplyRouter
from services.chat.session_store import ChatSessionStore
from utils.database_init import AsyncDatabaseInitializer

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the SQLite database backing the credential store (DATABASE_DIR/chat.db)
      - the process-wide reference document loader and reply router
      - the chat session registry
    and attach them to `app.state`.
    """
    db_initializer = AsyncDatabaseInitializer()
    await db_initializer.ensure_database()
    app.state.db_initializer = db_initializer

    credential_store = CredentialStore(CredentialDAL(db_initializer))
    reference_loader = ReferenceContextLoader()
    app.state.credential_store = credential_store
    app.state.reference_loader = reference_loader
    app.state.chat_sessions = ChatSessionStore(credential_store, reference_loader, ReplyRouter())

    try:
        yield
    finally:
        # Cancels pending reveals and in-flight replies of every session.
        await app.state.chat_sessions.close_all()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(lifespan=lifespan)

    # Serve static assets (including the reference book) from the public directory, if it exists.
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
        Simple health check reporting the reference document and default credential.
        """
        loader = getattr(request.app.state, "reference_loader", None)
        credential_store = getattr(request.app.state, "credential_store", None)
        return {
            "ok": True,
            "reference_loaded": bool(loader and loader.loaded),
            "default_api_key": bool(credential_store and credential_store.has_default),
        }

    # Register application routers
    app.include_router(chat_router)
    app.include_router(chat_ws_router)

    return app


app = create_app()
