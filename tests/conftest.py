from pathlib import Path
from typing import Optional

import pytest

from dal.credential_dal import CredentialDAL
from services.chat.chat_session import ChatSession
from services.chat.credential_store import CredentialStore
from services.chat.reference_loader import ReferenceContextLoader
from services.chat.reply_router import ReplyRouter
from services.chat.revealer import IncrementalRevealer
from utils.database_init import AsyncDatabaseInitializer
from model_fakes import FakeModelClient


@pytest.fixture
def credential_store(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CredentialStore:
    monkeypatch.setenv("DATABASE_DIR", str(tmp_path / "db"))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return CredentialStore(CredentialDAL(AsyncDatabaseInitializer()), use_env_default=False)


@pytest.fixture
def reference_file(tmp_path: Path) -> Path:
    path = tmp_path / "book.md"
    path.write_text("# 富老板 · 穷老板\n\n富老板购买的是生产资料。", encoding="utf-8")
    return path


@pytest.fixture
def session_factory(credential_store: CredentialStore, tmp_path: Path):
    """Build a started session with a fast revealer and no fallback delay.

    Must be awaited inside a running event loop.
    """

    async def _build(
        client: Optional[FakeModelClient] = None,
        credential: Optional[str] = None,
        reference_path: Optional[Path] = None,
        delay_range: tuple[float, float] = (0.0, 0.0),
    ) -> ChatSession:
        if credential:
            await credential_store.set(credential)
        router = ReplyRouter(
            client_factory=lambda _credential: client or FakeModelClient(),
            delay_range=delay_range,
        )
        loader = ReferenceContextLoader(reference_path or tmp_path / "missing.md")
        session = ChatSession(
            "test-session",
            credential_store,
            loader,
            router,
            revealer=IncrementalRevealer(interval=0),
        )
        await session.start()
        return session

    return _build
