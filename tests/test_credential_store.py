import asyncio
from pathlib import Path

import pytest

from dal.credential_dal import CredentialDAL
from services.chat.credential_store import CredentialStore, mask_credential
from utils.database_init import AsyncDatabaseInitializer


def test_get_is_empty_without_value_or_default(credential_store: CredentialStore) -> None:
    assert asyncio.run(credential_store.get()) is None


def test_set_then_clear(credential_store: CredentialStore) -> None:
    async def scenario() -> tuple:
        await credential_store.set("sk-stored")
        stored = await credential_store.get()
        await credential_store.clear()
        cleared = await credential_store.get()
        return stored, cleared

    assert asyncio.run(scenario()) == ("sk-stored", None)


def test_stored_value_wins_over_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_DIR", str(tmp_path))
    monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")
    store = CredentialStore(CredentialDAL(AsyncDatabaseInitializer()))
    assert store.has_default is True

    async def scenario() -> tuple:
        before = await store.get()
        await store.set("sk-stored")
        during = await store.get()
        await store.clear()
        after = await store.get()
        return before, during, after

    assert asyncio.run(scenario()) == ("sk-from-env", "sk-stored", "sk-from-env")


def test_stored_value_survives_a_new_initializer(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_DIR", str(tmp_path))

    async def scenario() -> str:
        await CredentialStore(CredentialDAL(AsyncDatabaseInitializer()), use_env_default=False).set("sk-kept")
        return await CredentialStore(CredentialDAL(AsyncDatabaseInitializer()), use_env_default=False).get()

    assert asyncio.run(scenario()) == "sk-kept"


def test_database_dir_is_required(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_DIR", raising=False)
    with pytest.raises(RuntimeError):
        AsyncDatabaseInitializer()


def test_mask_credential() -> None:
    assert mask_credential(None) is None
    assert mask_credential("sk-1234567890abcdefWXYZ") == "sk-1234567...WXYZ"
    assert "shortkey" not in mask_credential("shortkey")
