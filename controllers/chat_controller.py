"""Chat session helpers for the HTTP routes."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request

from services.chat.chat_session import ChatSession
from services.chat.session_store import ChatSessionStore


def _store(request: Request) -> ChatSessionStore:
	store = getattr(request.app.state, "chat_sessions", None)
	if store is None:
		raise HTTPException(status_code=500, detail="Chat session store unavailable")
	return store


def _session(request: Request, session_id: str) -> ChatSession:
	try:
		return _store(request).get(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc


async def start_chat(request: Request) -> Dict[str, Any]:
	"""Create a new chat session seeded with its greeting."""
	session = await _store(request).create()
	return session.snapshot()


async def get_chat(request: Request, session_id: str) -> Dict[str, Any]:
	return _session(request, session_id).snapshot()


async def send_chat_message(request: Request, session_id: str, text: str, wait: bool = True) -> Dict[str, Any]:
	"""Submit a user message; with `wait`, return after the reply is fully revealed."""
	session = _session(request, session_id)
	accepted = await session.send_message(text)
	if accepted and wait:
		await session.wait_until_idle()
	return {"accepted": accepted, **session.snapshot()}


async def clear_chat(request: Request, session_id: str) -> Dict[str, Any]:
	session = _session(request, session_id)
	session.clear_messages()
	return session.snapshot()


async def update_chat_api_key(request: Request, session_id: str, api_key: Optional[str]) -> Dict[str, Any]:
	"""Store (or clear, when blank) the credential used by the session."""
	session = _session(request, session_id)
	await session.update_api_key(api_key)
	snapshot = session.snapshot()
	return {
		"session_id": session_id,
		"has_api_key": snapshot["has_api_key"],
		"masked_api_key": snapshot["masked_api_key"],
	}


async def end_chat(request: Request, session_id: str) -> Dict[str, Any]:
	try:
		await _store(request).remove(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return {"session_id": session_id, "closed": True}
