"""WebSocket endpoint for live chat with incremental replies."""

from __future__ import annotations

import asyncio
import json

from fastapi import APIRouter, Depends, HTTPException, WebSocket
from starlette.websockets import WebSocketDisconnect

from services.chat.session_store import ChatSessionStore
from services.chat.ws_chat import ChatSocketHandler

router = APIRouter()


def _require_chat_sessions(websocket: WebSocket) -> ChatSessionStore:
	store = getattr(websocket.app.state, "chat_sessions", None)
	if store is None:
		raise HTTPException(status_code=500, detail="Chat session store unavailable")
	return store


@router.websocket("/ws/chat/{session_id}")
async def chat_socket(websocket: WebSocket, session_id: str, store: ChatSessionStore = Depends(_require_chat_sessions)):
	"""Stream session events and accept chat commands over one websocket."""
	await websocket.accept()
	try:
		session = store.get(session_id)
	except KeyError:
		await websocket.send_text(json.dumps({"type": "error", "detail": "Session not found"}))
		await websocket.close()
		return

	handler = ChatSocketHandler(session)
	pump = asyncio.create_task(handler.pump(websocket))
	# Commands run as tasks so a clear can arrive while a send is pending.
	# They are left to finish after a disconnect; the session outlives the socket.
	inflight = set()
	while True:
		try:
			raw = await websocket.receive_text()
		except WebSocketDisconnect:
			break
		except Exception:
			await websocket.send_text(json.dumps({"type": "error", "detail": "Invalid websocket frame"}))
			continue
		try:
			payload = json.loads(raw)
		except Exception:
			await websocket.send_text(json.dumps({"type": "error", "detail": "Payload must be JSON"}))
			continue
		if not isinstance(payload, dict):
			await websocket.send_text(json.dumps({"type": "error", "detail": "Payload must be a JSON object"}))
			continue
		task = asyncio.create_task(handler.handle(websocket, payload))
		inflight.add(task)
		task.add_done_callback(inflight.discard)

	handler.detach()
	pump.cancel()
	try:
		await websocket.close()
	except Exception:
		pass
