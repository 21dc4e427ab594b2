"""Dispatch chat websocket events to a chat session."""
from __future__ import annotations

import asyncio
import json
from typing import Any, Dict

from fastapi import WebSocket

from services.chat.chat_session import ChatSession


class ChatSocketHandler:
	"""Route websocket messages for a single chat session and forward its events."""

	def __init__(self, session: ChatSession) -> None:
		self.session = session
		self.outbox: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()
		self._unsubscribe = session.subscribe(self.outbox.put_nowait)
		self._detached = False

	def detach(self) -> None:
		"""Stop listening to the session; later sends become no-ops."""
		self._detached = True
		self._unsubscribe()

	async def pump(self, websocket: WebSocket) -> None:
		"""Forward queued session events until cancelled."""
		while True:
			event = await self.outbox.get()
			await self._send(websocket, event)

	async def handle(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
		"""Process a single inbound websocket payload."""
		request_id = payload.get("request_id")
		message_type = payload.get("type")
		try:
			if message_type == "chat.send":
				accepted = await self.session.send_message(payload.get("text") or "")
				result = {"type": "chat.ack", "accepted": accepted}
			elif message_type == "chat.clear":
				seed = self.session.clear_messages()
				result = {"type": "chat.cleared", "message": seed.to_dict()}
			elif message_type == "chat.api_key":
				await self.session.update_api_key(payload.get("api_key"))
				result = {"type": "chat.api_key.ack", "has_api_key": self.session.has_api_key}
			elif message_type == "chat.snapshot":
				result = {"type": "chat.snapshot", **self.session.snapshot()}
			else:
				raise ValueError("Unsupported message type.")
			result["request_id"] = request_id
			await self._send(websocket, result)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			await self._send_error(websocket, request_id, str(exc))

	async def _send_error(self, websocket: WebSocket, request_id: Any, detail: str) -> None:
		await self._send(websocket, {"type": "error", "request_id": request_id, "detail": detail})

	async def _send(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
		if self._detached:
			return
		await websocket.send_text(json.dumps(payload, ensure_ascii=False))
