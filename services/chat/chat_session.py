"""Chat session orchestrator: sequences routing, logging and reveal."""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Set

from models.chat_models import ChatMessage, MessageRole, SessionPhase
from services.chat.conversation_log import ConversationLog
from services.chat.credential_store import CredentialStore, mask_credential
from services.chat.errors import InvalidInput, RemoteCallError
from services.chat.fallback_replies import APOLOGY_REPLY, greeting_for
from services.chat.reference_loader import ReferenceContextLoader
from services.chat.reply_router import ReplyRouter
from services.chat.revealer import IncrementalRevealer, RevealHandle
from utils.inline_format import render_inline_html

LOGGER = logging.getLogger(__name__)

Listener = Callable[[Dict[str, Any]], None]


class ChatSession:
	"""One linear conversation with the book assistant.

	States are IDLE -> SENDING -> REVEALING -> IDLE. Only one send may be in
	flight: `send_message` is rejected unless the session is IDLE. Every
	content write goes through `ConversationLog.update_content`, which
	ignores ids that are no longer in the log, so a reply that resolves
	after `clear_messages` or `close` cannot touch the new log.
	"""

	def __init__(
		self,
		session_id: str,
		credential_store: CredentialStore,
		reference_loader: ReferenceContextLoader,
		router: ReplyRouter,
		revealer: Optional[IncrementalRevealer] = None,
	) -> None:
		self.session_id = session_id
		self._credential_store = credential_store
		self._reference_loader = reference_loader
		self._router = router
		self._revealer = revealer or IncrementalRevealer()

		self._log = ConversationLog()
		self._ids = itertools.count(1)
		self._credential: Optional[str] = None
		self._reference_context = ""
		self._phase = SessionPhase.IDLE
		self._pending = False
		self._revealing = False
		self._closed = False

		self._reveal_handle: Optional[RevealHandle] = None
		self._reply_tasks: Set[asyncio.Future] = set()
		self._context_task: Optional[asyncio.Task] = None
		self._listeners: List[Listener] = []

	# ---- lifecycle -------------------------------------------------------

	async def start(self) -> None:
		"""Load the credential, start the context load, then seed the greeting."""
		self._credential = await self._credential_store.get()
		self._context_task = asyncio.ensure_future(self._load_reference_context())
		self._log.reset(self._greeting())
		LOGGER.info("Chat session %s started (credential=%s)", self.session_id, self.has_api_key)

	async def _load_reference_context(self) -> None:
		text = await self._reference_loader.load()
		if not self._closed:
			self._reference_context = text

	async def close(self) -> None:
		"""Tear down the session and drop all state."""
		if self._closed:
			return
		self._closed = True
		self._cancel_reveal()
		# A clear followed by a new send can leave more than one reply outstanding.
		for task in [*self._reply_tasks, self._context_task]:
			if task is not None and not task.done():
				task.cancel()
		self._reply_tasks.clear()
		self._context_task = None
		self._log.clear()
		self._listeners.clear()
		self._phase = SessionPhase.IDLE
		self._pending = False
		self._revealing = False
		LOGGER.info("Chat session %s closed", self.session_id)

	# ---- read-only view --------------------------------------------------

	@property
	def closed(self) -> bool:
		return self._closed

	@property
	def phase(self) -> SessionPhase:
		return self._phase

	@property
	def pending(self) -> bool:
		return self._pending

	@property
	def revealing(self) -> bool:
		return self._revealing

	@property
	def messages(self) -> List[ChatMessage]:
		return self._log.messages

	@property
	def credential(self) -> Optional[str]:
		return self._credential

	@property
	def has_api_key(self) -> bool:
		return bool(self._credential)

	@property
	def reference_context(self) -> str:
		return self._reference_context

	def snapshot(self) -> Dict[str, Any]:
		messages = []
		for message in self._log:
			item = message.to_dict()
			item["html"] = render_inline_html(message.content)
			messages.append(item)
		return {
			"session_id": self.session_id,
			"messages": messages,
			"phase": self._phase.value,
			"pending": self._pending,
			"revealing": self._revealing,
			"has_api_key": self.has_api_key,
			"masked_api_key": mask_credential(self._credential),
			"reference_loaded": self._reference_loader.loaded,
		}

	# ---- observers -------------------------------------------------------

	def subscribe(self, listener: Listener) -> Callable[[], None]:
		"""Register `listener` for session events; returns an unsubscribe callable."""
		self._listeners.append(listener)

		def _unsubscribe() -> None:
			if listener in self._listeners:
				self._listeners.remove(listener)

		return _unsubscribe

	def _emit(self, event: Dict[str, Any]) -> None:
		for listener in list(self._listeners):
			try:
				listener(event)
			except Exception:  # pylint: disable=broad-exception-caught
				LOGGER.exception("Chat session listener failed")

	def _emit_state(self) -> None:
		self._emit({
			"type": "session.state",
			"phase": self._phase.value,
			"pending": self._pending,
			"revealing": self._revealing,
		})

	# ---- operations ------------------------------------------------------

	async def send_message(self, text: str) -> bool:
		"""Submit user text. Returns True if the send was accepted.

		The call returns once the reply has started revealing; use
		`wait_until_idle()` to wait for the full text.
		"""
		try:
			content = self._validate(text)
		except InvalidInput:
			LOGGER.debug("Ignoring empty message for session %s", self.session_id)
			return False
		if self._closed or self._phase is not SessionPhase.IDLE:
			LOGGER.debug("Rejected send for session %s in phase %s", self.session_id, self._phase.value)
			return False

		user_message = self._append(MessageRole.USER, content)
		placeholder = self._append(MessageRole.ASSISTANT, "")
		self._phase = SessionPhase.SENDING
		self._pending = True
		self._emit_state()
		LOGGER.debug("Session %s sending message %s", self.session_id, user_message.id)

		try:
			reply = await self._resolve_reply(content)
		except asyncio.CancelledError:
			self._abort_send(placeholder.id)
			raise
		if reply is None:
			LOGGER.debug("Session %s closed before reply to %s arrived", self.session_id, placeholder.id)
			return True
		if placeholder.id not in self._log:
			LOGGER.warning("Dropping stale reply for message %s in session %s", placeholder.id, self.session_id)
			return True

		self._phase = SessionPhase.REVEALING
		self._revealing = True
		self._emit_state()
		self._reveal_handle = self._revealer.reveal(
			reply,
			on_step=lambda partial: self._apply_step(placeholder.id, partial),
			on_done=lambda: self._finish_reveal(placeholder.id),
			key=placeholder.id,
		)
		return True

	def clear_messages(self) -> ChatMessage:
		"""Replace the log with a fresh greeting and force the session back to IDLE.

		An outstanding remote call is left running; its result is dropped
		when it arrives.
		"""
		self._cancel_reveal()
		seed = self._greeting()
		self._log.reset(seed)
		self._phase = SessionPhase.IDLE
		self._pending = False
		self._revealing = False
		self._emit({"type": "session.reset", "messages": [seed.to_dict()]})
		self._emit_state()
		return seed

	async def update_api_key(self, value: Optional[str]) -> None:
		"""Store or clear the credential. The current log is left unchanged.

		The masked form shown by `snapshot()` is ignored, so a settings form
		that posts it back unchanged keeps the real credential.
		"""
		cleaned = (value or "").strip()
		if cleaned and cleaned == mask_credential(self._credential):
			LOGGER.debug("Ignoring masked credential echo for session %s", self.session_id)
			return
		if cleaned:
			await self._credential_store.set(cleaned)
			self._credential = cleaned
		else:
			await self._credential_store.clear()
			self._credential = await self._credential_store.get()
		self._emit({
			"type": "session.api_key",
			"has_api_key": self.has_api_key,
			"masked_api_key": mask_credential(self._credential),
		})

	async def wait_until_idle(self) -> None:
		"""Wait for the active reveal (if any) to finish."""
		handle = self._reveal_handle
		if handle is not None:
			await handle.wait()

	# ---- internals -------------------------------------------------------

	@staticmethod
	def _validate(text: str) -> str:
		content = (text or "").strip()
		if not content:
			raise InvalidInput("Message text is empty.")
		return content

	def _next_id(self) -> str:
		return f"msg-{int(time.time() * 1000)}-{next(self._ids)}"

	def _greeting(self) -> ChatMessage:
		return ChatMessage(id=self._next_id(), role=MessageRole.ASSISTANT, content=greeting_for(self.has_api_key))

	def _append(self, role: MessageRole, content: str) -> ChatMessage:
		message = self._log.append(ChatMessage(id=self._next_id(), role=role, content=content))
		self._emit({"type": "message.appended", "message": message.to_dict()})
		return message

	async def _resolve_reply(self, content: str) -> Optional[str]:
		"""Return the reply text, the apology on failure, or None after teardown."""
		task = asyncio.ensure_future(self._router.route(content, self._credential, self._reference_context))
		self._reply_tasks.add(task)
		try:
			return await task
		except RemoteCallError as exc:
			LOGGER.warning("Remote reply failed for session %s: %s", self.session_id, exc)
			return APOLOGY_REPLY
		except asyncio.CancelledError:
			current = asyncio.current_task()
			if self._closed and not (current is not None and current.cancelling()):
				return None
			raise
		except Exception:  # pylint: disable=broad-exception-caught
			LOGGER.exception("Unexpected reply failure for session %s", self.session_id)
			return APOLOGY_REPLY
		finally:
			self._reply_tasks.discard(task)

	def _apply_step(self, message_id: str, partial: str) -> None:
		if self._log.update_content(message_id, partial):
			self._emit({"type": "message.updated", "id": message_id, "content": partial})

	def _finish_reveal(self, message_id: str) -> None:
		if message_id not in self._log:
			return
		self._reveal_handle = None
		self._phase = SessionPhase.IDLE
		self._pending = False
		self._revealing = False
		self._emit_state()

	def _abort_send(self, message_id: str) -> None:
		"""The sending task was cancelled: settle the placeholder and go back to IDLE."""
		if message_id not in self._log:
			return
		self._apply_step(message_id, APOLOGY_REPLY)
		self._phase = SessionPhase.IDLE
		self._pending = False
		self._revealing = False
		self._emit_state()

	def _cancel_reveal(self) -> None:
		if self._reveal_handle is not None:
			self._reveal_handle.cancel()
			self._reveal_handle = None
