"""Simple in-memory registry of chat sessions."""

from __future__ import annotations

from typing import Dict, Optional
from uuid import uuid4

from services.chat.chat_session import ChatSession
from services.chat.credential_store import CredentialStore
from services.chat.reference_loader import ReferenceContextLoader
from services.chat.reply_router import ReplyRouter
from services.chat.revealer import IncrementalRevealer


class ChatSessionStore:
	"""Create, look up and tear down chat sessions.

	The credential store, reference loader and router are shared by every
	session; each session keeps its own log and flags.
	"""

	def __init__(
		self,
		credential_store: CredentialStore,
		reference_loader: ReferenceContextLoader,
		router: ReplyRouter,
		revealer_factory=IncrementalRevealer,
	) -> None:
		self.credential_store = credential_store
		self.reference_loader = reference_loader
		self.router = router
		self._revealer_factory = revealer_factory
		self._sessions: Dict[str, ChatSession] = {}

	def __len__(self) -> int:
		return len(self._sessions)

	async def create(self, session_id: Optional[str] = None) -> ChatSession:
		"""Create and start a new session."""
		session_id = session_id or uuid4().hex
		if session_id in self._sessions:
			raise ValueError(f"Session {session_id} already exists")
		session = ChatSession(
			session_id,
			self.credential_store,
			self.reference_loader,
			self.router,
			revealer=self._revealer_factory(),
		)
		self._sessions[session_id] = session
		await session.start()
		return session

	def get(self, session_id: str) -> ChatSession:
		"""Return a session or raise KeyError if missing."""
		session = self._sessions.get(session_id)
		if session is None:
			raise KeyError(f"Session {session_id} not found")
		return session

	async def remove(self, session_id: str) -> None:
		"""Close a session and forget it. Raises KeyError if missing."""
		session = self._sessions.pop(session_id, None)
		if session is None:
			raise KeyError(f"Session {session_id} not found")
		await session.close()

	async def close_all(self) -> None:
		sessions = list(self._sessions.values())
		self._sessions.clear()
		for session in sessions:
			await session.close()
