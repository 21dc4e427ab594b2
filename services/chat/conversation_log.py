"""Ordered, append-only message log for one chat session."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from models.chat_models import ChatMessage


class ConversationLog:
	"""Keep messages in insertion order with an id index.

	Entries are never reordered or removed individually; `reset` is the
	only way to drop them.
	"""

	def __init__(self) -> None:
		self._messages: List[ChatMessage] = []
		self._by_id: Dict[str, ChatMessage] = {}

	def __len__(self) -> int:
		return len(self._messages)

	def __iter__(self) -> Iterator[ChatMessage]:
		return iter(list(self._messages))

	def __contains__(self, message_id: object) -> bool:
		return message_id in self._by_id

	@property
	def messages(self) -> List[ChatMessage]:
		return list(self._messages)

	def get(self, message_id: str) -> Optional[ChatMessage]:
		return self._by_id.get(message_id)

	def append(self, message: ChatMessage) -> ChatMessage:
		if message.id in self._by_id:
			raise ValueError(f"Message {message.id} is already in the log")
		self._messages.append(message)
		self._by_id[message.id] = message
		return message

	def update_content(self, message_id: str, content: str) -> bool:
		"""Replace the content of the message with `message_id`.

		Returns False (and changes nothing) when the id is no longer in the
		log, e.g. after a reset.
		"""
		message = self._by_id.get(message_id)
		if message is None:
			return False
		message.content = content
		return True

	def reset(self, seed: ChatMessage) -> None:
		self._messages = [seed]
		self._by_id = {seed.id: seed}

	def clear(self) -> None:
		self._messages = []
		self._by_id = {}
