"""Chat domain models shared by the session engine and the web layer."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class MessageRole(str, Enum):
	USER = "user"
	ASSISTANT = "assistant"
	SYSTEM = "system"


class SessionPhase(str, Enum):
	"""Orchestrator states for a single chat session."""

	IDLE = "idle"
	SENDING = "sending"
	REVEALING = "revealing"


@dataclass
class ChatMessage:
	"""One entry of the conversation log.

	`content` is the only mutable field; assistant placeholders start empty
	and grow while the reply is revealed.
	"""

	id: str
	role: MessageRole
	content: str = ""
	timestamp: float = field(default_factory=lambda: time.time())

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"role": self.role.value,
			"content": self.content,
			"timestamp": self.timestamp,
		}
