"""Exceptions raised inside the chat session engine."""

from __future__ import annotations


class ChatError(Exception):
	"""Base class for chat engine failures."""


class ReferenceLoadError(ChatError):
	"""The reference document could not be read. Never fatal."""


class RemoteCallError(ChatError):
	"""The remote model call failed (transport, auth, quota or malformed output)."""


class InvalidInput(ChatError):
	"""Empty or whitespace-only text was submitted."""
