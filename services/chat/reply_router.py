"""Pick the source of each assistant reply: the remote model or a canned answer."""

from __future__ import annotations

import asyncio
import logging
import os
import random
import time
from typing import Any, Callable, Dict, Optional, Tuple

from openai import AsyncOpenAI

from services.chat.errors import RemoteCallError
from services.chat.fallback_replies import find_fallback_reply
from services.chat.prompts import build_prompt
from services.chat.response_parser import extract_text, extract_usage

LOGGER = logging.getLogger(__name__)
DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
FALLBACK_DELAY_RANGE: Tuple[float, float] = (0.5, 1.0)

ClientFactory = Callable[[str], Any]


def default_client_factory(credential: str) -> AsyncOpenAI:
	return AsyncOpenAI(api_key=credential)


class ReplyRouter:
	"""Produce reply text for one user utterance.

	With a credential, one prompt (persona + reference context + question)
	is sent to the remote model and its text returned verbatim; any failure
	is raised as `RemoteCallError` without retrying. Without one, a canned
	reply is chosen by keyword after a short randomized delay. The delay is
	a plain `asyncio.sleep`, so cancelling the awaiting task cancels it.
	"""

	def __init__(
		self,
		client_factory: ClientFactory = default_client_factory,
		*,
		model: str = DEFAULT_MODEL,
		delay_range: Tuple[float, float] = FALLBACK_DELAY_RANGE,
	) -> None:
		self.client_factory = client_factory
		self.model = model
		self.delay_range = delay_range
		self._clients: Dict[str, Any] = {}

	async def route(self, user_text: str, credential: Optional[str], reference_context: Optional[str]) -> str:
		if credential:
			return await self._remote_reply(user_text, credential, reference_context)
		return await self._fallback_reply(user_text)

	def _client_for(self, credential: str) -> Any:
		client = self._clients.get(credential)
		if client is None:
			try:
				client = self.client_factory(credential)
			except Exception as exc:
				raise RemoteCallError(f"Failed to initialize model client: {exc}") from exc
			# Only the latest credential is worth keeping around.
			self._clients = {credential: client}
		return client

	async def _remote_reply(self, user_text: str, credential: str, reference_context: Optional[str]) -> str:
		client = self._client_for(credential)
		prompt = build_prompt(user_text, reference_context)
		start = time.time()
		try:
			response = await client.responses.create(model=self.model, input=prompt)
		except Exception as exc:
			raise RemoteCallError(f"Model request failed: {exc}") from exc

		text = extract_text(response)
		if not text.strip():
			raise RemoteCallError("Model response did not include text.")

		usage = extract_usage(response)
		LOGGER.info(
			"Remote reply latency: %.3fs (input_tokens=%s, output_tokens=%s)",
			time.time() - start,
			usage["input_tokens"],
			usage["output_tokens"],
		)
		return text

	async def _fallback_reply(self, user_text: str) -> str:
		low, high = self.delay_range
		delay = random.uniform(low, high)
		if delay > 0:
			await asyncio.sleep(delay)
		return find_fallback_reply(user_text)
