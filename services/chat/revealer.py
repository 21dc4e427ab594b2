"""Typewriter-style disclosure of a finished reply."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Optional

LOGGER = logging.getLogger(__name__)

REVEAL_INTERVAL_SECONDS = 0.012
REVEAL_STEP_CHARS = 1


class RevealHandle:
	"""Handle for one running reveal; wraps the task doing the work."""

	def __init__(self, task: asyncio.Task, key: Optional[str] = None) -> None:
		self._task = task
		self.key = key

	@property
	def done(self) -> bool:
		return self._task.done()

	@property
	def cancelled(self) -> bool:
		return self._task.cancelled()

	def cancel(self) -> None:
		"""Stop scheduling further steps. `on_done` will not be called."""
		if not self._task.done():
			self._task.cancel()

	async def wait(self) -> None:
		"""Wait until the reveal finishes or is cancelled."""
		try:
			await asyncio.shield(self._task)
		except asyncio.CancelledError:
			if not self._task.cancelled():
				raise


class IncrementalRevealer:
	"""Emit growing prefixes of a text at a fixed cadence.

	`on_step` receives each prefix, ending with the full text; `on_done`
	fires exactly once afterwards unless the handle is cancelled first.
	"""

	def __init__(self, interval: float = REVEAL_INTERVAL_SECONDS, step_chars: int = REVEAL_STEP_CHARS) -> None:
		if step_chars < 1:
			raise ValueError("step_chars must be at least 1")
		self.interval = interval
		self.step_chars = step_chars
		self._active: Dict[str, RevealHandle] = {}

	def reveal(
		self,
		full_text: str,
		on_step: Callable[[str], None],
		on_done: Callable[[], None],
		*,
		key: Optional[str] = None,
	) -> RevealHandle:
		if key is not None:
			current = self._active.get(key)
			if current is not None and not current.done:
				raise RuntimeError(f"A reveal is already running for {key}")

		task = asyncio.ensure_future(self._run(full_text, on_step, on_done))
		handle = RevealHandle(task, key)
		if key is not None:
			self._active[key] = handle
			task.add_done_callback(lambda _task: self._forget(key, handle))
		return handle

	def _forget(self, key: str, handle: RevealHandle) -> None:
		if self._active.get(key) is handle:
			del self._active[key]

	async def _run(self, full_text: str, on_step: Callable[[str], None], on_done: Callable[[], None]) -> None:
		index = 0
		while index < len(full_text):
			index = min(index + self.step_chars, len(full_text))
			on_step(full_text[:index])
			if index < len(full_text):
				await asyncio.sleep(self.interval)
		on_done()
