"""Load the static reference document that grounds remote replies."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

import aiofiles

from services.chat.errors import ReferenceLoadError

LOGGER = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent.parent
REFERENCE_DOC_PATH = Path(os.getenv("REFERENCE_DOC_PATH", str(BASE_DIR / "public" / "book.md")))
REFERENCE_CHAR_LIMIT = 15000


class ReferenceContextLoader:
	"""Fetch the reference document once per process.

	The first call to `load()` reads the file and keeps the first
	`char_limit` characters. A failure is logged and leaves the context
	empty; later calls return the cached result without retrying.
	"""

	def __init__(self, path: Optional[Path | str] = None, char_limit: int = REFERENCE_CHAR_LIMIT) -> None:
		self.path = Path(path) if path is not None else REFERENCE_DOC_PATH
		self.char_limit = char_limit
		self.loaded = False
		self._text = ""
		self._attempted = False
		self._lock = asyncio.Lock()

	@property
	def text(self) -> str:
		return self._text

	async def load(self) -> str:
		"""Return the (possibly empty) truncated reference text."""
		async with self._lock:
			if self._attempted:
				return self._text
			self._attempted = True
			try:
				raw = await self._read()
			except ReferenceLoadError as exc:
				LOGGER.warning("Reference document unavailable: %s", exc)
				return self._text
			self._text = raw[: self.char_limit]
			self.loaded = True
			LOGGER.info("Reference document loaded (%d characters kept)", len(self._text))
			return self._text

	async def _read(self) -> str:
		if not self.path.is_file():
			raise ReferenceLoadError(f"{self.path} not found")
		try:
			async with aiofiles.open(self.path, "r", encoding="utf-8") as fh:
				return await fh.read()
		except (OSError, UnicodeDecodeError) as exc:
			raise ReferenceLoadError(f"Failed to read {self.path}: {exc}") from exc
