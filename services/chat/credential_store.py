"""Process-wide storage for the remote model credential."""

from __future__ import annotations

import logging
import os
from typing import Optional

from dal.credential_dal import CredentialDAL

LOGGER = logging.getLogger(__name__)

CREDENTIAL_NAME = "openai_api_key"


def mask_credential(value: Optional[str]) -> Optional[str]:
	"""Return a display-safe form of a credential (first 10 + last 4 chars)."""
	if not value:
		return None
	if len(value) <= 14:
		return value[:2] + "..." + value[-2:]
	return value[:10] + "..." + value[-4:]


class CredentialStore:
	"""Read, write and clear the credential.

	Precedence when reading: the stored value, then the default supplied at
	construction (the `OPENAI_API_KEY` environment variable unless told
	otherwise), else None. Contents are never validated here; a bad
	credential only shows up as a failed remote call.
	"""

	def __init__(self, dal: CredentialDAL, default: Optional[str] = None, *, use_env_default: bool = True) -> None:
		self._dal = dal
		if default is None and use_env_default:
			default = os.getenv("OPENAI_API_KEY")
		self._default = (default or "").strip() or None

	@property
	def has_default(self) -> bool:
		return self._default is not None

	async def get(self) -> Optional[str]:
		stored = await self._dal.get_value(CREDENTIAL_NAME)
		if stored:
			return stored
		return self._default

	async def set(self, value: str) -> None:
		await self._dal.upsert_value(CREDENTIAL_NAME, value)
		LOGGER.info("Stored credential %s", mask_credential(value))

	async def clear(self) -> None:
		removed = await self._dal.delete_value(CREDENTIAL_NAME)
		if removed:
			LOGGER.info("Cleared stored credential")
