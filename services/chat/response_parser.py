"""Helpers to extract text from Responses API output."""

from __future__ import annotations

from typing import Any, Dict, Optional


def _field(obj: Any, name: str) -> Any:
	if isinstance(obj, dict):
		return obj.get(name)
	return getattr(obj, name, None)


def extract_text(response: Any) -> str:
	"""Return the concatenated output_text parts of a response.

	Falls back to the SDK's `output_text` convenience property; returns an
	empty string when neither is present.
	"""
	parts = []
	for item in _field(response, "output") or []:
		if _field(item, "type") != "message":
			continue
		for content in _field(item, "content") or []:
			if _field(content, "type") == "output_text":
				parts.append(_field(content, "text") or "")
	if parts:
		return "".join(parts)
	return _field(response, "output_text") or ""


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
	"""Return token usage if present."""
	usage = _field(response, "usage")
	return {
		"input_tokens": _field(usage, "input_tokens") if usage else None,
		"output_tokens": _field(usage, "output_tokens") if usage else None,
	}
