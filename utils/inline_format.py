"""Minimal inline formatting for chat message content."""

import html
import re
from typing import List, Tuple

BOLD_PATTERN = re.compile(r"(\*\*[^*]+\*\*)")


def split_bold_segments(content: str) -> List[Tuple[str, bool]]:
    """Split text into `(segment, is_bold)` pairs on `**text**` spans.

    Unterminated markers (common while a reply is still being revealed)
    are left as plain text.
    """
    segments = []
    for part in BOLD_PATTERN.split(content or ""):
        if not part:
            continue
        if len(part) > 4 and part.startswith("**") and part.endswith("**"):
            segments.append((part[2:-2], True))
        else:
            segments.append((part, False))
    return segments


def render_inline_html(content: str) -> str:
    """Return HTML with bold spans as <strong> and line breaks as <br>."""
    out = []
    for text, bold in split_bold_segments(content):
        escaped = html.escape(text).replace("\n", "<br>")
        out.append(f"<strong>{escaped}</strong>" if bold else escaped)
    return "".join(out)
