"""
Text utilities for the Saya verification bot.
"""

from typing import Optional

from ..config import MAX_EMBED_DESCRIPTION_LENGTH


def truncate_text(text: str, max_length: int = MAX_EMBED_DESCRIPTION_LENGTH) -> str:
    """Truncate text to max_length characters, keeping the beginning."""
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def normalize_reason(reason: Optional[str], max_length: int) -> Optional[str]:
    """Validate a free-text rejection reason.

    Args:
        reason: Raw text submitted in the form.
        max_length: Maximum allowed length after stripping.

    Returns:
        The stripped reason, or None if it is empty or too long.
    """
    if reason is None:
        return None
    reason = reason.strip()
    if not reason or len(reason) > max_length:
        return None
    return reason
