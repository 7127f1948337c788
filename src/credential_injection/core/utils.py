"""Shared utility functions."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

MASK = "***"


def safe_call(
    fn: Callable[[], None],
    call_logger: logging.Logger,
    message: str,
    *message_args: Any,
) -> None:
    """Invoke *fn*, logging any exception as a warning instead of raising.

    Used for hooks and audit sinks, whose failure must not abort header
    building.

    Args:
        fn: Zero-argument callable to invoke.
        call_logger: Logger instance for warning output.
        message: Log message template (``%s``-style).
        *message_args: Arguments interpolated into *message*.
    """
    try:
        fn()
    except Exception:
        call_logger.warning(message, *message_args, exc_info=True)


def mask_value(value: str | None, visible_chars: int = 0) -> str:
    """Mask a sensitive value for display.

    Args:
        value: The value to mask.
        visible_chars: Leading characters to keep. Only applied when
            the value is longer than twice this count.

    Returns:
        ``"<empty>"`` for empty values, otherwise the masked string.
    """
    if not value:
        return "<empty>"
    if visible_chars and len(value) > visible_chars * 2:
        return f"{value[:visible_chars]}{MASK}"
    return MASK
