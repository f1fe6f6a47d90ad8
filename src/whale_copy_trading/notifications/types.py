"""Notification message types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class NotificationMessage:
    """Message to be sent via one or more notification channels.

    event_type selects the renderer (e.g. "buy_executed", "sell_failed").
    payload carries the structured fields the renderer lays out.
    """

    event_type: str
    message: str
    title: str | None = None
    payload: dict[str, Any] | None = None


class NotificationStyler(Protocol):
    """Render a message into a formatted string for delivery."""

    def render(self, message: NotificationMessage, *, parse_html: bool = True) -> str:
        """Return the text to deliver.

        Args:
            message: Notification message to render.
            parse_html: If True (default), output uses Telegram HTML tags. If False, plain text.
        """
        ...
