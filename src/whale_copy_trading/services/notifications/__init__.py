"""Event-driven notifiers."""

from whale_copy_trading.services.notifications.trade_event_notifier import TradeEventNotifier

__all__ = ["TradeEventNotifier"]
