# -*- coding: utf-8 -*-
"""Event-based notification styler with emoji headers and sections (Telegram-style)."""

from __future__ import annotations

import html
from typing import Any, Callable

from whale_copy_trading.notifications.types import NotificationMessage, NotificationStyler

Formatter = Callable[[Any], str]


def _usd(value: Any) -> str:
    try:
        return f"${float(value):,.2f}"
    except (TypeError, ValueError):
        return str(value)


def _native(value: Any) -> str:
    try:
        return f"{float(value):.6f} ETH"
    except (TypeError, ValueError):
        return str(value)


def _pct(value: Any) -> str:
    try:
        return f"{float(value) * 100:.1f}%"
    except (TypeError, ValueError):
        return str(value)


def _ms(value: Any) -> str:
    try:
        return f"{int(value) / 1000:.1f}s"
    except (TypeError, ValueError):
        return str(value)


def _plain(value: Any) -> str:
    return str(value)


_TITLES: dict[str, tuple[str, str]] = {
    "buy_executed": ("🟢", "Buy Executed"),
    "buy_failed": ("❌", "Buy Failed"),
    "sell_detected": ("🔔", "Sell Detected"),
    "sell_unknown_token": ("❓", "Sell Detected (Unknown Token)"),
    "sell_executed": ("🔴", "Sell Executed"),
    "sell_skipped": ("⏭️", "Sell Skipped (No Balance)"),
    "sell_failed": ("❌", "Sell Failed"),
    "insufficient_balance": ("⚠️", "Insufficient Balance"),
    "swap_direction_unknown": ("❓", "Swap Direction Unknown"),
    "low_balance": ("🪫", "Low Balance"),
    "system_started": ("▶️", "System Started"),
    "system_stopped": ("⏹️", "System Stopped"),
}

# (section header, [(label, payload key, formatter)])
_SECTIONS: dict[str, list[tuple[str, list[tuple[str, str, Formatter]]]]] = {
    "buy_executed": [
        ("🐋 Whale", [("👛 Wallet", "wallet", _plain), ("🔗 Tx", "whale_tx_hash", _plain)]),
        (
            "💰 Copy",
            [
                ("🪙 Token", "token", _plain),
                ("💵 Amount", "amount_usd", _usd),
                ("⛽ Spent", "sell_amount_native", _native),
                ("📦 Received (raw)", "buy_amount_raw", _plain),
                ("🔗 Tx", "my_tx_hash", _plain),
                ("🧱 Block", "block_number", _plain),
                ("⛽ Gas", "gas_cost_native", _native),
                ("⏱️ Delay", "delay_ms", _ms),
            ],
        ),
    ],
    "buy_failed": [
        ("🐋 Whale", [("👛 Wallet", "wallet", _plain), ("🔗 Tx", "whale_tx_hash", _plain)]),
        (
            "💥 Error",
            [
                ("🪙 Token", "token", _plain),
                ("💵 Amount", "amount_usd", _usd),
                ("🔗 Tx", "my_tx_hash", _plain),
                ("📝 Reason", "error_message", _plain),
            ],
        ),
    ],
    "sell_detected": [
        (
            "🐋 Whale",
            [
                ("👛 Wallet", "wallet", _plain),
                ("🪙 Token", "token", _plain),
                ("🔗 Tx", "whale_tx_hash", _plain),
                ("📦 Open lots", "open_lots", _plain),
            ],
        ),
    ],
    "sell_executed": [
        (
            "💰 Sell",
            [
                ("👛 Wallet", "wallet", _plain),
                ("🪙 Token", "token", _plain),
                ("📐 Fraction", "fraction", _pct),
                ("💵 Lot size", "lot_amount_usd", _usd),
                ("💸 Received", "received_native", _native),
                ("🔗 Tx", "my_tx_hash", _plain),
                ("⛽ Gas", "gas_cost_native", _native),
                ("📦 Lots left", "remaining_lots", _plain),
            ],
        ),
    ],
    "sell_failed": [
        (
            "💥 Error",
            [
                ("👛 Wallet", "wallet", _plain),
                ("🪙 Token", "token", _plain),
                ("🔁 Attempts", "attempts", _plain),
                ("📝 Reason", "error_message", _plain),
            ],
        ),
    ],
    "insufficient_balance": [
        (
            "👛 Balance",
            [
                ("💼 Available", "balance_native", _native),
                ("🎯 Required", "required_native", _native),
                ("💵 Trade size", "amount_usd", _usd),
                ("💱 ETH price", "native_price_usd", _usd),
                ("🐋 Whale", "wallet", _plain),
            ],
        ),
    ],
    "low_balance": [
        ("👛 Balance", [("💼 Available", "balance_native", _native), ("👛 Wallet", "wallet", _plain)]),
    ],
    "swap_direction_unknown": [
        ("🐋 Whale", [("👛 Wallet", "wallet", _plain), ("🔗 Tx", "whale_tx_hash", _plain)]),
    ],
}
_SECTIONS["sell_unknown_token"] = _SECTIONS["sell_detected"]
_SECTIONS["sell_skipped"] = _SECTIONS["sell_executed"]


class EventNotificationStyler(NotificationStyler):
    """Render notifications by event_type with emojis, separators and formatted sections."""

    def render(self, message: NotificationMessage, *, parse_html: bool = True) -> str:
        emoji, title = self._title(message.event_type)
        payload = message.payload or {}
        lines = [f"{emoji} {self._bold(title, parse_html)}", self._escape(message.message, parse_html)]

        sections = _SECTIONS.get(message.event_type)
        if sections is None:
            if message.event_type == "system_started" and payload.get("target_wallets"):
                wallets = ", ".join(str(w) for w in payload["target_wallets"])
                lines.append(self._section("👛 Wallets", [("", wallets)], parse_html))
            elif message.event_type not in _TITLES:
                lines.extend(self._generic_rows(payload, parse_html))
        else:
            sell_skipped = message.event_type == "sell_skipped"
            for header, rows in sections:
                values = [
                    (label, fmt(payload[key]))
                    for label, key, fmt in rows
                    if payload.get(key) not in (None, "")
                    and not (sell_skipped and key == "received_native")
                ]
                lines.append(self._section(header, values, parse_html))

        return "\n".join(line for line in lines if line).strip()

    @staticmethod
    def _title(event_type: str) -> tuple[str, str]:
        return _TITLES.get(event_type, ("ℹ️", event_type.replace("_", " ").title()))

    @staticmethod
    def _escape(text: str, parse_html: bool) -> str:
        return html.escape(text, quote=False) if parse_html else text

    def _bold(self, text: str, parse_html: bool) -> str:
        escaped = self._escape(text, parse_html)
        return f"<b>{escaped}</b>" if parse_html else escaped

    def _generic_rows(self, payload: dict[str, Any], parse_html: bool) -> list[str]:
        rows: list[str] = []
        for key in sorted(payload):
            value = payload[key]
            if value is not None:
                rows.append(f"{self._bold(key, parse_html)}: {self._escape(str(value), parse_html)}")
        return rows

    def _section(self, header: str, rows: list[tuple[str, str]], parse_html: bool) -> str:
        if not rows:
            return ""
        emoji, _, remainder = header.partition(" ")
        lines = [f"\n{emoji} {self._bold(remainder or header, parse_html)}", "─" * 12]
        for label, value in rows:
            value = self._escape(value, parse_html)
            if not label:
                lines.append(value)
                continue
            l_emoji, _, l_text = label.partition(" ")
            lines.append(f"{l_emoji} {self._bold(l_text + ':', parse_html)} {value}")
        return "\n".join(lines)
