# -*- coding: utf-8 -*-
"""Tests for EventNotificationStyler."""

from __future__ import annotations

from whale_copy_trading.notifications.stylers import EventNotificationStyler
from whale_copy_trading.notifications.types import NotificationMessage

styler = EventNotificationStyler()


def test_buy_executed_html() -> None:
    text = styler.render(
        NotificationMessage(
            event_type="buy_executed",
            message="Copied buy of $20.00",
            payload={"token": "0xtoken", "amount_usd": 20, "sell_amount_native": 0.01, "delay_ms": 2400},
        )
    )

    assert text.startswith("🟢 <b>Buy Executed</b>")
    assert "<b>Amount:</b> $20.00" in text
    assert "0.010000 ETH" in text
    assert "2.4s" in text


def test_plain_text_has_no_markup() -> None:
    text = styler.render(
        NotificationMessage(event_type="buy_failed", message="a <b> c", payload={"error_message": "x<y"}),
        parse_html=False,
    )

    assert "<b>" not in text.split("\n", 1)[0]
    assert "x<y" in text
    assert "a <b> c" in text


def test_html_escapes_message_text() -> None:
    text = styler.render(NotificationMessage(event_type="buy_failed", message="a < b"))

    assert "a &lt; b" in text


def test_missing_payload_fields_are_omitted() -> None:
    text = styler.render(
        NotificationMessage(event_type="sell_detected", message="m", payload={"token": "0xt", "open_lots": None}),
        parse_html=False,
    )

    assert "Token: 0xt" in text
    assert "Open lots" not in text


def test_sell_skipped_hides_received_amount() -> None:
    payload = {"token": "0xt", "fraction": 0.5, "received_native": 0.0, "remaining_lots": 1}
    skipped = styler.render(NotificationMessage(event_type="sell_skipped", message="m", payload=payload), parse_html=False)
    executed = styler.render(NotificationMessage(event_type="sell_executed", message="m", payload=payload), parse_html=False)

    assert "Sell Skipped" in skipped
    assert "Received" not in skipped
    assert "Received" in executed
    assert "50.0%" in executed


def test_sell_unknown_token_title() -> None:
    text = styler.render(NotificationMessage(event_type="sell_unknown_token", message="m", payload={}))

    assert text.startswith("❓ <b>Sell Detected (Unknown Token)</b>")


def test_system_started_lists_wallets() -> None:
    text = styler.render(
        NotificationMessage(event_type="system_started", message="up", payload={"target_wallets": ["0xa", "0xb"]}),
        parse_html=False,
    )

    assert "0xa, 0xb" in text


def test_unknown_event_type_renders_generic_rows() -> None:
    text = styler.render(
        NotificationMessage(event_type="custom_thing", message="m", payload={"b": 2, "a": 1, "skip": None}),
        parse_html=False,
    )

    assert text.startswith("ℹ️ Custom Thing")
    assert text.index("a: 1") < text.index("b: 2")
    assert "skip" not in text
