"""Validation helpers for addresses and transaction hashes."""

from __future__ import annotations

from typing import Any


def is_hex_address(addr: Any) -> bool:
    """Return True if addr is a valid 0x address (42 chars)."""
    if not isinstance(addr, str):
        return False
    s = addr.strip()
    if len(s) != 42 or not s.startswith("0x"):
        return False
    try:
        int(s[2:], 16)
        return True
    except ValueError:
        return False


def normalize_address(addr: str | None) -> str:
    """Lowercase, stripped address ("" for None)."""
    return (addr or "").strip().lower()


def topic_to_address(topic: str | None) -> str:
    """Extract the lowercase address from a 32-byte indexed log topic."""
    if not topic:
        return ""
    s = topic.lower()
    if s.startswith("0x"):
        s = s[2:]
    if len(s) < 40:
        return ""
    return "0x" + s[-40:]


def mask_address(addr: str | None) -> str:
    """Return a masked address for logging (e.g. 0x1234...abcd)."""
    if not addr or len(addr) < 10:
        return "***"
    return f"{addr[:6]}...{addr[-4:]}"
