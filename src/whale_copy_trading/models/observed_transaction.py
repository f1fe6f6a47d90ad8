"""ObservedTransaction: a target-wallet transaction taken from a confirmed block."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


def _hex_to_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(str(value), 16) if str(value).startswith("0x") else int(str(value))
    except ValueError:
        return 0


@dataclass(frozen=True, slots=True)
class ObservedTransaction:
    """Transaction body as returned by eth_getBlockByHash(hash, true).

    Identity is the hash; each hash is handled at most once per run.
    """

    hash: str
    sender: str
    """Lowercase `from` address."""
    to: Optional[str]
    input_data: str
    value: int
    block_number: Optional[int] = None

    @classmethod
    def from_rpc(cls, tx: dict[str, Any]) -> ObservedTransaction:
        """Build from a JSON-RPC transaction object (hex quantities)."""
        to = tx.get("to")
        block = tx.get("blockNumber")
        return cls(
            hash=str(tx.get("hash") or "").lower(),
            sender=str(tx.get("from") or "").lower(),
            to=str(to).lower() if to else None,
            input_data=str(tx.get("input") or tx.get("data") or "0x"),
            value=_hex_to_int(tx.get("value")),
            block_number=_hex_to_int(block) if block is not None else None,
        )
