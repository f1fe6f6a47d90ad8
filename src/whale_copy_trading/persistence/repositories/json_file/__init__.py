"""JSON file backed repository implementations."""

from whale_copy_trading.persistence.repositories.json_file.position_ledger import (
    JsonFilePositionLedger,
)

__all__ = ["JsonFilePositionLedger"]
