# -*- coding: utf-8 -*-
"""Position ledger persisted as one JSON document (wallet -> ordered lots)."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from whale_copy_trading.models.lot import Lot
from whale_copy_trading.persistence.repositories.interfaces.position_ledger import IPositionLedger
from whale_copy_trading.utils.validation import mask_address, normalize_address

_LEDGER_ADAPTER: TypeAdapter[dict[str, list[Lot]]] = TypeAdapter(dict[str, list[Lot]])


class JsonFilePositionLedger(IPositionLedger):
    """FIFO lots per tracked wallet, written to disk after every mutation.

    The whole document is rewritten to a sibling temp file and moved into place
    with os.replace, so a crash mid-write leaves the previous version intact.
    Mutations are serialized by an asyncio.Lock. A failed write is logged and
    the in-memory state stays authoritative for the rest of the run.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._path = Path(path)
        self._lots: dict[str, list[Lot]] = {}
        self._lock = asyncio.Lock()
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> None:
        async with self._lock:
            self._lots = self._read()
        self._logger.info(
            "ledger_loaded",
            ledger_path=str(self._path),
            ledger_wallets=len(self._lots),
            ledger_lots=sum(len(v) for v in self._lots.values()),
        )

    def _read(self) -> dict[str, list[Lot]]:
        if not self._path.exists():
            self._logger.warning("ledger_file_missing_starting_empty", ledger_path=str(self._path))
            return {}
        try:
            raw = self._path.read_bytes()
            data = _LEDGER_ADAPTER.validate_json(raw)
        except (OSError, ValidationError, ValueError) as e:
            self._logger.warning(
                "ledger_file_unreadable_starting_empty",
                ledger_path=str(self._path),
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return {}
        return {normalize_address(w): list(lots) for w, lots in data.items() if lots}

    def _write(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_name(self._path.name + ".tmp")
            tmp.write_bytes(_LEDGER_ADAPTER.dump_json(self._lots, indent=2))
            os.replace(tmp, self._path)
        except OSError as e:
            self._logger.error(
                "ledger_write_failed",
                ledger_path=str(self._path),
                error_type=type(e).__name__,
                error_message=str(e),
            )

    async def add_lot(self, wallet: str, lot: Lot) -> None:
        key = normalize_address(wallet)
        async with self._lock:
            self._lots.setdefault(key, []).append(lot)
            self._write()
        self._logger.debug(
            "ledger_lot_added",
            wallet_masked=mask_address(key),
            token=lot.token,
            my_tx_hash=lot.my_tx_hash,
        )

    async def pop_oldest_lot(self, wallet: str, token: str) -> Lot | None:
        key = normalize_address(wallet)
        token = normalize_address(token)
        async with self._lock:
            lots = self._lots.get(key, [])
            for i, lot in enumerate(lots):
                if lot.token == token:
                    del lots[i]
                    if not lots:
                        self._lots.pop(key, None)
                    self._write()
                    self._logger.debug(
                        "ledger_lot_removed",
                        wallet_masked=mask_address(key),
                        token=token,
                        my_tx_hash=lot.my_tx_hash,
                    )
                    return lot
        return None

    async def lots_for_token(self, wallet: str, token: str) -> list[Lot]:
        token = normalize_address(token)
        return [lot for lot in self._lots.get(normalize_address(wallet), []) if lot.token == token]

    async def unique_tokens(self, wallet: str) -> list[str]:
        return list(dict.fromkeys(lot.token for lot in self._lots.get(normalize_address(wallet), [])))
