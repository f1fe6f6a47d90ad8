# -*- coding: utf-8 -*-
"""SQLite trade journal: one row per copy attempt, plus summary and CSV export."""

from __future__ import annotations

import csv
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import structlog

from whale_copy_trading.models.trade_record import TradeRecord

_SCHEMA = """
CREATE TABLE IF NOT EXISTS trades (
    id                 INTEGER PRIMARY KEY AUTOINCREMENT,
    side               TEXT NOT NULL,
    whale_wallet       TEXT NOT NULL,
    my_wallet          TEXT NOT NULL,
    token_in           TEXT NOT NULL,
    token_out          TEXT NOT NULL,
    amount_usd         REAL NOT NULL,
    sell_amount_native REAL NOT NULL,
    buy_amount_raw     TEXT,
    native_price_usd   REAL,
    detected_at_ms     INTEGER NOT NULL,
    executed_at_ms     INTEGER NOT NULL,
    confirmed_at_ms    INTEGER,
    delay_ms           INTEGER,
    whale_tx_hash      TEXT NOT NULL,
    my_tx_hash         TEXT,
    block_number       INTEGER,
    gas_used           INTEGER,
    gas_price_gwei     REAL,
    gas_cost_native    REAL,
    status             TEXT NOT NULL DEFAULT 'pending',
    error_msg          TEXT,
    created_at         INTEGER DEFAULT (strftime('%s','now') * 1000)
);
CREATE INDEX IF NOT EXISTS idx_trades_whale_wallet ON trades(whale_wallet);
CREATE INDEX IF NOT EXISTS idx_trades_token_out ON trades(token_out);
CREATE INDEX IF NOT EXISTS idx_trades_status ON trades(status);
CREATE INDEX IF NOT EXISTS idx_trades_detected_at ON trades(detected_at_ms);
"""

_CONFIRM_COLUMNS = (
    "status",
    "confirmed_at_ms",
    "delay_ms",
    "block_number",
    "gas_used",
    "gas_price_gwei",
    "gas_cost_native",
    "my_tx_hash",
    "buy_amount_raw",
    "sell_amount_native",
    "error_msg",
)


@dataclass(frozen=True)
class WalletStats:
    whale_wallet: str
    trades: int
    avg_delay_ms: Optional[float]
    invested_usd: float


@dataclass(frozen=True)
class JournalSummary:
    """Aggregates over finished (non-pending) rows."""

    total_trades: int = 0
    executed: int = 0
    skipped: int = 0
    failed: int = 0
    avg_delay_ms: Optional[float] = None
    min_delay_ms: Optional[int] = None
    max_delay_ms: Optional[int] = None
    total_invested_usd: float = 0.0
    total_gas_native: float = 0.0
    by_wallet: list[WalletStats] = field(default_factory=list)
    top_tokens: list[tuple[str, int]] = field(default_factory=list)


def _where(wallet: Optional[str], token: Optional[str]) -> tuple[str, list[Any]]:
    clauses = ["status != 'pending'"]
    params: list[Any] = []
    if wallet:
        clauses.append("whale_wallet = ?")
        params.append(wallet.strip().lower())
    if token:
        clauses.append("(token_out = ? OR token_in = ?)")
        params.extend([token.strip().lower()] * 2)
    return " WHERE " + " AND ".join(clauses), params


class TradeJournal:
    """Append-mostly trade log backed by SQLite in WAL mode.

    Write methods log sqlite errors and return None instead of raising so a
    journal problem never interrupts trading.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        read_only: bool = False,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._path = Path(path)
        self._read_only = read_only
        self._conn: Optional[sqlite3.Connection] = None
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def open(self) -> None:
        """Open the database, creating file and schema unless read-only."""
        if self._conn is not None:
            return
        if self._read_only:
            self._conn = sqlite3.connect(f"file:{self._path}?mode=ro", uri=True)
        else:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self._path)
            self._conn.execute("PRAGMA journal_mode = WAL")
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        self._conn.row_factory = sqlite3.Row
        self._logger.info("journal_opened", journal_path=str(self._path), read_only=self._read_only)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> TradeJournal:
        self.open()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self.open()
        assert self._conn is not None
        return self._conn

    def insert_trade(self, record: TradeRecord) -> Optional[int]:
        """Insert a row and return its id (None if the write failed)."""
        row = record.to_row()
        columns = ", ".join(row)
        placeholders = ", ".join(f":{c}" for c in row)
        try:
            conn = self._connection()
            cur = conn.execute(f"INSERT INTO trades ({columns}) VALUES ({placeholders})", row)
            conn.commit()
        except sqlite3.Error as e:
            self._log_error("journal_insert_failed", e, whale_tx_hash=record.whale_tx_hash)
            return None
        return cur.lastrowid

    def update_trade_confirmed(self, trade_id: Optional[int], **values: Any) -> None:
        """Set outcome columns (status, confirmed_at_ms, gas_used, ...) on a row."""
        if trade_id is None:
            return
        updates = {k: v for k, v in values.items() if k in _CONFIRM_COLUMNS}
        if not updates:
            return
        assignments = ", ".join(f"{k} = :{k}" for k in updates)
        try:
            conn = self._connection()
            conn.execute(f"UPDATE trades SET {assignments} WHERE id = :id", {**updates, "id": trade_id})
            conn.commit()
        except sqlite3.Error as e:
            self._log_error("journal_update_failed", e, trade_id=trade_id)

    def skip_trade(self, trade_id: Optional[int], reason: str) -> None:
        if trade_id is None:
            return
        try:
            conn = self._connection()
            conn.execute(
                "UPDATE trades SET status = 'skipped', error_msg = ? WHERE id = ?",
                (reason, trade_id),
            )
            conn.commit()
        except sqlite3.Error as e:
            self._log_error("journal_skip_failed", e, trade_id=trade_id)

    def get_trade(self, trade_id: int) -> Optional[dict[str, Any]]:
        row = self._connection().execute("SELECT * FROM trades WHERE id = ?", (trade_id,)).fetchone()
        return dict(row) if row is not None else None

    def summary(self, wallet: Optional[str] = None, token: Optional[str] = None) -> JournalSummary:
        where, params = _where(wallet, token)
        conn = self._connection()
        totals = conn.execute(
            f"""
            SELECT
                COUNT(*) AS total_trades,
                SUM(CASE WHEN status = 'success' THEN 1 ELSE 0 END) AS executed,
                SUM(CASE WHEN status = 'skipped' THEN 1 ELSE 0 END) AS skipped,
                SUM(CASE WHEN status = 'failed' THEN 1 ELSE 0 END) AS failed,
                AVG(delay_ms) AS avg_delay_ms,
                MIN(delay_ms) AS min_delay_ms,
                MAX(delay_ms) AS max_delay_ms,
                SUM(CASE WHEN side = 'BUY' AND status = 'success' THEN amount_usd ELSE 0 END)
                    AS total_invested_usd,
                SUM(gas_cost_native) AS total_gas_native
            FROM trades{where}
            """,
            params,
        ).fetchone()
        by_wallet = [
            WalletStats(
                whale_wallet=r["whale_wallet"],
                trades=r["trades"],
                avg_delay_ms=r["avg_delay"],
                invested_usd=r["invested"] or 0.0,
            )
            for r in conn.execute(
                f"""
                SELECT whale_wallet, COUNT(*) AS trades, AVG(delay_ms) AS avg_delay,
                       SUM(CASE WHEN side = 'BUY' AND status = 'success' THEN amount_usd ELSE 0 END)
                           AS invested
                FROM trades{where}
                GROUP BY whale_wallet
                ORDER BY trades DESC
                """,
                params,
            )
        ]
        top_tokens = [
            (r["token_out"], r["n"])
            for r in conn.execute(
                f"""
                SELECT token_out, COUNT(*) AS n
                FROM trades{where} AND status = 'success' AND side = 'BUY'
                GROUP BY token_out
                ORDER BY n DESC
                LIMIT 10
                """,
                params,
            )
        ]
        return JournalSummary(
            total_trades=totals["total_trades"] or 0,
            executed=totals["executed"] or 0,
            skipped=totals["skipped"] or 0,
            failed=totals["failed"] or 0,
            avg_delay_ms=totals["avg_delay_ms"],
            min_delay_ms=totals["min_delay_ms"],
            max_delay_ms=totals["max_delay_ms"],
            total_invested_usd=totals["total_invested_usd"] or 0.0,
            total_gas_native=totals["total_gas_native"] or 0.0,
            by_wallet=by_wallet,
            top_tokens=top_tokens,
        )

    def export_csv(
        self, path: str | Path, wallet: Optional[str] = None, token: Optional[str] = None
    ) -> int:
        """Write finished rows to a CSV file and return the number of rows written."""
        where, params = _where(wallet, token)
        cur = self._connection().execute(
            f"SELECT * FROM trades{where} ORDER BY detected_at_ms DESC", params
        )
        columns = [d[0] for d in cur.description]
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        count = 0
        with out.open("w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            writer.writerow(columns)
            for row in cur:
                writer.writerow(list(row))
                count += 1
        self._logger.info("journal_exported_csv", export_path=str(out), export_rows=count)
        return count

    def _log_error(self, event: str, e: Exception, **kw: Any) -> None:
        self._logger.error(event, error_type=type(e).__name__, error_message=str(e), **kw)
