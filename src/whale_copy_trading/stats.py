# -*- coding: utf-8 -*-
"""Trade journal statistics and CSV export.

Run with: whale-copy-stats [--db PATH] [--wallet 0x...] [--token 0x...] [--export csv PATH]
"""
from __future__ import annotations

import argparse
import sqlite3
import sys
from pathlib import Path
from typing import Optional, Sequence

from whale_copy_trading.config import get_settings
from whale_copy_trading.persistence.journal import JournalSummary, TradeJournal
from whale_copy_trading.utils import mask_address


def _fmt_ms(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.0f} ms"


def format_summary(summary: JournalSummary) -> str:
    lines = [
        "Trade journal summary",
        f"  total trades:      {summary.total_trades}",
        f"  executed:          {summary.executed}",
        f"  skipped:           {summary.skipped}",
        f"  failed:            {summary.failed}",
        f"  invested (USD):    {summary.total_invested_usd:.2f}",
        f"  gas (native):      {summary.total_gas_native:.6f}",
        f"  delay avg/min/max: {_fmt_ms(summary.avg_delay_ms)} / "
        f"{_fmt_ms(summary.min_delay_ms)} / {_fmt_ms(summary.max_delay_ms)}",
    ]
    if summary.by_wallet:
        lines.append("By wallet:")
        for w in summary.by_wallet:
            lines.append(
                f"  {mask_address(w.whale_wallet)}  trades={w.trades}  "
                f"avg_delay={_fmt_ms(w.avg_delay_ms)}  invested=${w.invested_usd:.2f}"
            )
    if summary.top_tokens:
        lines.append("Top tokens bought:")
        for token, count in summary.top_tokens:
            lines.append(f"  {token}  x{count}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="whale-copy-stats",
        description="Summarize the copy-trade journal and optionally export it.",
    )
    parser.add_argument("--db", help="Journal path (default: PERSISTENCE__JOURNAL_PATH)")
    parser.add_argument("--wallet", help="Only rows for this tracked wallet")
    parser.add_argument("--token", help="Only rows that bought or sold this token")
    parser.add_argument(
        "--export",
        nargs=2,
        metavar=("FORMAT", "PATH"),
        help="Export matching rows, e.g. --export csv trades.csv",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    db_path = Path(args.db or get_settings().persistence.journal_path)
    if not db_path.exists():
        print(f"journal not found: {db_path}", file=sys.stderr)
        return 1

    try:
        with TradeJournal(db_path, read_only=True) as journal:
            print(format_summary(journal.summary(args.wallet, args.token)))
            if args.export:
                fmt, out = args.export
                if fmt.lower() != "csv":
                    print(f"unsupported export format: {fmt}", file=sys.stderr)
                    return 2
                rows = journal.export_csv(out, args.wallet, args.token)
                print(f"exported {rows} rows to {out}")
    except sqlite3.Error as e:
        print(f"journal error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
