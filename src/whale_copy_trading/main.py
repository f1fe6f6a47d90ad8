# -*- coding: utf-8 -*-
"""
Entry point for the whale copy-trading application.

Orchestrates: logging, settings, container, ledger load, journal, notifications,
block ingestor, shutdown (SIGINT/SIGTERM or CancelledError).
Flow: newHeads -> block ingestor -> swap pipeline (per transaction) -> execution sequencer
-> ledger + journal + events -> notifications.

Run with: python -m whale_copy_trading.main
"""
from __future__ import annotations

import asyncio
import signal
from typing import Any

import structlog
from web3 import Web3

from whale_copy_trading.config import get_settings
from whale_copy_trading.DI import Container
from whale_copy_trading.exceptions import CopyTradingError, MissingRequiredConfigError
from whale_copy_trading.logging.config import configure_logging
from whale_copy_trading.notifications.types import NotificationMessage
from whale_copy_trading.utils import mask_address


def _setup_signals(shutdown_event: asyncio.Event) -> None:
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, shutdown_event.set)
    except NotImplementedError:
        pass  # Windows has no add_signal_handler


async def _check_startup_balance(container: Container, logger: Any) -> None:
    """Log the managed wallet's native balance and warn when it is low."""
    settings = container.config()
    try:
        balance_wei = await container.rpc_client().get_balance(settings.wallet.address)
    except CopyTradingError as e:
        logger.warning("main_balance_check_failed", error_type=type(e).__name__, error_message=str(e))
        return
    balance = float(Web3.from_wei(balance_wei, "ether"))
    logger.info(
        "main_wallet_balance",
        wallet_masked=mask_address(settings.wallet.address),
        balance_native=balance,
    )
    threshold = settings.strategy.low_balance_warning_native
    if balance < threshold:
        logger.warning("main_low_balance", balance_native=balance, threshold_native=threshold)
        container.notification_service().notify(
            NotificationMessage(
                event_type="low_balance",
                message="Managed wallet balance is low",
                payload={
                    "balance_native": balance,
                    "threshold_native": threshold,
                    "wallet": settings.wallet.address,
                },
            )
        )


async def run() -> None:
    configure_logging()
    logger = structlog.get_logger("main")
    settings = get_settings()
    missing = settings.missing_required()
    if missing:
        logger.error("main_missing_required_config", missing=missing)
        raise MissingRequiredConfigError(", ".join(missing))

    container = Container()
    ledger = container.position_ledger()
    journal = container.trade_journal()
    notification_service = container.notification_service()
    trade_event_notifier = container.trade_event_notifier()
    ingestor = container.block_ingestor()
    handler_group = container.handler_group()
    http_client = container.http_client()

    await ledger.load()
    if journal is not None:
        journal.open()
    await notification_service.initialize()
    trade_event_notifier.start()

    shutdown_event = asyncio.Event()
    _setup_signals(shutdown_event)

    await _check_startup_balance(container, logger)

    wallets = settings.tracking.target_wallets
    logger.info(
        "main_tracking_started",
        target_wallets=[mask_address(w) for w in wallets],
        trade_amount_usd=settings.strategy.trade_amount_usd,
        cooldown_seconds=settings.strategy.cooldown_seconds,
    )
    notification_service.notify(
        NotificationMessage(
            event_type="system_started",
            message="Whale copy trading started",
            payload={
                "target_wallets": [mask_address(w) for w in wallets],
                "trade_amount_usd": settings.strategy.trade_amount_usd,
                "wallet": mask_address(settings.wallet.address),
            },
        )
    )

    ingest_task = asyncio.create_task(ingestor.run())
    try:
        await shutdown_event.wait()
    except asyncio.CancelledError:
        logger.info("main_shutdown_cancelled")
        raise
    finally:
        logger.info("main_shutdown_started")
        ingest_task.cancel()
        try:
            await ingest_task
        except asyncio.CancelledError:
            pass
        cancelled = await handler_group.shutdown(settings.tracking.shutdown_timeout_seconds)
        trade_event_notifier.stop()
        notification_service.notify(
            NotificationMessage(
                event_type="system_stopped",
                message="Whale copy trading stopped",
                payload={"handlers_cancelled": cancelled},
            )
        )
        await notification_service.shutdown()
        await http_client.aclose()
        if journal is not None:
            journal.close()
        logger.info("main_shutdown_complete")


def main() -> None:
    asyncio.run(run())


__all__ = ["run", "main"]

if __name__ == "__main__":
    main()
