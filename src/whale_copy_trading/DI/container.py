# -*- coding: utf-8 -*-
"""Dependency injection container (dependency-injector)."""

from __future__ import annotations

from typing import Optional

from dependency_injector import containers, providers

from whale_copy_trading.clients.aggregator_client import ZeroExClient
from whale_copy_trading.clients.block_stream import NewHeadsStream
from whale_copy_trading.clients.http import AsyncHttpClient
from whale_copy_trading.clients.price_client import NativePriceClient
from whale_copy_trading.clients.rpc_client import RpcClient
from whale_copy_trading.config import Settings, get_settings
from whale_copy_trading.events.bus import get_event_bus
from whale_copy_trading.notifications.notification_manager import NotificationService
from whale_copy_trading.notifications.strategies.base import BaseNotificationStrategy
from whale_copy_trading.notifications.strategies.console import ConsoleNotifier
from whale_copy_trading.notifications.strategies.telegram import TelegramNotifier
from whale_copy_trading.notifications.stylers.notification_styler import EventNotificationStyler
from whale_copy_trading.persistence.journal import TradeJournal
from whale_copy_trading.persistence.repositories.in_memory import InMemorySeenTransactionRepository
from whale_copy_trading.persistence.repositories.json_file import JsonFilePositionLedger
from whale_copy_trading.services.classification import SwapClassifier
from whale_copy_trading.services.execution import (
    CopyTradeState,
    ExecutionSequencer,
    NonceSequencer,
    SwapExecutor,
    TransactionSender,
)
from whale_copy_trading.services.ingestion import BlockIngestor
from whale_copy_trading.services.notifications import TradeEventNotifier
from whale_copy_trading.services.pipeline import HandlerGroup, SwapPipeline
from whale_copy_trading.services.resolution import SwapResolver


def _build_notification_notifiers(
    settings: Settings,
    styler: EventNotificationStyler,
) -> list[BaseNotificationStrategy]:
    notifiers: list[BaseNotificationStrategy] = []
    if settings.console.enabled:
        notifiers.append(ConsoleNotifier(settings=settings, styler=styler))
    if settings.telegram.enabled:
        notifiers.append(TelegramNotifier(settings=settings, styler=styler))
    return notifiers


def _build_journal(settings: Settings) -> Optional[TradeJournal]:
    """Trade journal, or None when PERSISTENCE__JOURNAL_ENABLED is false."""
    if not settings.persistence.journal_enabled:
        return None
    return TradeJournal(settings.persistence.journal_path)


def _wallet_address(settings: Settings) -> str:
    return settings.wallet.address.strip().lower()


class Container(containers.DeclarativeContainer):
    """Application container. Wires settings, clients, persistence, pipeline and ingestor."""

    config = providers.Callable(get_settings)

    http_client = providers.Singleton(
        AsyncHttpClient,
        settings=config,
    )

    rpc_client = providers.Singleton(
        RpcClient,
        http_client=http_client,
        settings=config,
    )

    aggregator_client = providers.Singleton(
        ZeroExClient,
        http_client=http_client,
        settings=config,
    )

    price_client = providers.Singleton(
        NativePriceClient,
        http_client=http_client,
        settings=config,
    )

    block_stream = providers.Singleton(
        NewHeadsStream,
        http_client=http_client,
        settings=config,
    )

    event_bus = providers.Callable(get_event_bus)

    notification_styler = providers.Singleton(EventNotificationStyler)

    notification_service = providers.Singleton(
        NotificationService,
        notifiers=providers.Callable(_build_notification_notifiers, config, notification_styler),
    )

    trade_event_notifier = providers.Singleton(
        TradeEventNotifier,
        notification_service=notification_service,
        event_bus=event_bus,
    )

    position_ledger = providers.Singleton(
        JsonFilePositionLedger,
        path=config.provided.persistence.positions_file,
    )

    seen_transaction_repository = providers.Singleton(InMemorySeenTransactionRepository)

    trade_journal = providers.Singleton(_build_journal, config)

    copy_trade_state = providers.Singleton(
        CopyTradeState,
        cooldown_seconds=config.provided.strategy.cooldown_seconds,
    )

    nonce_sequencer = providers.Singleton(
        NonceSequencer,
        rpc_client=rpc_client,
        address=providers.Callable(_wallet_address, config),
    )

    transaction_sender = providers.Singleton(
        TransactionSender,
        rpc_client=rpc_client,
        nonce_sequencer=nonce_sequencer,
        settings=config,
    )

    swap_executor = providers.Singleton(
        SwapExecutor,
        aggregator=aggregator_client,
        rpc_client=rpc_client,
        sender=transaction_sender,
        price_client=price_client,
        settings=config,
    )

    execution_sequencer = providers.Singleton(
        ExecutionSequencer,
        settings=config,
        state=copy_trade_state,
        ledger=position_ledger,
        executor=swap_executor,
        rpc_client=rpc_client,
        price_client=price_client,
        event_bus=event_bus,
        journal=trade_journal,
    )

    swap_classifier = providers.Singleton(SwapClassifier)

    swap_resolver = providers.Singleton(
        SwapResolver,
        rpc_client=rpc_client,
        settings=config,
    )

    swap_pipeline = providers.Singleton(
        SwapPipeline,
        settings=config,
        classifier=swap_classifier,
        resolver=swap_resolver,
        sequencer=execution_sequencer,
        seen_transaction_repository=seen_transaction_repository,
        event_bus=event_bus,
    )

    handler_group = providers.Singleton(
        HandlerGroup,
        max_concurrent=config.provided.tracking.max_concurrent_handlers,
    )

    block_ingestor = providers.Singleton(
        BlockIngestor,
        settings=config,
        stream=block_stream,
        rpc_client=rpc_client,
        resolver=swap_resolver,
        pipeline=swap_pipeline,
        handler_group=handler_group,
    )
