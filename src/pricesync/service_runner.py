from __future__ import annotations

"""Utilities for running the price sync core as a long-lived async service."""

import asyncio
import logging
import signal
from typing import Any, Callable, Coroutine, Optional

from .cache_store import CacheStore
from .cache_store_helpers import BackupStore, InMemoryBackupStore, RedisBackupStore
from .config.settings import SyncSettings
from .data_models import ChartPeriod
from .logging_config import setup_logging
from .price_service import PriceSyncService
from .remote_data_source import RemoteDataSource
from .remote_data_source_helpers import PriceApiClient, PriceApiSessionManager, auth_headers
from .retry_scheduler import RetryScheduler

logger = logging.getLogger(__name__)

SERVICE_NAME = "pricesync"

ServiceFactory = Callable[[], Coroutine[Any, Any, None]]


def build_backup_store(settings: SyncSettings) -> BackupStore:
    if settings.redis_url:
        return RedisBackupStore.from_url(
            settings.redis_url,
            key_prefix=settings.backup_key_prefix,
            ttl_seconds=settings.backup_ttl_seconds or None,
        )
    logger.info("No Redis URL configured; using in-memory backup store")
    return InMemoryBackupStore()


def build_api_client(settings: SyncSettings) -> PriceApiClient:
    session_manager = PriceApiSessionManager(
        SERVICE_NAME,
        connection_timeout=settings.connect_timeout_seconds,
        request_timeout=settings.request_timeout_seconds,
        default_headers=auth_headers(settings.api_key),
    )
    return PriceApiClient(settings.api_base_url, session_manager)


def build_service(settings: SyncSettings, client: PriceApiClient) -> PriceSyncService:
    return PriceSyncService(
        RemoteDataSource(client),
        cache=CacheStore(build_backup_store(settings)),
        retry_scheduler=RetryScheduler(),
        retry_policy=settings.retry_policy,
        profile=settings.profile,
    )


def watch_configured_instruments(service: PriceSyncService, settings: SyncSettings) -> None:
    service.watch_latest(settings.instruments)
    for code in settings.instruments:
        service.watch_history(code, settings.history_days)
        service.watch_chart(code, ChartPeriod.DAILY, settings.chart_limit)


def _install_stop_signals(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop_event.set)
        except (NotImplementedError, RuntimeError):
            # add_signal_handler is unavailable on some platforms and outside the main thread
            logger.debug("Cannot install handler for %s", signum)


async def run_price_sync(settings: SyncSettings, stop_event: Optional[asyncio.Event] = None) -> None:
    """Poll every configured instrument until ``stop_event`` is set, then shut down cleanly."""
    stop = stop_event or asyncio.Event()
    if stop_event is None:
        _install_stop_signals(stop)

    client = build_api_client(settings)
    service = build_service(settings, client)
    try:
        watch_configured_instruments(service, settings)
        logger.info(
            "Price sync running for %s (profile=%s)",
            ",".join(settings.instruments),
            service.profile.name,
        )
        await stop.wait()
        logger.info("Stop requested; shutting down")
    finally:
        await service.shutdown()
        await client.close()


def run_async_service(
    factory: ServiceFactory,
    *,
    service_name: str = SERVICE_NAME,
    configure_logging: bool = True,
    shutdown_message: Optional[str] = None,
) -> None:
    """Run an async service with consistent Ctrl+C handling."""

    if configure_logging:
        setup_logging(service_name)

    try:
        asyncio.run(factory())
    except KeyboardInterrupt:
        if shutdown_message:
            logger.info(shutdown_message)
        else:
            logger.info("%s service interrupted by user", service_name)


__all__ = [
    "SERVICE_NAME",
    "build_api_client",
    "build_backup_store",
    "build_service",
    "run_async_service",
    "run_price_sync",
    "watch_configured_instruments",
]
