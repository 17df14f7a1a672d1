"""
Booking Session Factory

Opens everything a customer booking session needs and tears it down again:
the session task scheduler, the ledger purge loop, the HTTP client and
(optionally) tracing.

Usage:
    async with open_booking_session() as session:
        flow = session.booking_flow()
        await flow.load_events()
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from dependency_injector import providers

from src.platform.config.core_setting import settings
from src.platform.config.di import Container, container as default_container
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.platform.scheduling.task_scheduler import TaskScheduler


@asynccontextmanager
async def open_booking_session(
    *,
    container: Optional[Container] = None,
    enable_tracing: bool = False,
    service_name: str = 'booknow-client',
) -> AsyncIterator[Container]:
    """
    Args:
        container: DI container to use (tests pass their own with overrides)
        enable_tracing: Install the OpenTelemetry SDK provider and httpx instrumentation
        service_name: Service name reported in traces

    Yields:
        The container, with its scheduler bound to this session
    """
    container = container or default_container
    tracing: Optional[TracingConfig] = None
    if enable_tracing:
        tracing = TracingConfig(
            service_name=service_name, enable_console=settings.OTEL_CONSOLE_EXPORT
        )
        tracing.setup()
        tracing.instrument_httpx()

    async with TaskScheduler.open() as scheduler:
        container.reset_singletons()
        container.scheduler.override(providers.Object(scheduler))
        container.ledger().start_auto_purge(scheduler, interval=settings.LEDGER_PURGE_INTERVAL)
        Logger.base.info('🚀 [SESSION] Booking session opened')
        try:
            yield container
        finally:
            scheduler.close()
            await container.booking_api_client().aclose()
            container.scheduler.reset_override()
            container.reset_singletons()
            if tracing is not None:
                tracing.shutdown()
            Logger.base.info('🛑 [SESSION] Booking session closed')
