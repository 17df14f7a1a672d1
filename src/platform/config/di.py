"""
https://python-dependency-injector.ets-labs.org/index.html
"""

from typing import Optional

from dependency_injector import containers, providers

from src.platform.cache.ttl_cache import TtlCache
from src.platform.config.core_setting import Settings
from src.platform.state.local_storage import LocalStorage
from src.service.booking_flow.app.booking_flow_orchestrator import BookingFlowOrchestrator
from src.service.booking_timer.domain.booking_countdown_timer import BookingCountdownTimer
from src.service.catalog.app.query.event_catalog_use_case import EventCatalogUseCase
from src.service.offline.app.command.form_auto_saver import FormAutoSaver
from src.service.offline.app.command.offline_snapshot_store import OfflineSnapshotStore
from src.service.optimistic_ui.app.optimistic_action_ledger import OptimisticActionLedger
from src.service.seat_selection.app.command.optimistic_seat_selection_use_case import (
    OptimisticSeatSelectionUseCase,
)
from src.service.seat_selection.app.query.seat_pagination_loader import SeatPaginationLoader
from src.service.seat_selection.domain.aggregate.seat_map_aggregate import SeatMap
from src.service.shared_kernel.driven_adapter.anonymous_identity_store import (
    AnonymousIdentityStore,
)
from src.service.shared_kernel.driven_adapter.booking_api_client_impl import (
    BookingApiClient,
    build_http_client,
)
from src.service.shared_kernel.driven_adapter.user_notifier_impl import InMemoryUserNotifier


def _access_token(config: Settings) -> Optional[str]:
    return config.API_ACCESS_TOKEN.get_secret_value() if config.API_ACCESS_TOKEN else None


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Session task scheduler (set by open_booking_session)
    # Every timer callback of the session runs on it
    scheduler = providers.Object(None)

    # Client state
    local_storage = providers.Singleton(
        LocalStorage, path=config_service.provided.LOCAL_STORAGE_PATH
    )
    data_cache = providers.Singleton(TtlCache, default_ttl=config_service.provided.DATA_CACHE_TTL)
    notifier = providers.Singleton(InMemoryUserNotifier)
    identity_store = providers.Singleton(AnonymousIdentityStore, storage=local_storage)
    ledger = providers.Singleton(
        OptimisticActionLedger,
        success_ttl=config_service.provided.LEDGER_SUCCESS_TTL,
        error_ttl=config_service.provided.LEDGER_ERROR_TTL,
    )

    # Booking API
    http_client = providers.Singleton(
        build_http_client,
        base_url=config_service.provided.API_BASE_URL,
        timeout=config_service.provided.API_TIMEOUT,
        api_version=config_service.provided.API_VERSION,
        access_token=providers.Callable(_access_token, config_service),
    )
    booking_api_client = providers.Singleton(BookingApiClient, http_client=http_client)

    # Catalog / offline
    event_catalog = providers.Singleton(
        EventCatalogUseCase,
        catalog_api=booking_api_client,
        storage=local_storage,
        data_cache=data_cache,
        events_ttl=config_service.provided.EVENTS_CACHE_TTL,
    )
    offline_store = providers.Singleton(OfflineSnapshotStore, storage=local_storage)
    # form_id is given by the caller: container.form_auto_saver(form_id='checkout')
    form_auto_saver = providers.Factory(
        FormAutoSaver,
        storage=local_storage,
        save_interval=config_service.provided.AUTOSAVE_INTERVAL,
    )

    # Seat map page (max 6 seats)
    seat_map = providers.Singleton(
        SeatMap,
        user_id=identity_store.provided.get_user_id.call(),
        max_seats=config_service.provided.SEAT_MAP_MAX_SEATS,
    )
    seat_loader = providers.Singleton(
        SeatPaginationLoader,
        seat_query_repo=booking_api_client,
        seat_map=seat_map,
        notifier=notifier,
        page_size=config_service.provided.SEAT_PAGE_SIZE,
    )
    seat_selection = providers.Singleton(
        OptimisticSeatSelectionUseCase,
        seat_map=seat_map,
        ledger=ledger,
        notifier=notifier,
        seat_command_repo=booking_api_client,
    )

    # Complete booking flow (max 8 seats)
    flow_seat_map = providers.Singleton(
        SeatMap,
        user_id=identity_store.provided.get_user_id.call(),
        max_seats=config_service.provided.BOOKING_FLOW_MAX_SEATS,
    )
    flow_seat_loader = providers.Singleton(
        SeatPaginationLoader,
        seat_query_repo=booking_api_client,
        seat_map=flow_seat_map,
        notifier=notifier,
        page_size=config_service.provided.SEAT_PAGE_SIZE,
    )
    flow_seat_selection = providers.Singleton(
        OptimisticSeatSelectionUseCase,
        seat_map=flow_seat_map,
        ledger=ledger,
        notifier=notifier,
        seat_command_repo=booking_api_client,
    )
    booking_timer = providers.Factory(BookingCountdownTimer, notifier=notifier)
    booking_flow = providers.Singleton(
        BookingFlowOrchestrator,
        booking_api=booking_api_client,
        event_catalog=event_catalog,
        seat_loader=flow_seat_loader,
        seat_selection=flow_seat_selection,
        notifier=notifier,
        scheduler=scheduler,
        timer_factory=booking_timer.provider,
    )


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
