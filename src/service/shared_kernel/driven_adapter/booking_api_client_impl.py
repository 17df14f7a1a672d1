"""
Booking API Client (httpx)

One adapter for every `/customer/*` endpoint the booking client consumes.
Request bodies are encoded with orjson; responses are decoded with orjson
and validated with the pydantic schemas in `schema/`.

Errors:
- non-2xx answer       -> ApiError(message, status_code)
- connection/timeouts  -> ApiUnavailableError (503)
- unexpected payload   -> ApiError(status_code=502)
"""

from typing import Any, Optional

import httpx
import orjson
from pydantic import ValidationError

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import ApiError, ApiUnavailableError
from src.platform.logging.loguru_io import Logger
from src.service.booking_flow.app.interface import IBookingFlowApi
from src.service.catalog.app.interface import IEventCatalogApi
from src.service.seat_selection.app.dto import SeatPage, SeatValidationResult
from src.service.seat_selection.app.interface import ISeatCommandRepo, ISeatQueryRepo
from src.service.shared_kernel.driven_adapter.schema import (
    EventListSchema,
    SeatPageSchema,
    SeatValidationSchema,
    is_truthy_result,
)


BACKEND_UNAVAILABLE_MESSAGE = 'Backend server is not running. Please start the booking API.'


def build_http_client(
    *,
    base_url: str = settings.API_BASE_URL,
    timeout: float = settings.API_TIMEOUT,
    api_version: str = settings.API_VERSION,
    access_token: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    headers = {'Accept': 'application/json', 'X-API-Version': api_version}
    if access_token:
        headers['Authorization'] = f'Bearer {access_token}'
    return httpx.AsyncClient(
        base_url=base_url, timeout=timeout, headers=headers, transport=transport
    )


class BookingApiClient(ISeatQueryRepo, ISeatCommandRepo, IBookingFlowApi, IEventCatalogApi):
    def __init__(self, *, http_client: httpx.AsyncClient) -> None:
        self.http_client = http_client

    async def aclose(self) -> None:
        await self.http_client.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        content = orjson.dumps(body) if body is not None else None
        headers = {'Content-Type': 'application/json'} if content is not None else None
        try:
            response = await self.http_client.request(
                method, path, params=params, content=content, headers=headers
            )
        except httpx.TransportError as e:
            Logger.base.error(f'🔌 [API] {method} {path} unreachable: {e!r}')
            raise ApiUnavailableError(BACKEND_UNAVAILABLE_MESSAGE) from e

        if response.is_error:
            raise ApiError(self._error_message(response), response.status_code)
        if not response.content:
            return None
        try:
            return orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            raise ApiError(f'Invalid JSON from {method} {path}', 502) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = orjson.loads(response.content)
        except orjson.JSONDecodeError:
            payload = None
        if isinstance(payload, dict):
            for key in ('message', 'error', 'title', 'detail'):
                if isinstance(payload.get(key), str) and payload[key]:
                    return payload[key]
        return f'Booking API request failed with status {response.status_code}'

    @staticmethod
    def _as_dict(payload: Any) -> dict[str, Any]:
        return payload if isinstance(payload, dict) else {}

    # ------------------------------------------------------------------
    # Seats
    # ------------------------------------------------------------------

    @Logger.io
    async def get_show_seats(self, *, show_id: str, page: int, page_size: int) -> SeatPage:
        payload = await self._request(
            'GET',
            f'/customer/shows/{show_id}/seats',
            params={'page': page, 'pageSize': page_size},
        )
        try:
            return SeatPageSchema.parse_payload(payload).to_dto(requested_page=page)
        except ValidationError as e:
            raise ApiError(f'Unexpected seat payload for show {show_id}: {e}', 502) from e

    @Logger.io
    async def select_seat(self, *, show_seat_id: str, user_id: str) -> bool:
        payload = await self._request(
            'POST', f'/customer/realtime-seats/{show_seat_id}/select', params={'userId': user_id}
        )
        return is_truthy_result(payload)

    @Logger.io
    async def deselect_seat(self, *, show_seat_id: str, user_id: str) -> bool:
        payload = await self._request(
            'POST', f'/customer/realtime-seats/{show_seat_id}/deselect', params={'userId': user_id}
        )
        return is_truthy_result(payload)

    @Logger.io
    async def release_user_selection(self, *, user_id: str, show_id: str) -> None:
        await self._request(
            'POST', '/customer/realtime-seats/release', body={'userId': user_id, 'showId': show_id}
        )

    @Logger.io
    async def validate_seats(
        self, *, user_id: str, show_seat_ids: list[str]
    ) -> SeatValidationResult:
        payload = await self._request(
            'POST',
            '/customer/checkout/validate-seats',
            body={'userId': user_id, 'showSeatIds': show_seat_ids},
        )
        try:
            return SeatValidationSchema.model_validate(payload or {}).to_dto()
        except ValidationError as e:
            raise ApiError(f'Unexpected seat validation payload: {e}', 502) from e

    # ------------------------------------------------------------------
    # Booking flow
    # ------------------------------------------------------------------

    @Logger.io
    async def lock_seats(self, *, show_id: str, seat_ids: list[str]) -> dict[str, Any]:
        payload = await self._request(
            'POST', '/customer/seats/lock', body={'showId': show_id, 'seatIds': seat_ids}
        )
        return self._as_dict(payload)

    @Logger.io
    async def start_booking_timer(self, *, show_id: str, seat_ids: list[str]) -> dict[str, Any]:
        payload = await self._request(
            'POST', f'/customer/booking-timer/{show_id}/start', body={'seatIds': seat_ids}
        )
        return self._as_dict(payload)

    @Logger.io
    async def get_booking_timer(self, *, show_id: str) -> dict[str, Any]:
        return self._as_dict(await self._request('GET', f'/customer/booking-timer/{show_id}'))

    @Logger.io
    async def extend_booking_timer(
        self, *, show_id: str, additional_minutes: int = 5
    ) -> dict[str, Any]:
        payload = await self._request(
            'POST',
            f'/customer/booking-timer/{show_id}/extend',
            body={'additionalMinutes': additional_minutes},
        )
        return self._as_dict(payload)

    @Logger.io
    async def create_booking(self, *, booking_data: dict[str, Any]) -> dict[str, Any]:
        return self._as_dict(await self._request('POST', '/customer/bookings', body=booking_data))

    @Logger.io
    async def get_booking(self, *, booking_id: str) -> dict[str, Any]:
        return self._as_dict(await self._request('GET', f'/customer/bookings/{booking_id}'))

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    @Logger.io
    async def list_events(self, *, params: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        payload = await self._request('GET', '/customer/events', params=params)
        return EventListSchema.parse_payload(payload).events

    @Logger.io
    async def get_event_details(self, *, event_id: str) -> dict[str, Any]:
        return self._as_dict(await self._request('GET', f'/customer/events/{event_id}'))

    @Logger.io
    async def get_show_details(self, *, show_id: str) -> dict[str, Any]:
        return self._as_dict(await self._request('GET', f'/customer/shows/{show_id}'))
