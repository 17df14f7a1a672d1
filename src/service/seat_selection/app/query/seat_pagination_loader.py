"""
Seat Pagination Loader

Pages a show's seats in from the booking API and feeds them into the SeatMap
aggregate. The first page replaces the seat list; "load more" appends.

Stale responses:
- every replace load and every reset bumps a generation counter
- a response whose generation (or show) no longer matches is dropped
  without touching the seat map or the page counters
- a failed load, including a show switch, leaves the loaded seats, the
  selection and the current show as they were
"""

from typing import Optional

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.seat_selection.app.interface import ISeatQueryRepo
from src.service.seat_selection.domain.aggregate.seat_map_aggregate import SeatMap
from src.service.shared_kernel.app.interface import IUserNotifier


class SeatPaginationLoader:
    def __init__(
        self,
        *,
        seat_query_repo: ISeatQueryRepo,
        seat_map: SeatMap,
        notifier: IUserNotifier,
        page_size: int = settings.SEAT_PAGE_SIZE,
    ) -> None:
        self.seat_query_repo = seat_query_repo
        self.seat_map = seat_map
        self.notifier = notifier
        self.page_size = page_size

        self.show_id: Optional[str] = None
        self.current_page = 1
        self.total_pages = 1
        self.loading = False
        self.loading_more = False
        self._generation = 0

    @property
    def has_more(self) -> bool:
        return self.show_id is not None and self.current_page < self.total_pages

    @property
    def in_flight(self) -> bool:
        return self.loading or self.loading_more

    @Logger.io
    async def load_seats(self, *, show_id: str, page: int = 1, append: bool = False) -> bool:
        """
        Fetch one page of seats

        Args:
            show_id: Show to load; a different show replaces the seat map once
                its first page has arrived
            page: 1-based page number
            append: Append to the current list instead of replacing it

        Returns:
            True when the page was applied to the seat map
        """
        # "load more" only makes sense for the show already loaded
        append = append and show_id == self.show_id

        if append:
            self.loading_more = True
        else:
            self._generation += 1
            self.loading_more = False
            self.loading = True
        generation = self._generation

        try:
            seat_page = await self.seat_query_repo.get_show_seats(
                show_id=show_id, page=page, page_size=self.page_size
            )
        except Exception as e:
            if generation != self._generation:
                return False
            Logger.base.error(f'❌ [SEAT_LOADER] Failed to load page {page} of show {show_id}: {e}')
            self.notifier.error('Failed to load seat information')
            return False
        finally:
            if generation == self._generation:
                if append:
                    self.loading_more = False
                else:
                    self.loading = False

        if generation != self._generation or (append and show_id != self.show_id):
            Logger.base.info(f'🗑️ [SEAT_LOADER] Dropped stale page {page} of show {show_id}')
            return False

        if show_id != self.show_id:
            self.seat_map.reset()
            self.show_id = show_id

        if append:
            dropped = self.seat_map.append_seats(seat_page.seats)
        else:
            dropped = self.seat_map.replace_seats(seat_page.seats)

        self.current_page = seat_page.current_page or page
        self.total_pages = seat_page.total_pages or 1

        Logger.base.info(
            f'💺 [SEAT_LOADER] Show {show_id} page {self.current_page}/{self.total_pages}: '
            f'{len(seat_page.seats)} seats ({len(self.seat_map.seats)} loaded)'
        )

        if dropped:
            self.notifier.warning(
                f'{len(dropped)} selected seat(s) are no longer available: {", ".join(dropped)}'
            )
        return True

    async def load_more_seats(self) -> bool:
        if self.show_id is None or self.in_flight or not self.has_more:
            return False
        return await self.load_seats(show_id=self.show_id, page=self.current_page + 1, append=True)

    def reset(self) -> None:
        self._generation += 1
        self.show_id = None
        self.current_page = 1
        self.total_pages = 1
        self.loading = False
        self.loading_more = False
        self.seat_map.reset()
