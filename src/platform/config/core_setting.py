from pathlib import Path
from typing import Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'BookNow Booking Client'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Remote booking API
    API_BASE_URL: str = 'http://localhost:5089/api'
    API_TIMEOUT: float = 30.0  # seconds
    API_VERSION: str = '1.0'  # Sent as X-API-Version
    API_ACCESS_TOKEN: Optional[SecretStr] = None

    @field_validator('API_BASE_URL', mode='before')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if isinstance(v, str):
            return v.rstrip('/')
        return v

    # Seat map
    SEAT_PAGE_SIZE: int = 50
    SEAT_MAP_MAX_SEATS: int = 6  # Seat selection page
    BOOKING_FLOW_MAX_SEATS: int = 8  # Step-by-step booking flow
    SEAT_LAYOUT_MAX_ROWS: int = 20
    SEAT_LAYOUT_MAX_SEATS_PER_ROW: int = 20

    # Booking countdown timer (seconds)
    BOOKING_TIMER_SECONDS: int = 900
    BOOKING_TIMER_TICK_INTERVAL: float = 1.0
    BOOKING_TIMER_EXTENSION_SECONDS: int = 300
    BOOKING_TIMER_EXTENSION_THRESHOLD: int = 300  # Extension offered at or below this
    BOOKING_TIMER_EXTENSION_COOLDOWN: float = 60.0
    BOOKING_TIMER_HURRY_SECONDS: int = 120
    BOOKING_TIMER_CRITICAL_SECONDS: int = 60

    # Optimistic action ledger (seconds)
    LEDGER_PURGE_INTERVAL: float = 1.0
    LEDGER_SUCCESS_TTL: float = 3.0
    LEDGER_ERROR_TTL: float = 5.0

    # Client caches (seconds)
    EVENTS_CACHE_TTL: float = 300.0
    DATA_CACHE_TTL: float = 120.0

    # Form autosave (seconds)
    AUTOSAVE_INTERVAL: float = 30.0
    AUTOSAVE_SAVED_RESET: float = 2.0
    AUTOSAVE_ERROR_RESET: float = 3.0

    # Local storage file (None keeps everything in memory)
    LOCAL_STORAGE_PATH: Optional[Path] = _PROJECT_ROOT / 'client_state' / 'local_storage.json'

    # Tracing
    OTEL_CONSOLE_EXPORT: bool = False


settings = Settings()  # type: ignore
