from src.platform.logging.loguru_io import Logger
from src.platform.state.local_storage import LocalStorage
from src.platform.types.clock import Clock, epoch_ms, wall_clock


USER_ID_KEY = 'userId'


class AnonymousIdentityStore:
    """Stable per-browser user id used for real-time seat holds"""

    def __init__(self, *, storage: LocalStorage, clock: Clock = wall_clock) -> None:
        self.storage = storage
        self._clock = clock

    def get_user_id(self) -> str:
        user_id = self.storage.get_item(USER_ID_KEY)
        if user_id:
            return user_id

        user_id = f'user_{epoch_ms(self._clock)}'
        self.storage.set_item(USER_ID_KEY, user_id)
        Logger.base.info(f'🆔 [IDENTITY] Created anonymous user id {user_id}')
        return user_id
