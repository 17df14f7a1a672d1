from enum import StrEnum


class AutoSaveStatus(StrEnum):
    IDLE = 'idle'
    SAVING = 'saving'
    SAVED = 'saved'
    ERROR = 'error'
