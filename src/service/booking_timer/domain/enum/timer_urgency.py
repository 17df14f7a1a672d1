from enum import StrEnum


class TimerUrgency(StrEnum):
    NORMAL = 'normal'
    WARNING = 'warning'  # last 5 minutes
    HURRY = 'hurry'  # last 2 minutes
    CRITICAL = 'critical'  # last minute
