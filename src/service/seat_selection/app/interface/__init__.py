"""Seat Selection Interfaces"""

from src.service.seat_selection.app.interface.i_seat_command_repo import ISeatCommandRepo
from src.service.seat_selection.app.interface.i_seat_query_repo import ISeatQueryRepo

__all__ = ['ISeatCommandRepo', 'ISeatQueryRepo']
