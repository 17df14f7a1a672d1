"""Booking Flow Interfaces"""

from src.service.booking_flow.app.interface.i_booking_flow_api import IBookingFlowApi

__all__ = ['IBookingFlowApi']
