"""Catalog Interfaces"""

from src.service.catalog.app.interface.i_event_catalog_api import IEventCatalogApi

__all__ = ['IEventCatalogApi']
