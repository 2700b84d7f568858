"""Concrete VendorDataService implementations."""

from vendorsync.services.local import LocalStorageService
from vendorsync.services.sheets import GoogleSheetsService

__all__ = ["GoogleSheetsService", "LocalStorageService"]
