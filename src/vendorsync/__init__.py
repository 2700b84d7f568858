"""Vendorsync — vendor records synced to Google Sheets or local storage.

CRUD over a small vendor list with a mutate-then-refetch cache.
"""

__version__ = "0.1.0"

from vendorsync.config import SyncConfig
from vendorsync.constants import BusinessType, Product, SHEET_COLUMNS
from vendorsync.vendor import (
    VendorRecord,
    VendorFormData,
    form_to_vendor,
    vendor_to_form,
    validate_mandatory_fields,
    is_duplicate_vendor,
)
from vendorsync.result import OperationResult, FailureKind
from vendorsync.service import VendorDataService
from vendorsync.storage import KeyValueStore, MemoryKeyValueStore, FileKeyValueStore
from vendorsync.services import GoogleSheetsService, LocalStorageService
from vendorsync.services.sheets import SheetsError
from vendorsync.factory import create_vendor_service
from vendorsync.store import Alert, AlertKind, VendorStore, open_vendor_store

__all__ = [
    "SyncConfig",
    "BusinessType",
    "Product",
    "SHEET_COLUMNS",
    "VendorRecord",
    "VendorFormData",
    "form_to_vendor",
    "vendor_to_form",
    "validate_mandatory_fields",
    "is_duplicate_vendor",
    "OperationResult",
    "FailureKind",
    "VendorDataService",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "FileKeyValueStore",
    "GoogleSheetsService",
    "LocalStorageService",
    "SheetsError",
    "create_vendor_service",
    "Alert",
    "AlertKind",
    "VendorStore",
    "open_vendor_store",
]
