"""Backend selection: spreadsheet when credentialed, local store otherwise."""

from __future__ import annotations

import logging
from pathlib import Path

from vendorsync.config import SyncConfig
from vendorsync.constants import DEFAULT_WORKSHEET_NAME
from vendorsync.service import VendorDataService
from vendorsync.services import GoogleSheetsService, LocalStorageService
from vendorsync.storage import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore

logger = logging.getLogger(__name__)


def create_vendor_service(config: SyncConfig) -> VendorDataService:
    """Build the backend described by ``config``.

    Both ``api_key`` and ``spreadsheet_id`` are required for the Google
    Sheets backend; anything less falls back to local storage, on disk
    under ``local_store_path`` (default ``~/.vendorsync``) and in memory
    only when the caller sets it to ``None``.
    """
    if config.has_remote_credentials:
        worksheet = config.worksheet_name or DEFAULT_WORKSHEET_NAME
        logger.info("Using Google Sheets vendor service (worksheet %r).", worksheet)
        return GoogleSheetsService(
            api_key=config.api_key or "",
            spreadsheet_id=config.spreadsheet_id or "",
            worksheet_name=worksheet,
            base_url=config.sheets_base_url,
            timeout=config.request_timeout_secs,
        )

    store: KeyValueStore
    if config.local_store_path is not None:
        directory = Path(config.local_store_path).expanduser()
        store = FileKeyValueStore(directory)
        logger.info(
            "Using local vendor service at %s "
            "(set api_key and spreadsheet_id to use Google Sheets).",
            directory,
        )
    else:
        store = MemoryKeyValueStore()
        logger.info(
            "Using in-memory vendor service "
            "(set api_key and spreadsheet_id to use Google Sheets)."
        )
    return LocalStorageService(
        store,
        fetch_delay_secs=config.fetch_delay_secs,
        mutation_delay_secs=config.mutation_delay_secs,
    )
