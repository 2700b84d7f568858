"""Settings for picking and tuning a vendor backend.

``SyncConfig`` is a frozen value the caller fills in and hands to
``create_vendor_service``; nothing here reads the environment.
"""

from dataclasses import dataclass

from vendorsync.constants import DEFAULT_WORKSHEET_NAME

SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
DEFAULT_LOCAL_STORE_PATH = "~/.vendorsync"


@dataclass(frozen=True)
class SyncConfig:
    api_key: str | None = None
    spreadsheet_id: str | None = None
    worksheet_name: str = DEFAULT_WORKSHEET_NAME
    # None keeps local records in memory only
    local_store_path: str | None = DEFAULT_LOCAL_STORE_PATH
    fetch_delay_secs: float = 0.3
    mutation_delay_secs: float = 0.5
    sheets_base_url: str = SHEETS_API_BASE
    request_timeout_secs: float = 15.0

    @property
    def has_remote_credentials(self) -> bool:
        return bool(self.api_key) and bool(self.spreadsheet_id)
