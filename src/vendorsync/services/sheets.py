"""GoogleSheetsService — VendorDataService backed by the Sheets values API.

Self-contained: uses raw httpx against the v4 REST endpoints, no Google
client library. The API key travels as the ``key`` query parameter.

Endpoints used:
- Read range: GET /{spreadsheet_id}/values/{range}
- Append row: POST /{spreadsheet_id}/values/{range}:append?valueInputOption=USER_ENTERED
- Write range: PUT /{spreadsheet_id}/values/{range}?valueInputOption=USER_ENTERED

Contract note: reads are header-driven (row 1 names the columns, so a
reordered sheet still maps correctly), writes are positional in the fixed
``SHEET_COLUMNS`` order. The asymmetry is intended; do not make writes
follow the sheet's header.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from vendorsync.config import SHEETS_API_BASE
from vendorsync.constants import DEFAULT_WORKSHEET_NAME, SHEET_COLUMNS
from vendorsync.result import FailureKind, OperationResult
from vendorsync.vendor import VendorRecord

logger = logging.getLogger(__name__)

_USER_ENTERED = {"valueInputOption": "USER_ENTERED"}
_LAST_COLUMN = chr(ord("A") + len(SHEET_COLUMNS) - 1)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------


class SheetsError(Exception):
    """Base exception for Sheets API operations."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SheetsAuthError(SheetsError):
    """401/403 — bad API key or spreadsheet not shared."""


class SheetsNotFoundError(SheetsError):
    """404 — unknown spreadsheet or worksheet."""


class SheetsRateLimitError(SheetsError):
    """429 — quota exhausted (retryable)."""


class SheetsServerError(SheetsError):
    """5xx — server-side error (retryable)."""


class SheetsConnectionError(SheetsError):
    """Network/DNS failure (retryable)."""


class SheetsTimeoutError(SheetsError):
    """Request timeout (retryable)."""


_STATUS_MAP: dict[int, type[SheetsError]] = {
    401: SheetsAuthError,
    403: SheetsAuthError,
    404: SheetsNotFoundError,
    429: SheetsRateLimitError,
}


# ---------------------------------------------------------------------------
# A1 range helpers
# ---------------------------------------------------------------------------


def quote_sheet_name(worksheet_name: str) -> str:
    """Single-quote a worksheet name for A1 notation, doubling inner quotes."""
    return "'" + worksheet_name.replace("'", "''") + "'"


def row_range(worksheet_name: str, row_number: int) -> str:
    """A1 range covering one full record row, e.g. ``'Vendors'!A3:F3``."""
    sheet = quote_sheet_name(worksheet_name)
    return f"{sheet}!A{row_number}:{_LAST_COLUMN}{row_number}"


def index_rows(rows: list[list[Any]]) -> list[tuple[int, VendorRecord]]:
    """Zip-map data rows onto the header row, keeping sheet row numbers.

    Columns are matched by header name, so unknown headers are ignored and
    missing ones fall back to the field default. Fully blank rows are
    skipped but still counted, so row numbers stay aligned with the sheet.
    """
    if len(rows) < 2:
        return []
    headers = [str(h) for h in rows[0]]
    indexed: list[tuple[int, VendorRecord]] = []
    for offset, row in enumerate(rows[1:]):
        if not any(str(cell).strip() for cell in row):
            continue
        mapped = {
            header: row[index] if index < len(row) else ""
            for index, header in enumerate(headers)
        }
        # data offset 0 is sheet row 2; row 1 holds the header
        indexed.append((offset + 2, VendorRecord.from_dict(mapped)))
    return indexed


def rows_to_vendors(rows: list[list[Any]]) -> list[VendorRecord]:
    return [vendor for _, vendor in index_rows(rows)]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class GoogleSheetsService:
    """Vendor persistence in one worksheet of a Google spreadsheet.

    Implements the ``VendorDataService`` protocol. ``update`` and ``delete``
    re-read the whole sheet to locate their target; there is no version
    token, so concurrent writers can clobber each other.
    """

    def __init__(
        self,
        api_key: str,
        spreadsheet_id: str,
        worksheet_name: str = DEFAULT_WORKSHEET_NAME,
        *,
        base_url: str = SHEETS_API_BASE,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._spreadsheet_id = spreadsheet_id
        self._worksheet_name = worksheet_name or DEFAULT_WORKSHEET_NAME
        self._sheet_range = quote_sheet_name(self._worksheet_name)
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            params={"key": api_key},
            timeout=httpx.Timeout(timeout, connect=5.0),
            transport=transport,
        )

    @property
    def worksheet_name(self) -> str:
        return self._worksheet_name

    # -- internal request dispatcher -----------------------------------------

    def _values_path(self, a1_range: str, suffix: str = "") -> str:
        return (
            f"/{quote(self._spreadsheet_id, safe='')}/values/"
            f"{quote(a1_range, safe='!:')}{suffix}"
        )

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, str] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and map errors to the Sheets exception hierarchy."""
        try:
            response = await self._client.request(
                method, endpoint, params=params, json=json_data
            )
        except httpx.ConnectError as exc:
            raise SheetsConnectionError(str(exc)) from exc
        except httpx.TimeoutException as exc:
            raise SheetsTimeoutError(str(exc)) from exc
        except httpx.HTTPError as exc:
            raise SheetsError(str(exc)) from exc

        if response.status_code >= 400:
            message = (
                f"Google Sheets API error: {response.status_code} "
                f"{response.reason_phrase}"
            )
            exc_cls = _STATUS_MAP.get(response.status_code)
            if exc_cls is not None:
                raise exc_cls(message, status_code=response.status_code)
            if response.status_code >= 500:
                raise SheetsServerError(message, status_code=response.status_code)
            raise SheetsError(message, status_code=response.status_code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise SheetsError(f"Malformed response from Google Sheets: {exc}") from exc

    async def _read_rows(self) -> list[list[Any]]:
        """GET the whole worksheet range as a list of rows."""
        data = await self._request("GET", self._values_path(self._sheet_range))
        if not isinstance(data, dict):
            raise SheetsError("Malformed response from Google Sheets: expected an object")
        rows = data.get("values") or []
        if not isinstance(rows, list) or not all(isinstance(r, list) for r in rows):
            raise SheetsError("Malformed response from Google Sheets: bad 'values'")
        return rows

    # -- VendorDataService protocol ------------------------------------------

    async def fetch_all(self) -> OperationResult[list[VendorRecord]]:
        """Read every vendor row below the header."""
        try:
            vendors = rows_to_vendors(await self._read_rows())
        except SheetsError as exc:
            logger.warning("Failed to fetch vendors from sheet: %s", exc)
            return OperationResult.fail(str(exc) or "Failed to fetch vendors")
        return OperationResult.ok(vendors)

    async def add(self, vendor: VendorRecord) -> OperationResult[VendorRecord]:
        """Append one row in canonical column order."""
        try:
            await self._request(
                "POST",
                self._values_path(self._sheet_range, ":append"),
                params=_USER_ENTERED,
                json_data={"values": [vendor.to_row()]},
            )
        except SheetsError as exc:
            logger.warning("Failed to add vendor %r: %s", vendor.company_name, exc)
            return OperationResult.fail(f"Failed to add vendor: {exc}")
        return OperationResult.ok(vendor)

    async def update(
        self, original_name: str, vendor: VendorRecord
    ) -> OperationResult[VendorRecord]:
        """Overwrite the row currently holding ``original_name``.

        The sheet is re-read to find the row. The first match wins when
        the sheet holds duplicates.
        """
        try:
            indexed = index_rows(await self._read_rows())
            row_number = next(
                (n for n, v in indexed if v.company_name == original_name),
                None,
            )
            if row_number is None:
                return OperationResult.fail(
                    f'Vendor "{original_name}" not found', FailureKind.NOT_FOUND
                )
            await self._request(
                "PUT",
                self._values_path(row_range(self._worksheet_name, row_number)),
                params=_USER_ENTERED,
                json_data={"values": [vendor.to_row()]},
            )
        except SheetsError as exc:
            logger.warning("Failed to update vendor %r: %s", original_name, exc)
            return OperationResult.fail(f"Failed to update vendor: {exc}")
        return OperationResult.ok(vendor)

    async def delete(self, company_name: str) -> OperationResult[None]:
        """Rewrite the whole worksheet without the first ``company_name`` row.

        One PUT carries the canonical header, every surviving row, and
        enough blank rows to clear the rows the table no longer reaches,
        since a values update never shrinks the range it writes.
        """
        try:
            rows = await self._read_rows()
            survivors = rows_to_vendors(rows)
            index = next(
                (i for i, v in enumerate(survivors) if v.company_name == company_name),
                None,
            )
            if index is None:
                return OperationResult.fail(
                    f'Vendor "{company_name}" not found', FailureKind.NOT_FOUND
                )
            del survivors[index]
            values: list[list[Any]] = [list(SHEET_COLUMNS)]
            values.extend(v.to_row() for v in survivors)
            blank_rows = len(rows) - len(values)
            values.extend([""] * len(SHEET_COLUMNS) for _ in range(blank_rows))
            await self._request(
                "PUT",
                self._values_path(self._sheet_range),
                params=_USER_ENTERED,
                json_data={"values": values},
            )
        except SheetsError as exc:
            logger.warning("Failed to delete vendor %r: %s", company_name, exc)
            return OperationResult.fail(f"Failed to delete vendor: {exc}")
        return OperationResult.ok()

    # -- lifecycle ------------------------------------------------------------

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> GoogleSheetsService:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
