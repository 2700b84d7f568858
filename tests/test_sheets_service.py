"""Tests for GoogleSheetsService — VendorDataService via the Sheets values API."""

import json
import re
from unittest.mock import AsyncMock

import httpx
import pytest

from vendorsync.constants import SHEET_COLUMNS
from vendorsync.result import FailureKind
from vendorsync.services.sheets import (
    GoogleSheetsService,
    SheetsAuthError,
    SheetsConnectionError,
    SheetsError,
    SheetsNotFoundError,
    SheetsRateLimitError,
    SheetsServerError,
    SheetsTimeoutError,
    quote_sheet_name,
    row_range,
    rows_to_vendors,
)
from vendorsync.vendor import VendorRecord


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

API_KEY = "test-api-key"
SHEET_ID = "sheet-123"
BASE = "https://sheets.example.test/v4/spreadsheets"

HEADER = list(SHEET_COLUMNS)
ACME = ["Acme Electronics", "Manufacturer", "Electronics, Software", "15", "2024-01-15", "Primary"]
FRESH = ["FreshMart Wholesale", "Wholesaler", "Groceries", "8", "2024-03-10", "Organic"]
STYLE = ["StyleHub Retail", "Retailer", "Apparel, Other", "12", "2023-11-30", "Fashion"]

_ROW_RANGE = re.compile(r"^'Vendors'!A(\d+):F(\d+)$")


class FakeSheet:
    """In-memory worksheet speaking the subset of the values API we use.

    Like the real API, GET omits trailing blank rows and a PUT overwrites
    only the cells it covers.
    """

    def __init__(self, rows: list[list[str]] | None = None) -> None:
        self.rows: list[list[str]] = [list(r) for r in (rows or [])]
        self.requests: list[httpx.Request] = []
        self.fail_status: int | None = None
        self.fail_methods: set[str] = set()

    def values(self) -> list[list[str]]:
        rows = [list(r) for r in self.rows]
        while rows and not any(str(c) for c in rows[-1]):
            rows.pop()
        return [self._trim(r) for r in rows]

    @staticmethod
    def _trim(row: list[str]) -> list[str]:
        row = list(row)
        while row and row[-1] == "":
            row.pop()
        return row

    def _write(self, start_row: int, values: list[list]) -> None:
        for offset, row in enumerate(values):
            index = start_row - 1 + offset
            while len(self.rows) <= index:
                self.rows.append([])
            self.rows[index] = [str(c) for c in row]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_status is not None and (
            not self.fail_methods or request.method in self.fail_methods
        ):
            return httpx.Response(self.fail_status, json={"error": "nope"})

        prefix = f"/v4/spreadsheets/{SHEET_ID}/values/"
        assert request.url.path.startswith(prefix)
        assert request.url.params["key"] == API_KEY
        target = request.url.path[len(prefix):]

        if request.method == "GET" and target == "'Vendors'":
            return httpx.Response(200, json={"range": "'Vendors'!A1:Z1000", "values": self.values()})

        body = json.loads(request.content)
        assert request.url.params["valueInputOption"] == "USER_ENTERED"
        if request.method == "POST" and target == "'Vendors':append":
            self._write(len(self.values()) + 1, body["values"])
            return httpx.Response(200, json={"updates": {"updatedRows": 1}})
        if request.method == "PUT" and target == "'Vendors'":
            self._write(1, body["values"])
            return httpx.Response(200, json={"updatedRows": len(body["values"])})
        match = _ROW_RANGE.match(target)
        if request.method == "PUT" and match:
            self._write(int(match.group(1)), body["values"])
            return httpx.Response(200, json={"updatedRows": 1})
        return httpx.Response(400, json={"error": f"unexpected {request.method} {target}"})


def _service(sheet: FakeSheet) -> GoogleSheetsService:
    return GoogleSheetsService(
        api_key=API_KEY,
        spreadsheet_id=SHEET_ID,
        worksheet_name="Vendors",
        base_url=BASE,
        transport=httpx.MockTransport(sheet.handler),
    )


def _record(name: str = "Acme2", **overrides) -> VendorRecord:
    fields = dict(
        company_name=name,
        business_type="Retailer",
        products="Electronics",
        years_in_business=3,
        onboarding_date="2025-01-01",
        additional_info="",
    )
    fields.update(overrides)
    return VendorRecord(**fields)


# ---------------------------------------------------------------------------
# Range helpers
# ---------------------------------------------------------------------------


class TestRangeHelpers:
    def test_plain_sheet_name_quoted(self) -> None:
        assert quote_sheet_name("Vendors") == "'Vendors'"

    @pytest.mark.parametrize("name", ["A1", "R1C1", "XFD1048576"])
    def test_cell_like_sheet_name_quoted(self, name) -> None:
        assert quote_sheet_name(name) == f"'{name}'"
        assert row_range(name, 2) == f"'{name}'!A2:F2"

    def test_sheet_name_with_space_quoted(self) -> None:
        assert quote_sheet_name("Vendor List") == "'Vendor List'"

    def test_embedded_quote_doubled(self) -> None:
        assert quote_sheet_name("Bob's") == "'Bob''s'"

    def test_row_range_covers_six_columns(self) -> None:
        assert row_range("Vendors", 3) == "'Vendors'!A3:F3"


# ---------------------------------------------------------------------------
# Header-driven row mapping
# ---------------------------------------------------------------------------


class TestRowsToVendors:
    def test_empty_rows(self) -> None:
        assert rows_to_vendors([]) == []

    def test_header_only(self) -> None:
        assert rows_to_vendors([HEADER]) == []

    def test_maps_by_header(self) -> None:
        vendors = rows_to_vendors([HEADER, ACME])
        assert vendors == [
            VendorRecord("Acme Electronics", "Manufacturer", "Electronics, Software", 15, "2024-01-15", "Primary")
        ]

    def test_reordered_headers_still_map(self) -> None:
        header = ["YearsInBusiness", "CompanyName", "Products"]
        vendors = rows_to_vendors([header, ["7", "Reordered Co", "Software"]])
        assert vendors[0].company_name == "Reordered Co"
        assert vendors[0].years_in_business == 7
        assert vendors[0].products == "Software"
        assert vendors[0].business_type == ""

    def test_misspelled_header_falls_back_to_default(self) -> None:
        header = ["CompanyName", "YearsInBusines"]
        vendors = rows_to_vendors([header, ["Typo Co", "9"]])
        assert vendors[0].years_in_business == 0

    def test_unparseable_years_become_zero(self) -> None:
        vendors = rows_to_vendors([HEADER, ["X", "Retailer", "", "lots", "", ""]])
        assert vendors[0].years_in_business == 0

    def test_short_rows_padded_with_defaults(self) -> None:
        vendors = rows_to_vendors([HEADER, ["Short Co", "Retailer"]])
        assert vendors[0].onboarding_date == ""
        assert vendors[0].additional_info == ""

    def test_blank_rows_skipped(self) -> None:
        vendors = rows_to_vendors([HEADER, ACME, [], ["", ""], FRESH])
        assert [v.company_name for v in vendors] == ["Acme Electronics", "FreshMart Wholesale"]


# ---------------------------------------------------------------------------
# fetch_all
# ---------------------------------------------------------------------------


class TestFetchAll:
    @pytest.mark.asyncio
    async def test_returns_records(self) -> None:
        sheet = FakeSheet([HEADER, ACME, FRESH])
        result = await _service(sheet).fetch_all()
        assert result.success
        assert [v.company_name for v in result.data] == ["Acme Electronics", "FreshMart Wholesale"]
        assert result.data[1].years_in_business == 8

    @pytest.mark.asyncio
    async def test_header_only_is_empty_success(self) -> None:
        result = await _service(FakeSheet([HEADER])).fetch_all()
        assert result.success
        assert result.data == []

    @pytest.mark.asyncio
    async def test_empty_sheet_is_empty_success(self) -> None:
        result = await _service(FakeSheet()).fetch_all()
        assert result.success
        assert result.data == []

    @pytest.mark.asyncio
    async def test_sends_api_key(self) -> None:
        sheet = FakeSheet([HEADER])
        await _service(sheet).fetch_all()
        assert sheet.requests[0].url.params["key"] == API_KEY

    @pytest.mark.asyncio
    async def test_http_error_becomes_failure(self) -> None:
        sheet = FakeSheet([HEADER, ACME])
        sheet.fail_status = 403
        result = await _service(sheet).fetch_all()
        assert not result.success
        assert result.kind is FailureKind.TRANSPORT
        assert "403" in result.error

    @pytest.mark.asyncio
    async def test_malformed_json_becomes_failure(self) -> None:
        service = _service(FakeSheet())
        service._client.request = AsyncMock(
            return_value=httpx.Response(
                200, content=b"<html>", request=httpx.Request("GET", BASE)
            )
        )
        result = await service.fetch_all()
        assert not result.success
        assert "Malformed" in result.error

    @pytest.mark.asyncio
    async def test_values_not_a_list_becomes_failure(self) -> None:
        service = _service(FakeSheet())
        service._client.request = AsyncMock(
            return_value=httpx.Response(
                200, json={"values": "oops"}, request=httpx.Request("GET", BASE)
            )
        )
        result = await service.fetch_all()
        assert not result.success

    @pytest.mark.asyncio
    async def test_connect_error_becomes_failure(self) -> None:
        service = _service(FakeSheet())
        service._client.request = AsyncMock(side_effect=httpx.ConnectError("dns"))
        result = await service.fetch_all()
        assert not result.success
        assert "dns" in result.error


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------


class TestAdd:
    @pytest.mark.asyncio
    async def test_appends_in_canonical_order(self) -> None:
        sheet = FakeSheet([HEADER, ACME])
        record = _record()
        result = await _service(sheet).add(record)
        assert result.success
        assert result.data == record
        assert sheet.values()[-1] == ["Acme2", "Retailer", "Electronics", "3", "2025-01-01"]

    @pytest.mark.asyncio
    async def test_append_ignores_reordered_header(self) -> None:
        header = list(reversed(SHEET_COLUMNS))
        sheet = FakeSheet([header])
        await _service(sheet).add(_record())
        body = json.loads(sheet.requests[-1].content)
        assert body["values"] == [["Acme2", "Retailer", "Electronics", 3, "2025-01-01", ""]]

    @pytest.mark.asyncio
    async def test_add_then_fetch_includes_record(self) -> None:
        sheet = FakeSheet([HEADER, ACME])
        service = _service(sheet)
        await service.add(_record())
        result = await service.fetch_all()
        assert result.data[-1] == _record()

    @pytest.mark.asyncio
    async def test_failure_envelope(self) -> None:
        sheet = FakeSheet([HEADER])
        sheet.fail_status = 500
        result = await _service(sheet).add(_record())
        assert not result.success
        assert result.error.startswith("Failed to add vendor")


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


class TestUpdate:
    @pytest.mark.asyncio
    async def test_writes_located_row(self) -> None:
        sheet = FakeSheet([HEADER, ACME, FRESH, STYLE])
        renamed = _record("Fresh Corp")
        result = await _service(sheet).update("FreshMart Wholesale", renamed)
        assert result.success
        put = sheet.requests[-1]
        assert put.method == "PUT"
        assert put.url.path.endswith("/values/'Vendors'!A3:F3")
        assert sheet.values()[2][0] == "Fresh Corp"
        assert sheet.values()[1] == ACME
        assert sheet.values()[3] == STYLE

    @pytest.mark.asyncio
    async def test_rename_replaces_key(self) -> None:
        sheet = FakeSheet([HEADER, ACME, FRESH])
        service = _service(sheet)
        renamed = _record("Acme Corp", years_in_business=20)
        await service.update("Acme Electronics", renamed)
        names = [v.company_name for v in (await service.fetch_all()).data]
        assert "Acme Electronics" not in names
        assert "Acme Corp" in names

    @pytest.mark.asyncio
    async def test_row_number_skips_blank_rows(self) -> None:
        sheet = FakeSheet([HEADER, ACME, [], FRESH])
        await _service(sheet).update("FreshMart Wholesale", _record("Fresh Corp"))
        assert sheet.requests[-1].url.path.endswith("/values/'Vendors'!A4:F4")

    @pytest.mark.asyncio
    async def test_not_found_writes_nothing(self) -> None:
        sheet = FakeSheet([HEADER, ACME])
        before = sheet.values()
        result = await _service(sheet).update("X", _record())
        assert not result.success
        assert result.kind is FailureKind.NOT_FOUND
        assert result.error == 'Vendor "X" not found'
        assert [r.method for r in sheet.requests] == ["GET"]
        assert sheet.values() == before

    @pytest.mark.asyncio
    async def test_write_failure_envelope(self) -> None:
        sheet = FakeSheet([HEADER, ACME])
        sheet.fail_status = 429
        sheet.fail_methods = {"PUT"}
        result = await _service(sheet).update("Acme Electronics", _record())
        assert not result.success
        assert result.kind is FailureKind.TRANSPORT
        assert "429" in result.error


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


class TestDelete:
    @pytest.mark.asyncio
    async def test_rewrites_whole_table(self) -> None:
        sheet = FakeSheet([HEADER, ACME, FRESH, STYLE])
        result = await _service(sheet).delete("FreshMart Wholesale")
        assert result.success
        put = sheet.requests[-1]
        assert put.method == "PUT"
        assert put.url.path.endswith("/values/'Vendors'")
        assert sheet.values() == [HEADER, ACME, STYLE]

    @pytest.mark.asyncio
    async def test_pads_blank_row_over_stale_tail(self) -> None:
        sheet = FakeSheet([HEADER, ACME, FRESH])
        await _service(sheet).delete("Acme Electronics")
        body = json.loads(sheet.requests[-1].content)
        assert body["values"][0] == HEADER
        assert body["values"][-1] == [""] * 6
        assert len(body["values"]) == 3
        assert sheet.values() == [HEADER, FRESH]

    @pytest.mark.asyncio
    async def test_delete_last_record_leaves_header(self) -> None:
        sheet = FakeSheet([HEADER, ACME])
        service = _service(sheet)
        await service.delete("Acme Electronics")
        result = await service.fetch_all()
        assert result.success
        assert result.data == []

    @pytest.mark.asyncio
    async def test_survivors_unchanged(self) -> None:
        sheet = FakeSheet([HEADER, ACME, FRESH, STYLE])
        service = _service(sheet)
        before = (await service.fetch_all()).data
        await service.delete("Acme Electronics")
        after = (await service.fetch_all()).data
        assert after == [v for v in before if v.company_name != "Acme Electronics"]

    @pytest.mark.asyncio
    async def test_removes_only_first_duplicate(self) -> None:
        sheet = FakeSheet([HEADER, ACME, FRESH, ACME])
        service = _service(sheet)
        await service.delete("Acme Electronics")
        names = [v.company_name for v in (await service.fetch_all()).data]
        assert names == ["FreshMart Wholesale", "Acme Electronics"]

    @pytest.mark.asyncio
    async def test_not_found_writes_nothing(self) -> None:
        sheet = FakeSheet([HEADER, ACME])
        result = await _service(sheet).delete("Nobody")
        assert not result.success
        assert result.not_found
        assert [r.method for r in sheet.requests] == ["GET"]
        assert sheet.values() == [HEADER, ACME]

    @pytest.mark.asyncio
    async def test_fetch_failure_envelope(self) -> None:
        sheet = FakeSheet([HEADER, ACME])
        sheet.fail_status = 503
        result = await _service(sheet).delete("Acme Electronics")
        assert not result.success
        assert result.error.startswith("Failed to delete vendor")


# ---------------------------------------------------------------------------
# _request error mapping
# ---------------------------------------------------------------------------


class TestRequestErrorMapping:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "exc_cls"),
        [
            (401, SheetsAuthError),
            (403, SheetsAuthError),
            (404, SheetsNotFoundError),
            (429, SheetsRateLimitError),
            (500, SheetsServerError),
            (502, SheetsServerError),
            (400, SheetsError),
        ],
    )
    async def test_status_mapping(self, status: int, exc_cls: type) -> None:
        sheet = FakeSheet()
        sheet.fail_status = status
        service = _service(sheet)
        with pytest.raises(exc_cls) as info:
            await service._request("GET", "/anything")
        assert info.value.status_code == status

    @pytest.mark.asyncio
    async def test_connect_error(self) -> None:
        service = _service(FakeSheet())
        service._client.request = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(SheetsConnectionError):
            await service._request("GET", "/x")

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        service = _service(FakeSheet())
        service._client.request = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(SheetsTimeoutError):
            await service._request("GET", "/x")


# ---------------------------------------------------------------------------
# Init / lifecycle
# ---------------------------------------------------------------------------


class TestInit:
    def test_blank_worksheet_defaults(self) -> None:
        service = GoogleSheetsService(API_KEY, SHEET_ID, worksheet_name="")
        assert service.worksheet_name == "Vendors"

    def test_key_is_client_param(self) -> None:
        service = GoogleSheetsService(API_KEY, SHEET_ID)
        assert service._client.params["key"] == API_KEY

    @pytest.mark.asyncio
    async def test_quoted_worksheet_in_path(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"values": []})

        service = GoogleSheetsService(
            API_KEY, SHEET_ID, "Vendor List",
            base_url=BASE, transport=httpx.MockTransport(handler),
        )
        await service.fetch_all()
        assert seen[0].url.path.endswith("/values/'Vendor List'")

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self) -> None:
        async with _service(FakeSheet()) as service:
            pass
        assert service._client.is_closed
