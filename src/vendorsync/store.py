"""In-memory vendor list with mutate-then-refetch sync to a backend.

VendorStore owns the authoritative cached list and the state a UI renders
from it: busy/first-load flags, a sticky fetch error, and a transient
alert. Every successful mutation is followed by a full re-fetch, so the
cached list only ever holds what the backend confirmed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable

from vendorsync.factory import create_vendor_service
from vendorsync.result import FailureKind, OperationResult
from vendorsync.vendor import VendorRecord, is_duplicate_vendor

if TYPE_CHECKING:
    from vendorsync.config import SyncConfig
    from vendorsync.service import VendorDataService

logger = logging.getLogger(__name__)

ADD_SUCCESS_MESSAGE = "Vendor details successfully submitted!"
UPDATE_SUCCESS_MESSAGE = "Vendor details successfully updated!"
DELETE_SUCCESS_MESSAGE = "Vendor successfully deleted!"
BUSY_MESSAGE = "Another operation is already in progress. Please wait."


class AlertKind(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Alert:
    """Feedback about the outcome of the last mutation.

    ``failure`` says why an error alert was raised; it is None otherwise.
    """

    kind: AlertKind
    message: str
    failure: FailureKind | None = None

    @property
    def is_failure(self) -> bool:
        return self.kind is AlertKind.ERROR


class VendorStore:
    """Cached vendor list driven by a ``VendorDataService``.

    - ``refresh()`` re-fetches everything; on failure the previous list is
      kept and ``fetch_error`` is set until the next successful refresh.
    - ``add``/``update``/``delete`` return True on success, after the
      follow-up refresh has finished.
    - Only one mutation may run at a time. A mutation started while
      ``busy`` is rejected without touching the backend. ``refresh()`` is
      never rejected or cancelled.
    """

    def __init__(self, service: VendorDataService) -> None:
        self._service = service
        self._records: list[VendorRecord] = []
        self._in_flight = 0
        self._first_load_in_progress = True
        self._fetch_error: str | None = None
        self._alert: Alert | None = None
        self._started = False

    # -- observable state -----------------------------------------------------

    @property
    def service(self) -> VendorDataService:
        return self._service

    @property
    def records(self) -> tuple[VendorRecord, ...]:
        """Snapshot of the last successfully fetched list."""
        return tuple(self._records)

    @property
    def busy(self) -> bool:
        return self._in_flight > 0

    @property
    def first_load_in_progress(self) -> bool:
        return self._first_load_in_progress

    @property
    def fetch_error(self) -> str | None:
        return self._fetch_error

    @property
    def alert(self) -> Alert | None:
        return self._alert

    def dismiss_alert(self) -> None:
        self._alert = None

    def set_alert(self, alert: Alert | None) -> None:
        """Show a caller-supplied alert, e.g. a form validation warning."""
        self._alert = alert

    # -- lifecycle ------------------------------------------------------------

    async def start(self) -> None:
        """Run the initial refresh once."""
        if self._started:
            return
        self._started = True
        await self.refresh()

    async def close(self) -> None:
        await self._service.close()

    async def __aenter__(self) -> VendorStore:
        await self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    # -- operations -----------------------------------------------------------

    async def refresh(self) -> None:
        """Replace the cached list with a fresh ``fetch_all``."""
        self._in_flight += 1
        self._fetch_error = None
        try:
            result = await self._service.fetch_all()
            if result.success and result.data is not None:
                self._records = list(result.data)
            else:
                self._fetch_error = result.error or "Failed to fetch vendor data"
                logger.warning("Vendor refresh failed: %s", self._fetch_error)
        finally:
            self._in_flight -= 1
            self._first_load_in_progress = False

    async def add(self, vendor: VendorRecord) -> bool:
        """Submit a new vendor; rejects blank or duplicate company names."""
        if not vendor.company_name.strip():
            return self._reject("Company Name is required.", FailureKind.INVALID)
        if is_duplicate_vendor(vendor.company_name, self._records):
            return self._reject(
                f'A vendor named "{vendor.company_name.strip()}" already exists.',
                FailureKind.INVALID,
            )
        return await self._mutate(
            lambda: self._service.add(vendor),
            ADD_SUCCESS_MESSAGE,
            "Failed to add vendor",
        )

    async def update(self, original_name: str, vendor: VendorRecord) -> bool:
        """Replace the vendor keyed ``original_name``, possibly renaming it."""
        if not original_name or not vendor.company_name.strip():
            return self._reject("Company Name is required.", FailureKind.INVALID)
        if is_duplicate_vendor(vendor.company_name, self._records, exclude=original_name):
            return self._reject(
                f'A vendor named "{vendor.company_name.strip()}" already exists.',
                FailureKind.INVALID,
            )
        return await self._mutate(
            lambda: self._service.update(original_name, vendor),
            UPDATE_SUCCESS_MESSAGE,
            "Failed to update vendor",
        )

    async def delete(self, company_name: str) -> bool:
        if not company_name:
            return self._reject("Company Name is required.", FailureKind.INVALID)
        return await self._mutate(
            lambda: self._service.delete(company_name),
            DELETE_SUCCESS_MESSAGE,
            "Failed to delete vendor",
        )

    # -- internals ------------------------------------------------------------

    def _reject(self, message: str, failure: FailureKind) -> bool:
        logger.info("Rejected vendor mutation (%s): %s", failure.value, message)
        self._alert = Alert(AlertKind.ERROR, message, failure)
        return False

    async def _mutate(
        self,
        call: Callable[[], Awaitable[OperationResult]],
        success_message: str,
        failure_message: str,
    ) -> bool:
        if self.busy:
            return self._reject(BUSY_MESSAGE, FailureKind.BUSY)

        self._in_flight += 1
        self._alert = None
        try:
            result = await call()
            if not result.success:
                self._alert = Alert(
                    AlertKind.ERROR, result.error or failure_message, result.kind
                )
                logger.warning("%s: %s", failure_message, self._alert.message)
                return False

            self._alert = Alert(AlertKind.SUCCESS, success_message)
            logger.info(success_message)
            await self.refresh()
            return True
        finally:
            self._in_flight -= 1


async def open_vendor_store(config: SyncConfig) -> VendorStore:
    """Select a backend for ``config`` and return a started store."""
    store = VendorStore(create_vendor_service(config))
    await store.start()
    return store
