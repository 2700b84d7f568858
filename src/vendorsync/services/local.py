"""LocalStorageService — VendorDataService over a local key-value store.

Used when no spreadsheet credentials are configured. The whole vendor list
lives under one key as a JSON array of storage-form records. Every call
sleeps first to mimic network latency; pass zero delays in tests.
"""

from __future__ import annotations

import asyncio
import json
import logging

from vendorsync.result import FailureKind, OperationResult
from vendorsync.storage import KeyValueStore, MemoryKeyValueStore
from vendorsync.vendor import VendorRecord

logger = logging.getLogger(__name__)

STORAGE_KEY = "vendor-management-data"

SEED_VENDORS: tuple[VendorRecord, ...] = (
    VendorRecord(
        company_name="Acme Electronics",
        business_type="Manufacturer",
        products="Electronics, Software",
        years_in_business=15,
        onboarding_date="2024-01-15",
        additional_info="Primary electronics supplier",
    ),
    VendorRecord(
        company_name="Global Distributors Inc.",
        business_type="Distributor",
        products="Electronics, Apparel, Groceries",
        years_in_business=25,
        onboarding_date="2023-06-20",
        additional_info="International distribution network",
    ),
    VendorRecord(
        company_name="FreshMart Wholesale",
        business_type="Wholesaler",
        products="Groceries",
        years_in_business=8,
        onboarding_date="2024-03-10",
        additional_info="Organic and fresh produce specialist",
    ),
    VendorRecord(
        company_name="TechSoft Solutions",
        business_type="Service Provider",
        products="Software",
        years_in_business=5,
        onboarding_date="2024-07-01",
        additional_info="Cloud-based SaaS solutions",
    ),
    VendorRecord(
        company_name="StyleHub Retail",
        business_type="Retailer",
        products="Apparel, Other",
        years_in_business=12,
        onboarding_date="2023-11-30",
        additional_info="Premium fashion retail chain",
    ),
)


class LocalStorageService:
    """Vendor persistence in a ``KeyValueStore``.

    Implements the ``VendorDataService`` protocol. Seeds the store with
    ``SEED_VENDORS`` on first read, or when the stored value is not a JSON
    list of records.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        fetch_delay_secs: float = 0.3,
        mutation_delay_secs: float = 0.5,
    ) -> None:
        self._store = store if store is not None else MemoryKeyValueStore()
        self._fetch_delay = fetch_delay_secs
        self._mutation_delay = mutation_delay_secs

    # -- storage helpers -------------------------------------------------------

    def _load(self) -> list[VendorRecord]:
        """Read the vendor list, (re)seeding when missing or unreadable."""
        stored = self._store.get_item(STORAGE_KEY)
        if stored:
            try:
                data = json.loads(stored)
            except ValueError:
                data = None
            if isinstance(data, list):
                entries = [d for d in data if isinstance(d, dict)]
                if len(entries) != len(data):
                    logger.warning(
                        "Dropped %d malformed stored vendor entries.",
                        len(data) - len(entries),
                    )
                return [VendorRecord.from_dict(d) for d in entries]
            logger.warning("Stored vendor data is corrupt, reseeding sample vendors.")
        else:
            logger.info("No stored vendor data, seeding %d sample vendors.", len(SEED_VENDORS))

        seed = list(SEED_VENDORS)
        self._save(seed)
        return seed

    def _save(self, vendors: list[VendorRecord]) -> None:
        self._store.set_item(STORAGE_KEY, json.dumps([v.to_dict() for v in vendors]))

    async def _delay(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    # -- VendorDataService protocol -------------------------------------------

    async def fetch_all(self) -> OperationResult[list[VendorRecord]]:
        await self._delay(self._fetch_delay)
        try:
            return OperationResult.ok(self._load())
        except (OSError, ValueError) as exc:
            logger.warning("Failed to read local vendor store: %s", exc)
            return OperationResult.fail(str(exc) or "Failed to fetch vendors")

    async def add(self, vendor: VendorRecord) -> OperationResult[VendorRecord]:
        await self._delay(self._mutation_delay)
        try:
            vendors = self._load()
            vendors.append(vendor)
            self._save(vendors)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to add vendor %r locally: %s", vendor.company_name, exc)
            return OperationResult.fail(str(exc) or "Failed to add vendor")
        return OperationResult.ok(vendor)

    async def update(
        self, original_name: str, vendor: VendorRecord
    ) -> OperationResult[VendorRecord]:
        await self._delay(self._mutation_delay)
        try:
            vendors = self._load()
            index = next(
                (i for i, v in enumerate(vendors) if v.company_name == original_name),
                None,
            )
            if index is None:
                return OperationResult.fail(
                    f'Vendor "{original_name}" not found', FailureKind.NOT_FOUND
                )
            vendors[index] = vendor
            self._save(vendors)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to update vendor %r locally: %s", original_name, exc)
            return OperationResult.fail(str(exc) or "Failed to update vendor")
        return OperationResult.ok(vendor)

    async def delete(self, company_name: str) -> OperationResult[None]:
        await self._delay(self._mutation_delay)
        try:
            vendors = self._load()
            index = next(
                (i for i, v in enumerate(vendors) if v.company_name == company_name),
                None,
            )
            if index is None:
                return OperationResult.fail(
                    f'Vendor "{company_name}" not found', FailureKind.NOT_FOUND
                )
            del vendors[index]
            self._save(vendors)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to delete vendor %r locally: %s", company_name, exc)
            return OperationResult.fail(str(exc) or "Failed to delete vendor")
        return OperationResult.ok()

    async def close(self) -> None:
        """Nothing to release; present for protocol symmetry."""
