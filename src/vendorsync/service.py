"""Abstract data service interface for vendor records.

Defines the VendorDataService Protocol that VendorStore depends on.
Concrete implementations live in ``vendorsync.services``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vendorsync.result import OperationResult
from vendorsync.vendor import VendorRecord


@runtime_checkable
class VendorDataService(Protocol):
    """Async CRUD backend for vendor records.

    Every method returns an OperationResult; implementations convert their
    own failures into failure envelopes instead of raising. Records are
    addressed by exact company name.
    """

    async def fetch_all(self) -> OperationResult[list[VendorRecord]]: ...

    async def add(self, vendor: VendorRecord) -> OperationResult[VendorRecord]: ...

    async def update(
        self, original_name: str, vendor: VendorRecord
    ) -> OperationResult[VendorRecord]: ...

    async def delete(self, company_name: str) -> OperationResult[None]: ...

    async def close(self) -> None: ...
