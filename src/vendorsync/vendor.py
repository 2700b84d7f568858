"""Vendor record model and its storage/edit conversions.

Pure data model, no I/O. ``VendorRecord`` is the storage form written to
the sheet and to local storage (products as one delimited string);
``VendorFormData`` is the edit form (products as a list, business type may
be unset).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Iterable, Mapping

from vendorsync.constants import (
    PRODUCT_SEPARATOR,
    SHEET_COLUMNS,
    YEARS_IN_BUSINESS_DEFAULT,
    BusinessType,
    Product,
)


def parse_years(value: Any) -> int:
    """Parse a years-in-business cell, falling back to 0 on anything unparseable."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return 0


def _plain(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


# ---------------------------------------------------------------------------
# VendorRecord
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VendorRecord:
    """A single vendor row, keyed by company name."""

    company_name: str = ""
    business_type: str = ""
    products: str = ""
    years_in_business: int = 0
    onboarding_date: str = ""  # ISO YYYY-MM-DD
    additional_info: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "CompanyName": self.company_name,
            "BusinessType": self.business_type,
            "Products": self.products,
            "YearsInBusiness": self.years_in_business,
            "OnboardingDate": self.onboarding_date,
            "AdditionalInfo": self.additional_info,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> VendorRecord:
        """Build a record from wire keys; absent keys take the field default."""
        return cls(
            company_name=str(data.get("CompanyName") or ""),
            business_type=str(data.get("BusinessType") or ""),
            products=str(data.get("Products") or ""),
            years_in_business=parse_years(data.get("YearsInBusiness", 0)),
            onboarding_date=str(data.get("OnboardingDate") or ""),
            additional_info=str(data.get("AdditionalInfo") or ""),
        )

    def to_row(self) -> list[Any]:
        """Positional row in canonical column order."""
        values = self.to_dict()
        return [values[column] for column in SHEET_COLUMNS]

    @property
    def product_list(self) -> list[str]:
        return split_products(self.products)


# ---------------------------------------------------------------------------
# VendorFormData
# ---------------------------------------------------------------------------


@dataclass
class VendorFormData:
    """Editable representation of a vendor.

    ``products`` holds ``Product`` members or their string values;
    ``business_type`` is None until the user picks one.
    """

    company_name: str = ""
    business_type: BusinessType | str | None = None
    products: list[Product | str] = field(default_factory=list)
    years_in_business: int = YEARS_IN_BUSINESS_DEFAULT
    onboarding_date: str = ""
    additional_info: str = ""


def default_form_data(today: date | None = None) -> VendorFormData:
    """Fresh form for onboarding a new vendor, dated today unless given."""
    today = today or date.today()
    return VendorFormData(onboarding_date=today.isoformat())


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------


def split_products(products: str) -> list[str]:
    """Split a delimited product string, dropping empty segments."""
    if not products:
        return []
    return [segment for segment in products.split(PRODUCT_SEPARATOR) if segment]


def join_products(products: Iterable[Product | str]) -> str:
    return PRODUCT_SEPARATOR.join(_plain(p) for p in products)


def form_to_vendor(form: VendorFormData) -> VendorRecord:
    """Convert edit form to storage form, trimming name and notes."""
    business_type = "" if form.business_type is None else _plain(form.business_type)
    return VendorRecord(
        company_name=form.company_name.strip(),
        business_type=business_type,
        products=join_products(form.products),
        years_in_business=form.years_in_business,
        onboarding_date=form.onboarding_date,
        additional_info=form.additional_info.strip(),
    )


def vendor_to_form(vendor: VendorRecord) -> VendorFormData:
    """Convert storage form to edit form for an update screen."""
    return VendorFormData(
        company_name=vendor.company_name,
        business_type=vendor.business_type or None,
        products=list(split_products(vendor.products)),
        years_in_business=vendor.years_in_business,
        onboarding_date=vendor.onboarding_date,
        additional_info=vendor.additional_info or "",
    )


# ---------------------------------------------------------------------------
# Form-layer checks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: tuple[str, ...] = ()


def validate_mandatory_fields(form: VendorFormData) -> ValidationResult:
    """Check the fields a vendor cannot be submitted without."""
    errors: list[str] = []
    if not form.company_name.strip():
        errors.append("Company Name is required.")
    if not form.business_type:
        errors.append("Business Type is required.")
    if not form.onboarding_date:
        errors.append("Onboarding Date is required.")
    return ValidationResult(is_valid=not errors, errors=tuple(errors))


def normalize_name(company_name: str) -> str:
    return company_name.strip().lower()


def is_duplicate_vendor(
    company_name: str,
    vendors: Iterable[VendorRecord],
    exclude: str | None = None,
) -> bool:
    """True if another vendor already uses this name (case-insensitive, trimmed).

    ``exclude`` names a record to ignore, e.g. the one being renamed.
    """
    wanted = normalize_name(company_name)
    skipped = normalize_name(exclude) if exclude is not None else None
    for vendor in vendors:
        existing = normalize_name(vendor.company_name)
        if skipped is not None and existing == skipped:
            continue
        if existing == wanted:
            return True
    return False
