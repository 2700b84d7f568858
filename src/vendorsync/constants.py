"""Constants for vendor record management."""

from enum import Enum


class BusinessType(str, Enum):
    """Vendor classification shown in the business-type dropdown."""

    MANUFACTURER = "Manufacturer"
    DISTRIBUTOR = "Distributor"
    WHOLESALER = "Wholesaler"
    RETAILER = "Retailer"
    SERVICE_PROVIDER = "Service Provider"


class Product(str, Enum):
    """Product categories a vendor may offer."""

    ELECTRONICS = "Electronics"
    APPAREL = "Apparel"
    GROCERIES = "Groceries"
    SOFTWARE = "Software"
    OTHER = "Other"


YEARS_IN_BUSINESS_MIN = 0
YEARS_IN_BUSINESS_MAX = 50
YEARS_IN_BUSINESS_DEFAULT = 5

ADDITIONAL_INFO_MAX_LENGTH = 500
MAX_PRODUCTS = len(Product)

# Products are stored as one delimited string on the sheet and in local storage
PRODUCT_SEPARATOR = ", "

# Canonical column order for every positional write (append, update, rewrite)
SHEET_COLUMNS: tuple[str, ...] = (
    "CompanyName",
    "BusinessType",
    "Products",
    "YearsInBusiness",
    "OnboardingDate",
    "AdditionalInfo",
)

DEFAULT_WORKSHEET_NAME = "Vendors"
