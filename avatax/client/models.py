"""Pydantic models for the AvaTax wire format.

Only the payloads used by the transaction builder and the shipped typed
operations are modelled. Every model accepts and preserves unknown fields,
so responses from newer API versions decode without loss.

Fields are snake_case in Python and camelCase on the wire. Serialize with
``model_dump(mode="json", by_alias=True, exclude_none=True)``.
"""

import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class DocumentType(Enum):
    """Type of a transaction document."""

    SALES_ORDER = "SalesOrder"
    SALES_INVOICE = "SalesInvoice"
    PURCHASE_ORDER = "PurchaseOrder"
    PURCHASE_INVOICE = "PurchaseInvoice"
    RETURN_ORDER = "ReturnOrder"
    RETURN_INVOICE = "ReturnInvoice"
    INVENTORY_TRANSFER_ORDER = "InventoryTransferOrder"
    INVENTORY_TRANSFER_INVOICE = "InventoryTransferInvoice"
    REVERSE_CHARGE_ORDER = "ReverseChargeOrder"
    REVERSE_CHARGE_INVOICE = "ReverseChargeInvoice"
    ANY = "Any"


class TransactionAddressType(Enum):
    """Role an address plays in a transaction."""

    SHIP_FROM = "ShipFrom"
    SHIP_TO = "ShipTo"
    POINT_OF_ORDER_ACCEPTANCE = "PointOfOrderAcceptance"
    POINT_OF_ORDER_ORIGIN = "PointOfOrderOrigin"
    SINGLE_LOCATION = "SingleLocation"


class TaxOverrideType(Enum):
    """Kind of tax override applied to a document or line."""

    NONE = "None"
    TAX_AMOUNT = "TaxAmount"
    EXEMPTION = "Exemption"
    TAX_DATE = "TaxDate"
    ACCRUED_TAX_AMOUNT = "AccruedTaxAmount"
    DERIVE_TAXABLE = "DeriveTaxable"


class AdjustmentReason(Enum):
    """Reason recorded when a committed transaction is adjusted."""

    NOT_ADJUSTED = "NotAdjusted"
    SOURCING_ISSUE = "SourcingIssue"
    RECONCILED_WITH_GENERAL_LEDGER = "ReconciledWithGeneralLedger"
    EXEMPT_CERT_APPLIED = "ExemptCertApplied"
    PRICE_ADJUSTED = "PriceAdjusted"
    PRODUCT_RETURNED = "ProductReturned"
    PRODUCT_EXCHANGED = "ProductExchanged"
    BAD_DEBT = "BadDebt"
    OTHER = "Other"
    OFFLINE = "Offline"


class TaxDebugLevel(Enum):
    """Amount of diagnostic output requested from the tax engine."""

    NORMAL = "Normal"
    DIAGNOSTIC = "Diagnostic"


class VoidReasonCode(Enum):
    """Reason for voiding a transaction."""

    UNSPECIFIED = "Unspecified"
    POST_FAILED = "PostFailed"
    DOC_DELETED = "DocDeleted"
    DOC_VOIDED = "DocVoided"
    ADJUSTMENT_CANCELLED = "AdjustmentCancelled"


class AvaTaxModel(BaseModel):
    """Base model: camelCase aliases, unknown fields kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="allow",
    )


class AddressLocationInfo(AvaTaxModel):
    """A street address or a latitude/longitude pair."""

    line1: str | None = None
    line2: str | None = None
    line3: str | None = None
    city: str | None = None
    region: str | None = None
    postal_code: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class TaxOverrideModel(AvaTaxModel):
    """Override of the calculated tax amount, date or exemption."""

    type: TaxOverrideType = TaxOverrideType.NONE
    reason: str | None = None
    tax_amount: float | None = None
    tax_date: dt.date | None = None


class LineItemModel(AvaTaxModel):
    """One line of a transaction being created."""

    number: int = Field(ge=1, frozen=True, description="1-based append position")
    amount: float
    quantity: float = 1
    tax_code: str | None = None
    item_code: str | None = None
    exemption_code: str | None = None
    discounted: bool | None = None
    addresses: dict[str, AddressLocationInfo] | None = None
    parameters: dict[str, str] | None = None
    tax_override: TaxOverrideModel | None = None


class CreateTransactionModel(AvaTaxModel):
    """Payload of the create transaction endpoint."""

    type: DocumentType = DocumentType.SALES_ORDER
    code: str | None = None
    company_code: str | None = None
    customer_code: str
    date: dt.date
    discount: float | None = None
    commit: bool | None = None
    debug_level: TaxDebugLevel | None = None
    parameters: dict[str, str] | None = None
    addresses: dict[str, AddressLocationInfo] | None = None
    tax_override: TaxOverrideModel | None = None
    lines: list[LineItemModel] = Field(default_factory=list)


class AdjustTransactionModel(AvaTaxModel):
    """Envelope replacing a transaction with a new version."""

    adjustment_reason: AdjustmentReason
    adjustment_description: str | None = None
    new_transaction: CreateTransactionModel


class CommitTransactionModel(AvaTaxModel):
    """Payload of the commit endpoint."""

    commit: bool = True


class VoidTransactionModel(AvaTaxModel):
    """Payload of the void endpoint."""

    code: VoidReasonCode = VoidReasonCode.DOC_VOIDED


class TransactionLineModel(AvaTaxModel):
    """A line of a transaction as returned by the API."""

    id: int | None = None
    line_number: str | None = None
    line_amount: float | None = None
    quantity: float | None = None
    tax_code: str | None = None
    item_code: str | None = None
    exemption_code: str | None = None
    tax: float | None = None


class TransactionModel(AvaTaxModel):
    """A transaction as returned by the API."""

    id: int | None = None
    code: str | None = None
    company_id: int | None = None
    date: dt.date | None = None
    status: str | None = None
    type: str | None = None
    customer_code: str | None = None
    total_amount: float | None = None
    total_tax: float | None = None
    lines: list[TransactionLineModel] = Field(default_factory=list)

    @field_validator("lines", mode="before")
    @classmethod
    def null_lines_to_empty(cls, v: object) -> object:
        """The API sends null instead of an empty list when lines are not included."""
        _ = cls
        return [] if v is None else v


class PingResultModel(AvaTaxModel):
    """Result of the ping endpoint."""

    version: str | None = None
    authenticated: bool = False
    authentication_type: str | None = None
    authenticated_user_name: str | None = None
    authenticated_user_id: int | None = None
    authenticated_account_id: int | None = None


class CompanyInitializationModel(AvaTaxModel):
    """Payload for creating a company with nexus in one call."""

    name: str
    company_code: str | None = None
    taxpayer_id_number: str | None = None
    line1: str
    city: str
    region: str
    postal_code: str
    country: str
    first_name: str
    last_name: str
    title: str | None = None
    email: str
    phone_number: str
    mobile_number: str | None = None
    fax_number: str | None = None


class CompanyModel(AvaTaxModel):
    """A company as returned by the API."""

    id: int | None = None
    account_id: int | None = None
    company_code: str | None = None
    name: str | None = None
    is_active: bool | None = None
    nexus: list[dict[str, object]] = Field(default_factory=list)
    locations: list[dict[str, object]] = Field(default_factory=list)

    @field_validator("nexus", "locations", mode="before")
    @classmethod
    def null_to_empty(cls, v: object) -> object:
        """Convert null collections to empty lists."""
        _ = cls
        return [] if v is None else v
