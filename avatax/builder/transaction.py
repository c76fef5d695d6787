"""Fluent builder for AvaTax transactions.

The builder accumulates document-level fields and an ordered list of lines
into a ``CreateTransactionModel``. Every ``with_*`` method returns the
builder so calls can be chained::

    transaction = (
        TransactionBuilder(client, "DEFAULT", DocumentType.SALES_INVOICE, "ABC")
        .with_address(TransactionAddressType.SHIP_FROM, "123 Main Street", ...)
        .with_line(100.0, 1, "P0000000")
        .with_exempt_line(50.0, "NT")
        .create()
    )

Line operations (``with_line_address``, ``with_line_parameter``,
``with_item_discount``, ``with_line_tax_override``) apply to the most
recently added line and raise ``BuilderMisuseError`` when called before any
line exists. Document-level operations overwrite previous values.

A builder is meant for one owner chaining calls sequentially.
"""

import datetime as dt
from typing import Self

from avatax.builder.lines import LineCollection
from avatax.client.client import AvaTaxClient, OperationResult
from avatax.client.models import (
    AddressLocationInfo,
    AdjustmentReason,
    AdjustTransactionModel,
    CreateTransactionModel,
    DocumentType,
    LineItemModel,
    TaxDebugLevel,
    TaxOverrideModel,
    TaxOverrideType,
    TransactionAddressType,
    TransactionModel,
)
from avatax.core.logging import get_logger

logger = get_logger(__name__)

type AddressType = TransactionAddressType | str


def _address_key(address_type: AddressType) -> str:
    if isinstance(address_type, TransactionAddressType):
        return address_type.value
    return address_type


class TransactionBuilder:
    """Incrementally builds and submits a transaction.

    Args:
        client: The client used by ``create``.
        company_code: Code of the company recording the transaction.
        doc_type: Type of the transaction document.
        customer_code: Code of the customer.
        date: Document date; defaults to today (UTC).
    """

    def __init__(
        self,
        client: AvaTaxClient,
        company_code: str,
        doc_type: DocumentType,
        customer_code: str,
        date: dt.date | None = None,
    ) -> None:
        self._client = client
        self._lines = LineCollection()
        self._document = CreateTransactionModel(
            company_code=company_code,
            type=doc_type,
            customer_code=customer_code,
            date=date or dt.datetime.now(dt.UTC).date(),
        )

    # Document-level fields

    def with_commit(self) -> Self:
        """Commit the transaction when it is created."""
        self._document.commit = True
        return self

    def with_diagnostics(self) -> Self:
        """Request diagnostic output from the tax engine."""
        self._document.debug_level = TaxDebugLevel.DIAGNOSTIC
        return self

    def with_discount_amount(self, discount: float) -> Self:
        """Set the document-level discount distributed over discounted lines."""
        self._document.discount = discount
        return self

    def with_transaction_code(self, code: str) -> Self:
        """Set the transaction code."""
        self._document.code = code
        return self

    def with_type(self, doc_type: DocumentType) -> Self:
        """Set the document type."""
        self._document.type = doc_type
        return self

    def with_parameter(self, name: str, value: str) -> Self:
        """Set a document-level parameter."""
        parameters = self._document.parameters or {}
        parameters[name] = value
        self._document.parameters = parameters
        return self

    def with_address(
        self,
        address_type: AddressType,
        line1: str | None,
        line2: str | None,
        line3: str | None,
        city: str | None,
        region: str | None,
        postal_code: str | None,
        country: str | None,
    ) -> Self:
        """Set the document address for a role, replacing any previous one."""
        address = AddressLocationInfo(
            line1=line1,
            line2=line2,
            line3=line3,
            city=city,
            region=region,
            postal_code=postal_code,
            country=country,
        )
        return self._set_document_address(address_type, address)

    def with_lat_long(
        self, address_type: AddressType, latitude: float, longitude: float
    ) -> Self:
        """Set the document location for a role as coordinates."""
        address = AddressLocationInfo(latitude=latitude, longitude=longitude)
        return self._set_document_address(address_type, address)

    def with_tax_override(
        self,
        override_type: TaxOverrideType,
        reason: str,
        tax_amount: float | None = None,
        tax_date: dt.date | None = None,
    ) -> Self:
        """Override tax for the whole document."""
        self._document.tax_override = TaxOverrideModel(
            type=override_type,
            reason=reason,
            tax_amount=tax_amount,
            tax_date=tax_date,
        )
        return self

    # Lines

    def with_line(
        self,
        amount: float,
        quantity: float,
        tax_code: str | None,
        item_code: str | None = None,
    ) -> Self:
        """Append a taxable line."""
        self._lines.append(amount, quantity, tax_code=tax_code, item_code=item_code)
        return self

    def with_exempt_line(
        self, amount: float, exemption_code: str, item_code: str | None = None
    ) -> Self:
        """Append a line of quantity 1 exempted with an exemption code."""
        self._lines.append(
            amount, 1, item_code=item_code, exemption_code=exemption_code
        )
        return self

    def with_line_address(
        self,
        address_type: AddressType,
        line1: str | None,
        line2: str | None,
        line3: str | None,
        city: str | None,
        region: str | None,
        postal_code: str | None,
        country: str | None,
    ) -> Self:
        """Set an address for a role on the most recent line."""
        line = self._lines.most_recent("with_line_address")
        addresses = line.addresses or {}
        addresses[_address_key(address_type)] = AddressLocationInfo(
            line1=line1,
            line2=line2,
            line3=line3,
            city=city,
            region=region,
            postal_code=postal_code,
            country=country,
        )
        line.addresses = addresses
        return self

    def with_line_parameter(self, name: str, value: str) -> Self:
        """Set a parameter on the most recent line."""
        line = self._lines.most_recent("with_line_parameter")
        parameters = line.parameters or {}
        parameters[name] = value
        line.parameters = parameters
        return self

    def with_item_discount(self, discounted: bool = True) -> Self:  # noqa: FBT001, FBT002
        """Mark the most recent line as subject to the document discount."""
        line = self._lines.most_recent("with_item_discount")
        line.discounted = discounted
        return self

    def with_line_tax_override(
        self,
        override_type: TaxOverrideType,
        reason: str,
        tax_amount: float | None = None,
        tax_date: dt.date | None = None,
    ) -> Self:
        """Override tax for the most recent line."""
        line = self._lines.most_recent("with_line_tax_override")
        line.tax_override = TaxOverrideModel(
            type=override_type,
            reason=reason,
            tax_amount=tax_amount,
            tax_date=tax_date,
        )
        return self

    @property
    def current_line(self) -> LineItemModel:
        """A copy of the most recent line."""
        return self._lines.most_recent("current_line").model_copy(deep=True)

    @property
    def draft(self) -> CreateTransactionModel:
        """A deep copy of the accumulated transaction."""
        return self._document.model_copy(
            update={"lines": self._lines.snapshot()}, deep=True
        )

    # Output

    def create(self, include: str | None = None) -> OperationResult[TransactionModel]:
        """Submit the accumulated transaction.

        Calling this twice submits the same transaction twice unless the
        transaction code was changed in between.

        Args:
            include: Optional ``$include`` expansion for the response.

        Returns:
            OperationResult[TransactionModel]: The result of create_transaction.
        """
        draft = self.draft
        logger.debug(
            "Submitting transaction with {} lines",
            len(draft.lines),
            company_code=draft.company_code,
            transaction_code=draft.code,
        )
        return self._client.create_transaction(draft, include)

    def create_adjustment_request(
        self, description: str, reason: AdjustmentReason
    ) -> AdjustTransactionModel:
        """Wrap the accumulated transaction as the new version of an adjustment.

        Args:
            description: Why the transaction is being adjusted.
            reason: The adjustment reason code.

        Returns:
            AdjustTransactionModel: The envelope for ``adjust_transaction``.
        """
        return AdjustTransactionModel(
            adjustment_reason=reason,
            adjustment_description=description,
            new_transaction=self.draft,
        )

    def _set_document_address(
        self, address_type: AddressType, address: AddressLocationInfo
    ) -> Self:
        addresses = self._document.addresses or {}
        addresses[_address_key(address_type)] = address
        self._document.addresses = addresses
        return self
