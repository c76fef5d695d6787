"""Unit tests for avatax/builder/transaction.py module."""

import datetime as dt
from collections.abc import Callable

import httpx
import orjson
import pytest
import pytest_check

from avatax.builder import TransactionBuilder
from avatax.client import AvaTaxClient
from avatax.client.models import (
    AdjustmentReason,
    DocumentType,
    TaxDebugLevel,
    TaxOverrideType,
    TransactionAddressType,
    TransactionModel,
)
from avatax.core.exceptions import BuilderMisuseError

type ClientFactory = Callable[..., AvaTaxClient]


def echo_handler(request: httpx.Request) -> httpx.Response:
    """Answer with a transaction echoing the submitted code and lines."""
    body = orjson.loads(request.content)
    return httpx.Response(
        201,
        json={
            "id": 1,
            "code": body.get("code"),
            "type": body["type"],
            "customerCode": body["customerCode"],
            "date": body["date"],
            "lines": [
                {
                    "lineNumber": line["number"],
                    "lineAmount": line["amount"],
                    "quantity": line["quantity"],
                    "exemptionCode": line.get("exemptionCode"),
                }
                for line in body["lines"]
            ],
        },
    )


@pytest.fixture
def builder(make_client: ClientFactory) -> TransactionBuilder:
    """Provide a builder bound to a client that echoes transactions."""
    return TransactionBuilder(
        make_client(echo_handler),
        "DEFAULT",
        DocumentType.SALES_INVOICE,
        "ABC",
        dt.date(2024, 3, 1),
    )


@pytest.mark.unit
class TestDocumentFields:
    """Tests for document-level builder operations."""

    def test_initial_draft(self, builder: TransactionBuilder) -> None:
        """Verify the constructor arguments populate the draft."""
        draft = builder.draft

        assert draft.company_code == "DEFAULT"
        assert draft.type is DocumentType.SALES_INVOICE
        assert draft.customer_code == "ABC"
        assert draft.date == dt.date(2024, 3, 1)
        assert draft.lines == []

    def test_date_defaults_to_today(self, make_client: ClientFactory) -> None:
        """Verify the document date defaults to the current UTC date."""
        builder = TransactionBuilder(
            make_client(echo_handler), "DEFAULT", DocumentType.SALES_ORDER, "ABC"
        )

        assert builder.draft.date == dt.datetime.now(dt.UTC).date()

    def test_chained_document_fields(self, builder: TransactionBuilder) -> None:
        """Verify document operations chain and set their fields."""
        result = (
            builder.with_commit()
            .with_diagnostics()
            .with_discount_amount(10.0)
            .with_transaction_code("INV-1")
            .with_type(DocumentType.SALES_ORDER)
            .with_parameter("Transport", "Ground")
        )
        draft = builder.draft

        assert result is builder
        with pytest_check.check:
            assert draft.commit is True
        with pytest_check.check:
            assert draft.debug_level is TaxDebugLevel.DIAGNOSTIC
        with pytest_check.check:
            assert draft.discount == 10.0
        with pytest_check.check:
            assert draft.code == "INV-1"
        with pytest_check.check:
            assert draft.type is DocumentType.SALES_ORDER
        with pytest_check.check:
            assert draft.parameters == {"Transport": "Ground"}

    def test_address_replaced_per_role(self, builder: TransactionBuilder) -> None:
        """Verify setting an address twice for a role keeps the last one."""
        builder.with_address(
            TransactionAddressType.SHIP_FROM,
            "123 Main Street", None, None, "Irvine", "CA", "92615", "US",
        )
        builder.with_address(
            TransactionAddressType.SHIP_FROM,
            "100 Ravine Lane", None, None, "Bainbridge Island", "WA", "98110", "US",
        )
        builder.with_lat_long(TransactionAddressType.SHIP_TO, 47.627935, -122.51702)

        addresses = builder.draft.addresses
        assert addresses is not None
        assert set(addresses) == {"ShipFrom", "ShipTo"}
        assert addresses["ShipFrom"].line1 == "100 Ravine Lane"
        assert addresses["ShipTo"].latitude == 47.627935

    def test_document_tax_override(self, builder: TransactionBuilder) -> None:
        """Verify a document tax override is recorded."""
        builder.with_tax_override(TaxOverrideType.TAX_AMOUNT, "Precalculated", 5.0)

        override = builder.draft.tax_override
        assert override is not None
        assert override.type is TaxOverrideType.TAX_AMOUNT
        assert override.tax_amount == 5.0


@pytest.mark.unit
class TestLineOperations:
    """Tests for line-level builder operations."""

    def test_lines_numbered_in_order(self, builder: TransactionBuilder) -> None:
        """Verify taxable and exempt lines get consecutive numbers."""
        builder.with_line(100.0, 1, "P0000000").with_exempt_line(50.0, "NT")

        lines = builder.draft.lines
        assert [line.number for line in lines] == [1, 2]
        assert lines[0].tax_code == "P0000000"
        assert lines[1].exemption_code == "NT"
        assert lines[1].quantity == 1

    @pytest.mark.parametrize(
        ("operation", "call"),
        [
            (
                "with_line_address",
                lambda b: b.with_line_address(
                    TransactionAddressType.SHIP_TO,
                    "1 Main", None, None, "Seattle", "WA", "98101", "US",
                ),
            ),
            ("with_line_parameter", lambda b: b.with_line_parameter("k", "v")),
            ("with_item_discount", lambda b: b.with_item_discount()),
            (
                "with_line_tax_override",
                lambda b: b.with_line_tax_override(TaxOverrideType.EXEMPTION, "r"),
            ),
            ("current_line", lambda b: b.current_line),
        ],
    )
    def test_line_operations_require_a_line(
        self,
        builder: TransactionBuilder,
        operation: str,
        call: Callable[[TransactionBuilder], object],
    ) -> None:
        """Verify line operations before any line are misuse errors."""
        before = builder.draft

        with pytest.raises(BuilderMisuseError) as exc_info:
            call(builder)

        assert exc_info.value.operation == operation
        assert builder.draft == before
        assert "No lines have been added" in exc_info.value.message

    def test_line_operations_apply_to_last_line(
        self, builder: TransactionBuilder
    ) -> None:
        """Verify line operations only modify the most recent line."""
        (
            builder.with_line(100.0, 1, "P0000000")
            .with_line(20.0, 2, "PC030000", item_code="SKU-2")
            .with_line_address(
                TransactionAddressType.SHIP_TO,
                "1 Main", None, None, "Seattle", "WA", "98101", "US",
            )
            .with_line_parameter("AlcoholRouteType", "DTC")
            .with_item_discount()
            .with_line_tax_override(
                TaxOverrideType.TAX_DATE, "Return", tax_date=dt.date(2024, 1, 1)
            )
        )

        first, second = builder.draft.lines
        assert first.addresses is None
        assert first.parameters is None
        assert first.discounted is None
        assert second.item_code == "SKU-2"
        assert second.addresses is not None
        assert second.addresses["ShipTo"].city == "Seattle"
        assert second.parameters == {"AlcoholRouteType": "DTC"}
        assert second.discounted is True
        assert second.tax_override is not None
        assert second.tax_override.tax_date == dt.date(2024, 1, 1)

    def test_current_line_is_a_copy(self, builder: TransactionBuilder) -> None:
        """Verify the current line cannot be mutated from outside."""
        builder.with_line(100.0, 1, "P0000000")

        builder.current_line.amount = 1.0

        assert builder.current_line.amount == 100.0

    def test_draft_is_a_copy(self, builder: TransactionBuilder) -> None:
        """Verify edits to a draft do not leak back into the builder."""
        builder.with_line(100.0, 1, "P0000000")

        draft = builder.draft
        draft.lines.clear()
        draft.customer_code = "OTHER"

        assert len(builder.draft.lines) == 1
        assert builder.draft.customer_code == "ABC"


@pytest.mark.unit
class TestOutput:
    """Tests for create and create_adjustment_request."""

    def test_create_submits_draft(self, builder: TransactionBuilder) -> None:
        """Verify create posts the accumulated transaction."""
        result = (
            builder.with_transaction_code("INV-1")
            .with_line(100.0, 1, "P0000000")
            .with_exempt_line(50.0, "NT")
            .create()
        )

        assert isinstance(result, TransactionModel)
        assert result.code == "INV-1"
        assert [line.line_number for line in result.lines] == ["1", "2"]
        assert result.lines[1].exemption_code == "NT"

    def test_create_adjustment_request(self, builder: TransactionBuilder) -> None:
        """Verify the adjustment envelope wraps the current draft."""
        builder.with_line(100.0, 1, "P0000000")

        request = builder.create_adjustment_request(
            "Price fix", AdjustmentReason.PRICE_ADJUSTED
        )

        assert request.adjustment_reason is AdjustmentReason.PRICE_ADJUSTED
        assert request.adjustment_description == "Price fix"
        assert request.new_transaction.customer_code == "ABC"
        assert len(request.new_transaction.lines) == 1
