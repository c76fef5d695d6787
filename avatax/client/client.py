"""Typed AvaTax API operations.

Each method describes one endpoint as an ``EndpointRequest``, hands it to
the dispatcher via ``rest_call`` and decodes JSON objects into the matching
pydantic model. Non-object results pass through unchanged: ``NO_CONTENT``,
raw CSV bytes, a ``CapturedFailure``, or the failure message in message
mode.
"""

import datetime as dt
from urllib.parse import quote

import orjson
from pydantic import BaseModel, ValidationError

from avatax.client.base import AvaTaxClientBase
from avatax.client.dispatcher import CapturedFailure, DispatchResult, EndpointRequest
from avatax.client.models import (
    AdjustTransactionModel,
    CommitTransactionModel,
    CompanyInitializationModel,
    CompanyModel,
    CreateTransactionModel,
    DocumentType,
    PingResultModel,
    TransactionModel,
    VoidReasonCode,
    VoidTransactionModel,
)
from avatax.core.config import ErrorMode
from avatax.core.exceptions import ErrorCode, UnexpectedResponseFormatError

type OperationResult[T] = T | DispatchResult | str


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def _document_type(document_type: DocumentType | None) -> str | None:
    return document_type.value if document_type else None


class AvaTaxClient(AvaTaxClientBase):
    """Client for the AvaTax v2 REST API.

    Example:
        >>> client = AvaTaxClient("myApp", "1.0", "localhost", "sandbox")
        >>> client.with_license_key(123456, "license-key").ping()
    """

    def ping(self) -> OperationResult[PingResultModel]:
        """Test connectivity and report the authentication state."""
        request = EndpointRequest(path="/api/v2/utilities/ping", verb="GET")
        return self._decode(self.rest_call(request), PingResultModel)

    def create_transaction(
        self, model: CreateTransactionModel, include: str | None = None
    ) -> OperationResult[TransactionModel]:
        """Create a new transaction.

        Args:
            model: The transaction to create.
            include: Optional ``$include`` expansion (e.g. ``"Lines"``).

        Returns:
            OperationResult[TransactionModel]: The calculated transaction.
        """
        request = EndpointRequest(
            path="/api/v2/transactions/create",
            verb="POST",
            query={"$include": include},
            body=model,
        )
        return self._decode(self.rest_call(request), TransactionModel)

    def adjust_transaction(
        self,
        company_code: str,
        transaction_code: str,
        model: AdjustTransactionModel,
        document_type: DocumentType | None = None,
        include: str | None = None,
    ) -> OperationResult[TransactionModel]:
        """Replace a transaction with a new version.

        Returns:
            OperationResult[TransactionModel]: The adjusted transaction.
        """
        request = EndpointRequest(
            path=(
                f"/api/v2/companies/{_segment(company_code)}"
                f"/transactions/{_segment(transaction_code)}/adjust"
            ),
            verb="POST",
            query={"documentType": _document_type(document_type), "$include": include},
            body=model,
        )
        return self._decode(self.rest_call(request), TransactionModel)

    def commit_transaction(
        self,
        company_code: str,
        transaction_code: str,
        commit: bool = True,  # noqa: FBT001, FBT002
        document_type: DocumentType | None = None,
    ) -> OperationResult[TransactionModel]:
        """Commit (or uncommit) a transaction for reporting."""
        request = EndpointRequest(
            path=(
                f"/api/v2/companies/{_segment(company_code)}"
                f"/transactions/{_segment(transaction_code)}/commit"
            ),
            verb="POST",
            query={"documentType": _document_type(document_type)},
            body=CommitTransactionModel(commit=commit),
        )
        return self._decode(self.rest_call(request), TransactionModel)

    def void_transaction(
        self,
        company_code: str,
        transaction_code: str,
        code: VoidReasonCode = VoidReasonCode.DOC_VOIDED,
        document_type: DocumentType | None = None,
    ) -> OperationResult[TransactionModel]:
        """Void a transaction."""
        request = EndpointRequest(
            path=(
                f"/api/v2/companies/{_segment(company_code)}"
                f"/transactions/{_segment(transaction_code)}/void"
            ),
            verb="POST",
            query={"documentType": _document_type(document_type)},
            body=VoidTransactionModel(code=code),
        )
        return self._decode(self.rest_call(request), TransactionModel)

    def get_transaction_by_code(
        self,
        company_code: str,
        transaction_code: str,
        document_type: DocumentType | None = None,
        include: str | None = None,
    ) -> OperationResult[TransactionModel]:
        """Retrieve a single transaction by its code."""
        request = EndpointRequest(
            path=(
                f"/api/v2/companies/{_segment(company_code)}"
                f"/transactions/{_segment(transaction_code)}"
            ),
            verb="GET",
            query={"documentType": _document_type(document_type), "$include": include},
        )
        return self._decode(self.rest_call(request), TransactionModel)

    def company_initialize(
        self, model: CompanyInitializationModel
    ) -> OperationResult[CompanyModel]:
        """Create a company with a default location and nexus in one call."""
        request = EndpointRequest(
            path="/api/v2/companies/initialize", verb="POST", body=model
        )
        return self._decode(self.rest_call(request), CompanyModel)

    def register_shipment(
        self,
        company_code: str,
        transaction_code: str,
        document_type: DocumentType | None = None,
    ) -> DispatchResult | str:
        """Register a transaction for shipment; usually answers with no content."""
        request = EndpointRequest(
            path=(
                f"/api/v2/companies/{_segment(company_code)}"
                f"/transactions/{_segment(transaction_code)}/shipment/registration"
            ),
            verb="POST",
            query={"documentType": _document_type(document_type)},
        )
        return self.rest_call(request)

    def download_tax_rates_by_zip_code(
        self, date: dt.date, region: str | None = None
    ) -> DispatchResult | str:
        """Download the tax rate table for a date as raw CSV bytes."""
        request = EndpointRequest(
            path=f"/api/v2/taxratesbyzipcode/download/{date.isoformat()}",
            verb="GET",
            query={"region": region},
        )
        return self.rest_call(request)

    def _decode[T: BaseModel](
        self, result: DispatchResult | str, model: type[T]
    ) -> OperationResult[T]:
        """Validate a decoded JSON object into ``model``.

        A body that does not fit the model is reported like any other
        undecodable response, according to the error mode.

        Raises:
            UnexpectedResponseFormatError: In raise mode, if validation fails.
        """
        if not isinstance(result, dict):
            return result
        try:
            return model.model_validate(result)
        except ValidationError as exc:
            raw_body = orjson.dumps(result).decode()
            message = (
                f"The response is in an unexpected format ({model.__name__}: "
                f"{exc.error_count()} validation errors). Response body: {raw_body}"
            )
            if self.error_mode is ErrorMode.RAISE:
                raise UnexpectedResponseFormatError(
                    message, raw_body, cause=exc
                ) from exc
            if self.error_mode is ErrorMode.MESSAGE:
                return message
            return CapturedFailure(
                message=message,
                error_code=ErrorCode.UNEXPECTED_FORMAT,
                raw_body=raw_body,
            )
