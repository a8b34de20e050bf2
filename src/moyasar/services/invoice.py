from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from functools import partial
from typing import Any

from moyasar.errors import InvoiceError
from moyasar.models.invoice import (
    BulkCreateInvoiceRequest,
    BulkCreateInvoicesResponse,
    CreateInvoiceRequest,
    DetailedInvoice,
    Invoice,
    InvoiceStatus,
    ListInvoicesResponse,
    UpdateInvoiceRequest,
)
from moyasar.services.base import BaseService, build_query
from moyasar.validation.invoice import (
    parse_bulk_create_response,
    parse_detailed_invoice,
    parse_invoice,
    parse_list_invoices_response,
    validate_bulk_create_request,
    validate_create_invoice_request,
    validate_update_invoice_request,
)

INVOICES_PATH = "/v1/invoices"
BULK_INVOICES_PATH = "/v1/invoices/bulk"


class InvoiceService(BaseService):
    """Hosted payment pages: create, query and cancel invoices."""

    error_class = InvoiceError

    def _parse(self, raw: Any) -> Invoice[Any]:
        return parse_invoice(raw, self.metadata_validator)

    def _parse_detailed(self, raw: Any) -> DetailedInvoice[Any]:
        return parse_detailed_invoice(raw, self.metadata_validator)

    def create(self, request: CreateInvoiceRequest) -> Invoice[Any]:
        prefix = "Failed to create invoice"
        body = self._validated(validate_create_invoice_request(request), prefix)
        return self._request(prefix, "POST", INVOICES_PATH, self._parse, json=body)

    def create_bulk(self, request: BulkCreateInvoiceRequest) -> BulkCreateInvoicesResponse[Any]:
        """Create up to 50 invoices in one call. Nothing is sent if any entry is invalid."""
        prefix = "Failed to create bulk invoices"
        body = self._validated(validate_bulk_create_request(request), prefix)
        return self._request(
            prefix,
            "POST",
            BULK_INVOICES_PATH,
            partial(parse_bulk_create_response, validator=self.metadata_validator),
            json=body,
        )

    def list(
        self,
        *,
        page: int | None = None,
        limit: int | None = None,
        id: str | None = None,
        status: InvoiceStatus | str | None = None,
        created_after: datetime | None = None,
        created_before: datetime | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> ListInvoicesResponse[Any]:
        params = build_query({
            "page": page,
            "limit": limit,
            "id": id,
            "status": status,
            "created_after": created_after,
            "created_before": created_before,
            "metadata": metadata,
        })
        return self._request(
            "Failed to list invoices",
            "GET",
            INVOICES_PATH,
            partial(parse_list_invoices_response, validator=self.metadata_validator),
            params=params,
        )

    def retrieve(self, invoice_id: str) -> DetailedInvoice[Any]:
        self._require_id(invoice_id, "Invoice ID")
        return self._request(
            f"Failed to retrieve invoice {invoice_id}",
            "GET",
            f"{INVOICES_PATH}/{invoice_id}",
            self._parse_detailed,
        )

    def update(self, invoice_id: str, request: UpdateInvoiceRequest) -> Invoice[Any]:
        self._require_id(invoice_id, "Invoice ID")
        prefix = f"Failed to update invoice {invoice_id}"
        body = self._validated(validate_update_invoice_request(request), prefix)
        return self._request(prefix, "PUT", f"{INVOICES_PATH}/{invoice_id}", self._parse, json=body)

    def cancel(self, invoice_id: str) -> DetailedInvoice[Any]:
        self._require_id(invoice_id, "Invoice ID")
        return self._request(
            f"Failed to cancel invoice {invoice_id}",
            "PUT",
            f"{INVOICES_PATH}/{invoice_id}/cancel",
            self._parse_detailed,
        )

    def search_by_metadata(self, metadata: Mapping[str, str], **filters: Any) -> ListInvoicesResponse[Any]:
        return self.list(metadata=metadata, **filters)

    def get_by_status(self, status: InvoiceStatus | str, **filters: Any) -> ListInvoicesResponse[Any]:
        return self.list(status=status, **filters)

    def get_expired(self, **filters: Any) -> ListInvoicesResponse[Any]:
        return self.get_by_status(InvoiceStatus.EXPIRED, **filters)

    def get_paid(self, **filters: Any) -> ListInvoicesResponse[Any]:
        return self.get_by_status(InvoiceStatus.PAID, **filters)
