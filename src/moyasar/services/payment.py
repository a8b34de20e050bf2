from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime
from functools import partial
from typing import Any

from moyasar.errors import PaymentError
from moyasar.lifecycle import payment_capabilities
from moyasar.models.payment import (
    CapturePaymentRequest,
    CreatePaymentRequest,
    ListPaymentsResponse,
    Payment,
    PaymentCapabilities,
    PaymentStatus,
    RefundPaymentRequest,
    UpdatePaymentRequest,
)
from moyasar.services.base import BaseService, build_query
from moyasar.validation.payment import (
    parse_list_payments_response,
    parse_payment,
    validate_capture_request,
    validate_create_payment_request,
    validate_refund_request,
    validate_update_payment_request,
)

PAYMENTS_PATH = "/v1/payments"

LAST4_PATTERN = re.compile(r"\d{4}")
RRN_PATTERN = re.compile(r"\d{12}")


class PaymentService(BaseService):
    """Create, query and act on payments."""

    error_class = PaymentError

    def _parse(self, raw: Any) -> Payment[Any]:
        return parse_payment(raw, self.metadata_validator)

    def create(self, request: CreatePaymentRequest) -> Payment[Any]:
        prefix = "Failed to create payment"
        body = self._validated(validate_create_payment_request(request), prefix)
        return self._request(prefix, "POST", PAYMENTS_PATH, self._parse, json=body)

    def list(
        self,
        *,
        page: int | None = None,
        limit: int | None = None,
        id: str | None = None,
        status: PaymentStatus | str | None = None,
        created_after: datetime | None = None,
        created_before: datetime | None = None,
        updated_after: datetime | None = None,
        updated_before: datetime | None = None,
        last_4: str | None = None,
        rrn: str | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> ListPaymentsResponse[Any]:
        params = build_query({
            "page": page,
            "limit": limit,
            "id": id,
            "status": status,
            "created_after": created_after,
            "created_before": created_before,
            "updated_after": updated_after,
            "updated_before": updated_before,
            "last_4": last_4,
            "rrn": rrn,
            "metadata": metadata,
        })
        return self._request(
            "Failed to list payments",
            "GET",
            PAYMENTS_PATH,
            partial(parse_list_payments_response, validator=self.metadata_validator),
            params=params,
        )

    def retrieve(self, payment_id: str) -> Payment[Any]:
        self._require_id(payment_id, "Payment ID")
        return self._request(
            f"Failed to retrieve payment {payment_id}",
            "GET",
            f"{PAYMENTS_PATH}/{payment_id}",
            self._parse,
        )

    def update(self, payment_id: str, request: UpdatePaymentRequest) -> Payment[Any]:
        self._require_id(payment_id, "Payment ID")
        prefix = f"Failed to update payment {payment_id}"
        body = self._validated(validate_update_payment_request(request), prefix)
        return self._request(prefix, "PUT", f"{PAYMENTS_PATH}/{payment_id}", self._parse, json=body)

    def refund(self, payment_id: str, request: RefundPaymentRequest | None = None) -> Payment[Any]:
        """Refund a paid or captured payment, fully when no amount is given.

        Eligibility is the gateway's call; check ``can_refund`` first to avoid
        a round trip that will be rejected.
        """
        self._require_id(payment_id, "Payment ID")
        prefix = f"Failed to refund payment {payment_id}"
        body = self._validated(validate_refund_request(request or {}), prefix)
        return self._request(prefix, "POST", f"{PAYMENTS_PATH}/{payment_id}/refund", self._parse, json=body)

    def capture(self, payment_id: str, request: CapturePaymentRequest | None = None) -> Payment[Any]:
        self._require_id(payment_id, "Payment ID")
        prefix = f"Failed to capture payment {payment_id}"
        body = self._validated(validate_capture_request(request), prefix)
        return self._request(prefix, "POST", f"{PAYMENTS_PATH}/{payment_id}/capture", self._parse, json=body)

    def void(self, payment_id: str) -> Payment[Any]:
        self._require_id(payment_id, "Payment ID")
        return self._request(
            f"Failed to void payment {payment_id}",
            "POST",
            f"{PAYMENTS_PATH}/{payment_id}/void",
            self._parse,
        )

    def search_by_metadata(self, metadata: Mapping[str, str], **filters: Any) -> ListPaymentsResponse[Any]:
        return self.list(metadata=metadata, **filters)

    def get_by_status(self, status: PaymentStatus | str, **filters: Any) -> ListPaymentsResponse[Any]:
        return self.list(status=status, **filters)

    def get_paid(self, **filters: Any) -> ListPaymentsResponse[Any]:
        return self.get_by_status(PaymentStatus.PAID, **filters)

    def get_failed(self, **filters: Any) -> ListPaymentsResponse[Any]:
        return self.get_by_status(PaymentStatus.FAILED, **filters)

    def get_authorized(self, **filters: Any) -> ListPaymentsResponse[Any]:
        return self.get_by_status(PaymentStatus.AUTHORIZED, **filters)

    def get_refunded(self, **filters: Any) -> ListPaymentsResponse[Any]:
        return self.get_by_status(PaymentStatus.REFUNDED, **filters)

    def get_by_card_last4(self, last4: str, **filters: Any) -> ListPaymentsResponse[Any]:
        if not isinstance(last4, str) or not LAST4_PATTERN.fullmatch(last4):
            raise PaymentError(
                "Last 4 digits must be exactly 4 digits",
                error_type="invalid_request_error",
                status_code=400,
            )
        return self.list(last_4=last4, **filters)

    def get_by_rrn(self, rrn: str, **filters: Any) -> ListPaymentsResponse[Any]:
        """Look up payments by the 12-digit retrieval reference number."""
        if not isinstance(rrn, str) or not RRN_PATTERN.fullmatch(rrn):
            raise PaymentError(
                "RRN must be exactly 12 digits",
                error_type="invalid_request_error",
                status_code=400,
            )
        return self.list(rrn=rrn, **filters)

    def get_capabilities(self, payment_id: str) -> PaymentCapabilities:
        return payment_capabilities(self.retrieve(payment_id))
