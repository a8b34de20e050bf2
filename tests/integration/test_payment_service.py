"""Integration tests for PaymentService over a recording transport."""

from datetime import datetime, timezone

import pytest

from moyasar.errors import PaymentError, ResponseParseError, TransportError, TransportErrorKind
from moyasar.models.payment import PaymentStatus
from moyasar.utils.factories import PaymentFactory, list_wire


pytestmark = pytest.mark.integration


class TestCreatePayment:
    """POST /v1/payments."""

    def test_create_sends_validated_body(self, client, transport, payment_factory):
        transport.queue(PaymentFactory.wire(status="initiated"))
        payment = client.payment.create(payment_factory.create_request(currency="sar"))

        assert payment.status is PaymentStatus.INITIATED
        assert transport.last["method"] == "POST"
        assert transport.last["path"] == "/v1/payments"
        assert transport.last["json"]["currency"] == "SAR"

    def test_invalid_request_never_sent(self, client, transport, payment_factory):
        """Validation failures are raised before any network call."""
        with pytest.raises(PaymentError) as exc_info:
            client.payment.create(payment_factory.create_request(amount=0))

        error = exc_info.value
        assert transport.requests == []
        assert error.status_code == 400
        assert error.error_type == "request_validation_error"
        assert error.message.startswith("Failed to create payment: Validation failed: amount: ")
        assert error.errors

    def test_transport_error_wrapped(self, client, transport, payment_factory):
        transport.queue(TransportError(
            "Invalid authorization credentials",
            kind=TransportErrorKind.AUTHENTICATION,
            error_type="authentication_error",
            status_code=401,
        ))
        with pytest.raises(PaymentError) as exc_info:
            client.payment.create(payment_factory.create_request())

        assert exc_info.value.message == "Failed to create payment: Invalid authorization credentials"
        assert exc_info.value.status_code == 401
        assert isinstance(exc_info.value.__cause__, TransportError)

    def test_malformed_response_wrapped(self, client, transport, payment_factory):
        transport.queue({"id": "pay_1"})
        with pytest.raises(PaymentError) as exc_info:
            client.payment.create(payment_factory.create_request())
        assert exc_info.value.error_type == "response_parse_error"
        assert isinstance(exc_info.value.__cause__, ResponseParseError)


class TestPaymentActions:
    """Retrieve, update, refund, capture, void."""

    def test_retrieve(self, client, transport):
        wire = PaymentFactory.wire()
        transport.queue(wire)
        payment = client.payment.retrieve(wire["id"])
        assert payment.id == wire["id"]
        assert transport.last["path"] == f"/v1/payments/{wire['id']}"

    def test_retrieve_requires_id(self, client, transport):
        with pytest.raises(PaymentError) as exc_info:
            client.payment.retrieve("")
        assert exc_info.value.message == "Payment ID is required"
        assert transport.requests == []

    def test_update_uses_put(self, client, transport):
        transport.queue(PaymentFactory.wire(description="Updated"))
        client.payment.update("pay_1", {"description": "Updated", "metadata": {"order": "7"}})
        assert transport.last["method"] == "PUT"
        assert transport.last["json"] == {"description": "Updated", "metadata": {"order": "7"}}

    def test_partial_refund(self, client, transport):
        transport.queue(PaymentFactory.wire(status="paid", refunded=2500))
        payment = client.payment.refund("pay_1", {"amount": 2500})
        assert transport.last["path"] == "/v1/payments/pay_1/refund"
        assert transport.last["json"] == {"amount": 2500}
        assert payment.refunded == 2500

    def test_full_refund_sends_empty_body(self, client, transport):
        transport.queue(PaymentFactory.wire(status="refunded"))
        client.payment.refund("pay_1")
        assert transport.last["json"] == {}

    def test_refund_rejected_by_gateway(self, client, transport):
        transport.queue(TransportError(
            "Payment is not refundable",
            kind=TransportErrorKind.INVALID_REQUEST,
            error_type="invalid_request_error",
            status_code=400,
        ))
        with pytest.raises(PaymentError) as exc_info:
            client.payment.refund("pay_1", {"amount": 100})
        assert exc_info.value.message == "Failed to refund payment pay_1: Payment is not refundable"

    def test_capture_without_amount(self, client, transport):
        transport.queue(PaymentFactory.wire(status="captured"))
        payment = client.payment.capture("pay_1")
        assert transport.last["path"] == "/v1/payments/pay_1/capture"
        assert transport.last["json"] == {}
        assert payment.status is PaymentStatus.CAPTURED

    def test_void(self, client, transport):
        transport.queue(PaymentFactory.wire(status="voided"))
        payment = client.payment.void("pay_1")
        assert transport.last["path"] == "/v1/payments/pay_1/void"
        assert payment.voided_at is not None

    def test_capabilities(self, client, transport):
        transport.queue(PaymentFactory.wire(status="authorized", amount=4200))
        caps = client.payment.get_capabilities("pay_1")
        assert caps.can_capture is True
        assert caps.max_capture_amount == 4200
        assert caps.can_refund is False


class TestListPayments:
    """GET /v1/payments with filters."""

    def test_filters_become_query_params(self, client, transport):
        transport.queue(list_wire("payments", [PaymentFactory.wire()]))
        created_after = datetime(2024, 1, 1, tzinfo=timezone.utc)

        response = client.payment.list(
            page=2,
            status=PaymentStatus.PAID,
            created_after=created_after,
            metadata={"order_id": "ord_1"},
        )

        assert len(response.payments) == 1
        assert transport.last["params"] == {
            "page": 2,
            "status": "paid",
            "created[gt]": "2024-01-01T00:00:00+00:00",
            "metadata[order_id]": "ord_1",
        }

    def test_status_helpers(self, client, transport):
        transport.queue(list_wire("payments", []), list_wire("payments", []))
        client.payment.get_failed()
        assert transport.last["params"] == {"status": "failed"}
        client.payment.get_authorized(limit=5)
        assert transport.last["params"] == {"status": "authorized", "limit": 5}

    def test_search_by_metadata(self, client, transport):
        transport.queue(list_wire("payments", []))
        client.payment.search_by_metadata({"customer": "c_9"})
        assert transport.last["params"] == {"metadata[customer]": "c_9"}

    def test_by_card_last4(self, client, transport):
        transport.queue(list_wire("payments", []))
        client.payment.get_by_card_last4("1111")
        assert transport.last["params"] == {"last_4": "1111"}

    @pytest.mark.parametrize("last4", ["111", "11a1", "11111", "1111\n"])
    def test_by_card_last4_rejects_bad_input(self, client, transport, last4):
        with pytest.raises(PaymentError, match="Last 4 digits must be exactly 4 digits"):
            client.payment.get_by_card_last4(last4)
        assert transport.requests == []

    def test_by_rrn(self, client, transport):
        transport.queue(list_wire("payments", []))
        client.payment.get_by_rrn("123456789012")
        assert transport.last["params"] == {"rrn": "123456789012"}

    def test_by_rrn_rejects_bad_input(self, client, transport):
        with pytest.raises(PaymentError, match="RRN must be exactly 12 digits"):
            client.payment.get_by_rrn("12345")
