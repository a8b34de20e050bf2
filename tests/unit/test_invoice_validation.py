from datetime import datetime, timedelta, timezone

import pytest

from moyasar.errors import ResponseParseError
from moyasar.models.invoice import InvoiceStatus
from moyasar.models.payment import PaymentStatus
from moyasar.utils.factories import InvoiceFactory, PaymentFactory, list_wire
from moyasar.validation.invoice import (
    MAX_BULK_INVOICES,
    parse_bulk_create_response,
    parse_detailed_invoice,
    parse_invoice,
    parse_list_invoices_response,
    validate_bulk_create_request,
    validate_create_invoice_request,
    validate_update_invoice_request,
)


class TestCreateInvoiceRequest:
    """Tests for validate_create_invoice_request()."""

    @pytest.mark.unit
    def test_valid_request(self, invoice_factory):
        result = validate_create_invoice_request(invoice_factory.create_request())
        assert result.success is True
        assert result.data["amount"] == 5000

    @pytest.mark.unit
    def test_expiry_in_past(self, invoice_factory):
        past = (datetime.now(timezone.utc) - timedelta(minutes=5)).isoformat()
        result = validate_create_invoice_request(invoice_factory.create_request(expired_at=past))
        assert result.errors == ["expired_at: expired_at must be in the future"]

    @pytest.mark.unit
    def test_naive_expiry_is_taken_as_utc(self, invoice_factory):
        future = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(days=2)
        result = validate_create_invoice_request(invoice_factory.create_request(expired_at=future))
        assert result.success is True
        assert result.data["expired_at"].endswith("Z")

    @pytest.mark.unit
    def test_optional_urls_checked(self, invoice_factory):
        result = validate_create_invoice_request(invoice_factory.create_request(success_url="ftp://x"))
        assert result.errors == ["success_url: must be a valid URL"]

    @pytest.mark.unit
    def test_missing_required_fields(self):
        result = validate_create_invoice_request({})
        assert sorted(result.errors) == [
            "amount: Field required",
            "currency: Field required",
            "description: Field required",
        ]


class TestBulkCreateRequest:
    """Tests for validate_bulk_create_request()."""

    @pytest.mark.unit
    def test_valid_bulk(self, invoice_factory):
        result = validate_bulk_create_request({"invoices": [invoice_factory.create_request() for _ in range(3)]})
        assert result.success is True
        assert len(result.data["invoices"]) == 3

    @pytest.mark.unit
    def test_empty_bulk(self):
        result = validate_bulk_create_request({"invoices": []})
        assert result.errors == ["invoices: at least one invoice is required"]

    @pytest.mark.unit
    def test_limit_is_inclusive(self, invoice_factory):
        at_limit = {"invoices": [invoice_factory.create_request() for _ in range(MAX_BULK_INVOICES)]}
        over_limit = {"invoices": [invoice_factory.create_request() for _ in range(MAX_BULK_INVOICES + 1)]}
        assert validate_bulk_create_request(at_limit).success is True
        assert validate_bulk_create_request(over_limit).errors == [
            "invoices: maximum of 50 invoices allowed per bulk request"
        ]

    @pytest.mark.unit
    def test_errors_name_the_entry(self, invoice_factory):
        result = validate_bulk_create_request({"invoices": [
            invoice_factory.create_request(),
            invoice_factory.create_request(amount=0, currency="XYZ"),
        ]})
        assert result.success is False
        assert len(result.errors) == 2
        assert all(error.startswith("Invoice 2: ") for error in result.errors)
        assert "Invoice 2: amount: Input should be greater than or equal to 1" in result.errors
        assert any(error.startswith("Invoice 2: currency: ") for error in result.errors)


class TestUpdateInvoiceRequest:
    """Only metadata may be updated."""

    @pytest.mark.unit
    def test_metadata_update(self):
        assert validate_update_invoice_request({"metadata": {"a": "b"}}).data == {"metadata": {"a": "b"}}

    @pytest.mark.unit
    def test_other_fields_dropped(self):
        assert validate_update_invoice_request({"amount": 1}).data == {}


class TestParseInvoice:
    """Invoice response parsing."""

    @pytest.mark.unit
    def test_parses_invoice(self, metadata_validator):
        invoice = parse_invoice(InvoiceFactory.wire(status="paid"), metadata_validator)
        assert invoice.status is InvoiceStatus.PAID
        assert invoice.url.startswith("https://checkout.moyasar.com/invoices/")

    @pytest.mark.unit
    def test_detailed_invoice_payments(self, metadata_validator):
        wire = InvoiceFactory.detailed_wire(payments=[PaymentFactory.wire(status="failed")])
        invoice = parse_detailed_invoice(wire, metadata_validator)
        assert invoice.payments[0].status is PaymentStatus.FAILED

    @pytest.mark.unit
    def test_detailed_invoice_payments_default_empty(self, metadata_validator):
        invoice = parse_detailed_invoice(InvoiceFactory.wire(), metadata_validator)
        assert invoice.payments == []

    @pytest.mark.unit
    def test_invalid_status_is_parse_error(self, metadata_validator):
        with pytest.raises(ResponseParseError):
            parse_invoice(InvoiceFactory.wire(status="archived"), metadata_validator)

    @pytest.mark.unit
    def test_list_and_bulk_responses(self, metadata_validator):
        wires = [InvoiceFactory.wire(), InvoiceFactory.wire()]
        listed = parse_list_invoices_response(list_wire("invoices", wires), metadata_validator)
        bulk = parse_bulk_create_response({"invoices": wires}, metadata_validator)
        assert [i.id for i in listed.invoices] == [w["id"] for w in wires]
        assert [i.id for i in bulk.invoices] == [w["id"] for w in wires]
