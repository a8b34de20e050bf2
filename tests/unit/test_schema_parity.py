"""Every contract and its schema must declare the same fields.

Contracts are the dataclasses/TypedDicts callers see; schemas are the
pydantic models that validate them. A field added to one side only would
be silently dropped, so the two are compared key by key, including
whether each key is required.
"""
import dataclasses

import pytest

from moyasar.models import common, invoice, payment, webhook
from moyasar.validation import common as common_schemas
from moyasar.validation import invoice as invoice_schemas
from moyasar.validation import payment as payment_schemas
from moyasar.validation import webhook as webhook_schemas


def contract_keys(contract) -> dict[str, bool]:
    """Map each key of a dataclass or TypedDict to whether it is required."""
    if dataclasses.is_dataclass(contract):
        return {
            f.name: f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
            for f in dataclasses.fields(contract)
        }
    keys = {key: True for key in contract.__required_keys__}
    keys.update({key: False for key in contract.__optional_keys__})
    return keys


def schema_keys(schema) -> dict[str, bool]:
    return {
        (info.alias or name): info.is_required()
        for name, info in schema.model_fields.items()
    }


RESPONSE_PAIRS = [
    (common.PaginationMeta, common_schemas.PaginationMetaSchema),
    (payment.Payment, payment_schemas.PaymentSchema),
    (payment.CreditCardSource, payment_schemas.CreditCardSourceSchema),
    (payment.WalletPaymentSource, payment_schemas.WalletSourceSchema),
    (payment.TokenPaymentSource, payment_schemas.TokenSourceSchema),
    (payment.StcPaySource, payment_schemas.StcPaySourceSchema),
    (payment.ListPaymentsResponse, payment_schemas.ListPaymentsResponseSchema),
    (invoice.Invoice, invoice_schemas.InvoiceSchema),
    (invoice.DetailedInvoice, invoice_schemas.DetailedInvoiceSchema),
    (invoice.ListInvoicesResponse, invoice_schemas.ListInvoicesResponseSchema),
    (invoice.BulkCreateInvoicesResponse, invoice_schemas.BulkCreateInvoicesResponseSchema),
    (webhook.Webhook, webhook_schemas.WebhookSchema),
    (webhook.WebhookAttempt, webhook_schemas.WebhookAttemptSchema),
    (webhook.ListWebhooksResponse, webhook_schemas.ListWebhooksResponseSchema),
    (webhook.ListWebhookAttemptsResponse, webhook_schemas.ListWebhookAttemptsResponseSchema),
    (webhook.AvailableEventsResponse, webhook_schemas.AvailableEventsResponseSchema),
]

REQUEST_PAIRS = [
    (payment.CreatePaymentRequest, payment_schemas.CreatePaymentSchema),
    (payment.CreateCreditCardSource, payment_schemas.CreateCreditCardSourceSchema),
    (payment.CreateTokenSource, payment_schemas.CreateTokenSourceSchema),
    (payment.CreateGooglePaySource, payment_schemas.CreateGooglePaySourceSchema),
    (payment.CreateApplePaySource, payment_schemas.CreateApplePaySourceSchema),
    (payment.CreateSamsungPaySource, payment_schemas.CreateSamsungPaySourceSchema),
    (payment.CreateStcPaySource, payment_schemas.CreateStcPaySourceSchema),
    (payment.UpdatePaymentRequest, payment_schemas.UpdatePaymentSchema),
    (payment.RefundPaymentRequest, payment_schemas.RefundPaymentSchema),
    (payment.CapturePaymentRequest, payment_schemas.CapturePaymentSchema),
    (invoice.CreateInvoiceRequest, invoice_schemas.CreateInvoiceSchema),
    (invoice.BulkCreateInvoiceRequest, invoice_schemas.BulkCreateInvoiceSchema),
    (invoice.UpdateInvoiceRequest, invoice_schemas.UpdateInvoiceSchema),
    (webhook.CreateWebhookRequest, webhook_schemas.CreateWebhookSchema),
    (webhook.UpdateWebhookRequest, webhook_schemas.UpdateWebhookSchema),
]


def _ids(pairs):
    return [contract.__name__ for contract, _ in pairs]


class TestSchemaParity:
    """Contracts and schemas stay in step."""

    @pytest.mark.unit
    @pytest.mark.parametrize("contract,schema", RESPONSE_PAIRS, ids=_ids(RESPONSE_PAIRS))
    def test_response_contracts(self, contract, schema):
        assert contract_keys(contract) == schema_keys(schema)

    @pytest.mark.unit
    @pytest.mark.parametrize("contract,schema", REQUEST_PAIRS, ids=_ids(REQUEST_PAIRS))
    def test_request_contracts(self, contract, schema):
        assert contract_keys(contract) == schema_keys(schema)

    @pytest.mark.unit
    def test_every_source_schema_has_a_contract(self):
        assert set(payment_schemas.SOURCE_CONTRACTS.values()) == {
            payment.CreditCardSource,
            payment.WalletPaymentSource,
            payment.TokenPaymentSource,
            payment.StcPaySource,
        }
