import pytest

from meco.webhook.events import (
    InvoicePaymentEvent,
    SubscriptionDeletedEvent,
    UnhandledEvent,
    classify,
    invoice_customer,
    invoice_subscription,
)


@pytest.mark.parametrize("event_type", ["invoice.payment_succeeded", "invoice.payment_failed"])
def test_invoice_payment_events(event_type, invoice):
    event = classify({"id": "evt_1", "type": event_type, "data": {"object": invoice}})

    assert event == InvoicePaymentEvent("evt_1", event_type, invoice)


def test_subscription_deleted_event(subscription):
    event = classify(
        {"id": "evt_2", "type": "customer.subscription.deleted", "data": {"object": subscription}}
    )

    assert isinstance(event, SubscriptionDeletedEvent)
    assert event.subscription is subscription


def test_unknown_type_is_unhandled(invoice):
    event = classify({"id": "evt_3", "type": "invoice.created", "data": {"object": invoice}})

    assert event == UnhandledEvent("evt_3", "invoice.created")


def test_missing_or_mismatched_object(subscription):
    no_data = classify({"id": "evt_4", "type": "invoice.payment_failed"})
    wrong_kind = classify(
        {"id": "evt_5", "type": "invoice.payment_failed", "data": {"object": subscription}}
    )

    assert no_data.invoice is None
    assert wrong_kind.invoice is None


@pytest.mark.parametrize("data", ["in_123", [], {"object": "in_123"}, {"object": ["in_123"]}, {"object": 7}])
def test_malformed_data_is_treated_as_missing(data):
    event = classify({"id": "evt_6", "type": "invoice.payment_succeeded", "data": data})

    assert isinstance(event, InvoicePaymentEvent)
    assert event.invoice is None


@pytest.mark.parametrize("event_type", [["invoice.payment_succeeded"], None, 42])
def test_non_string_type_is_unhandled(event_type, invoice):
    event = classify({"id": "evt_7", "type": event_type, "data": {"object": invoice}})

    assert isinstance(event, UnhandledEvent)


def test_malformed_invoice_references():
    invoice = {"object": "invoice", "customer": 7, "subscription": None, "parent": "sub_9"}

    assert invoice_customer(invoice) is None
    assert invoice_subscription(invoice) is None


def test_invoice_references_from_expanded_objects():
    invoice = {
        "object": "invoice",
        "customer": {"id": "cus_9", "object": "customer"},
        "subscription": {"id": "sub_9", "object": "subscription"},
    }

    assert invoice_customer(invoice) == "cus_9"
    assert invoice_subscription(invoice) == "sub_9"


def test_invoice_subscription_from_parent_details():
    invoice = {
        "object": "invoice",
        "customer": "cus_9",
        "parent": {
            "type": "subscription_details",
            "subscription_details": {"subscription": "sub_9"},
        },
    }

    assert invoice_subscription(invoice) == "sub_9"


def test_one_off_invoice_has_no_subscription():
    assert invoice_subscription({"object": "invoice", "customer": "cus_9"}) is None
