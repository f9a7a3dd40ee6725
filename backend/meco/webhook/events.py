"""Typed view over the Stripe events the webhook acts on."""
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

INVOICE_PAYMENT_SUCCEEDED = "invoice.payment_succeeded"
INVOICE_PAYMENT_FAILED = "invoice.payment_failed"
SUBSCRIPTION_DELETED = "customer.subscription.deleted"

INVOICE_PAYMENT_TYPES = frozenset({INVOICE_PAYMENT_SUCCEEDED, INVOICE_PAYMENT_FAILED})


@dataclass(frozen=True)
class InvoicePaymentEvent:
    event_id: str
    event_type: str
    invoice: Optional[Mapping[str, Any]]


@dataclass(frozen=True)
class SubscriptionDeletedEvent:
    event_id: str
    event_type: str
    subscription: Optional[Mapping[str, Any]]


@dataclass(frozen=True)
class UnhandledEvent:
    event_id: str
    event_type: str


BillingEvent = Union[InvoicePaymentEvent, SubscriptionDeletedEvent, UnhandledEvent]


def _data_object(event: Mapping[str, Any], kind: str) -> Optional[Mapping[str, Any]]:
    """Return ``data.object`` when it is a Stripe object of the given kind."""
    data = event.get("data")
    if not isinstance(data, Mapping):
        return None
    obj = data.get("object")
    if not isinstance(obj, Mapping) or obj.get("object") != kind:
        return None
    return obj


def classify(event: Mapping[str, Any]) -> BillingEvent:
    event_id = event.get("id") or ""
    event_type = event.get("type")
    if not isinstance(event_type, str):
        return UnhandledEvent(str(event_id), repr(event_type))
    if event_type in INVOICE_PAYMENT_TYPES:
        return InvoicePaymentEvent(event_id, event_type, _data_object(event, "invoice"))
    if event_type == SUBSCRIPTION_DELETED:
        return SubscriptionDeletedEvent(
            event_id, event_type, _data_object(event, "subscription")
        )
    return UnhandledEvent(event_id, event_type)


def _ref(value: Any) -> Optional[str]:
    # Stripe references are ids unless the field was expanded into an object
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping) and isinstance(value.get("id"), str):
        return value["id"]
    return None


def invoice_customer(invoice: Mapping[str, Any]) -> Optional[str]:
    return _ref(invoice.get("customer"))


def invoice_subscription(invoice: Mapping[str, Any]) -> Optional[str]:
    subscription = invoice.get("subscription")
    if subscription is None:
        # API versions from 2025-03-31 moved it under parent.subscription_details
        parent = invoice.get("parent")
        details = parent.get("subscription_details") if isinstance(parent, Mapping) else None
        if isinstance(details, Mapping):
            subscription = details.get("subscription")
    return _ref(subscription)
