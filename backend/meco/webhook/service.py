import logging
from typing import Union, assert_never

import stripe

from meco.billing.service import BillingService
from meco.core.config import Settings
from meco.core.errors import (
    DeserializationError,
    ObjectMissingError,
    SignatureVerificationError,
)
from meco.webhook.events import (
    BillingEvent,
    InvoicePaymentEvent,
    SubscriptionDeletedEvent,
    UnhandledEvent,
    classify,
    invoice_customer,
    invoice_subscription,
)

logger = logging.getLogger(__name__)


class WebhookService:
    """Turns verified Stripe events into billing updates."""

    def __init__(self, billing: BillingService, signing_secret: str, tolerance: int = 300):
        self.billing = billing
        self.signing_secret = signing_secret
        self.tolerance = tolerance

    @classmethod
    def from_settings(cls, billing: BillingService, settings: Settings) -> "WebhookService":
        return cls(
            billing,
            signing_secret=settings.stripe_webhook_secret,
            tolerance=settings.stripe_webhook_tolerance,
        )

    def handle_stripe_event(self, payload: Union[bytes, str], sig_header: str) -> None:
        """Verify a Stripe delivery and act on it.

        Stripe cancels the subscription on its own once every retry of a
        failed payment has been declined, so ``customer.subscription.deleted``
        is where delinquent accounts are handled.
        """
        event = self.construct_event(payload, sig_header)
        self.dispatch(classify(event))

    def construct_event(self, payload: Union[bytes, str], sig_header: str) -> stripe.Event:
        try:
            return stripe.Webhook.construct_event(
                payload, sig_header, self.signing_secret, tolerance=self.tolerance
            )
        except stripe.SignatureVerificationError as exc:
            logger.warning("Stripe signature verification failed")
            raise SignatureVerificationError() from exc
        except (ValueError, AttributeError, TypeError) as exc:
            # ValueError: not JSON; the others: JSON that is not an event object
            logger.warning("Stripe event payload could not be deserialized")
            raise DeserializationError() from exc

    def dispatch(self, event: BillingEvent) -> None:
        if isinstance(event, InvoicePaymentEvent):
            self._handle_invoice_payment(event)
        elif isinstance(event, SubscriptionDeletedEvent):
            self._handle_delinquent_customer(event)
        elif isinstance(event, UnhandledEvent):
            logger.debug(f"No action for stripe event {event.event_type}")
        else:
            assert_never(event)

    def _handle_invoice_payment(self, event: InvoicePaymentEvent) -> None:
        invoice = event.invoice
        if invoice is None:
            raise ObjectMissingError()
        logger.info(f"Handling invoice payment: {invoice.get('number')} ({event.event_type})")
        self.billing.sync_subscription(invoice_customer(invoice), invoice_subscription(invoice))

    def _handle_delinquent_customer(self, event: SubscriptionDeletedEvent) -> None:
        subscription = event.subscription
        if subscription is None:
            raise ObjectMissingError()
        logger.info(f"Handling delinquent customer: {subscription.get('customer')}")
        self.billing.handle_delinquent_customer(subscription)
