from typing import Any, Optional, Protocol


class BillingService(Protocol):
    """Account billing collaborator driven by Stripe webhooks.

    Implementations own reconciliation and must tolerate redelivery of the
    same event; the webhook layer does not deduplicate.
    """

    def sync_subscription(
        self, customer_id: Optional[str], subscription_id: Optional[str]
    ) -> None:
        """Refresh the account's subscription state from Stripe.

        ``subscription_id`` is None for invoices not tied to a subscription.
        """

    def handle_delinquent_customer(self, subscription: Any) -> None:
        """Downgrade the account whose subscription Stripe has cancelled."""
