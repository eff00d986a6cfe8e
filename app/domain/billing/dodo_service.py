"""Dodo Payments service - Integration with Dodo Payments API"""

import logging
from typing import Any, Optional

from dodopayments import AsyncDodoPayments  # type: ignore

from ...config import DODO_PAYMENTS_API_KEY, DODO_PAYMENTS_ENVIRONMENT

logger = logging.getLogger(__name__)


def normalize_dodo_environment(env: Optional[str]) -> str:
    """Normalize Dodo environment value to expected format"""
    value = (env or "test_mode").strip().lower()
    if value in {"live", "production", "prod"}:
        return "live_mode"
    if value in {"test", "sandbox", "staging", "dev", "development"}:
        return "test_mode"
    if value in {"test_mode", "live_mode"}:
        return value
    logger.warning(f"Unknown DODO environment '{env}', defaulting to test_mode")
    return "test_mode"


def _as_dict(response: Any) -> dict:
    """SDK responses are pydantic models; routers return plain dicts"""
    if response is None:
        return {}
    if hasattr(response, "model_dump"):
        return response.model_dump()
    return dict(response)


class DodoPaymentsService:
    """Service for Dodo Payments API operations"""

    def __init__(self):
        self.api_key = DODO_PAYMENTS_API_KEY
        self.environment = normalize_dodo_environment(DODO_PAYMENTS_ENVIRONMENT)
        self.client = None

        if not self.api_key:
            logger.warning(
                "DODO_PAYMENTS_API_KEY not set; billing endpoints will fail until configured"
            )
        else:
            try:
                self.client = AsyncDodoPayments(
                    bearer_token=self.api_key,
                    environment=self.environment,
                )
                logger.info(f"Dodo Payments client initialized (env={self.environment})")
            except Exception as e:
                logger.error(f"Failed to initialize Dodo client (env={self.environment}): {e}")
                self.client = None

    def is_available(self) -> bool:
        """Check if Dodo Payments client is available"""
        return self.client is not None

    async def create_checkout_session(
        self,
        product_id: str,
        customer_email: str,
        success_url: str,
        quantity: int = 1,
        metadata: Optional[dict] = None,
    ) -> dict:
        """Create a hosted checkout session for a subscription product"""
        if not self.client:
            raise Exception("Dodo Payments client not initialized")

        try:
            response = await self.client.checkout_sessions.create(
                product_cart=[{"product_id": product_id, "quantity": quantity}],
                customer={"email": customer_email},
                return_url=success_url,
                metadata=metadata or {},
                customization={
                    "theme_config": {
                        "font_size": "md",
                        "radius": "8px",
                        "pay_button_text": "Start Subscription",
                        "light": {
                            "bg_primary": "#ffffff",
                            "text_primary": "#0f172a",
                            "button_primary": "#1d4ed8",
                            "button_primary_hover": "#1e40af",
                            "button_text_primary": "#ffffff",
                            "input_focus_border": "#1d4ed8",
                        },
                    }
                },
            )
            return _as_dict(response)
        except Exception as e:
            logger.error(f"Failed to create checkout session: {e}")
            raise

    async def cancel_subscription(self, subscription_id: str, cancel_at_period_end: bool = True) -> dict:
        """Cancel a subscription now or at the end of the current period"""
        if not self.client:
            raise Exception("Dodo Payments client not initialized")

        try:
            if cancel_at_period_end:
                response = await self.client.subscriptions.update(
                    subscription_id, cancel_at_next_billing_date=True
                )
            else:
                response = await self.client.subscriptions.update(subscription_id, status="cancelled")
            return _as_dict(response)
        except Exception as e:
            logger.error(f"Failed to cancel subscription {subscription_id}: {e}")
            raise

    async def change_plan(
        self,
        subscription_id: str,
        product_id: str,
        quantity: int = 1,
        proration_billing_mode: str = "prorated_immediately",
        addons: Optional[list[dict]] = None,
    ) -> None:
        """Move a subscription to another product, optionally with seat add-ons"""
        if not self.client:
            raise Exception("Dodo Payments client not initialized")

        try:
            await self.client.subscriptions.change_plan(
                subscription_id,
                product_id=product_id,
                quantity=quantity,
                proration_billing_mode=proration_billing_mode,
                addons=addons,
            )
        except Exception as e:
            logger.error(f"Failed to change plan for subscription {subscription_id}: {e}")
            raise

    async def charge_subscription(self, subscription_id: str, amount_cents: int) -> dict:
        """One-off charge against an on-demand subscription (contract overage)"""
        if not self.client:
            raise Exception("Dodo Payments client not initialized")

        try:
            response = await self.client.subscriptions.charge(
                subscription_id,
                product_price=amount_cents,
            )
            return _as_dict(response)
        except Exception as e:
            logger.error(f"Failed to charge subscription {subscription_id}: {e}")
            raise

    async def list_payments(self, customer_id: str, limit: int = 10) -> list:
        """List payments for a customer"""
        if not self.client:
            raise Exception("Dodo Payments client not initialized")

        try:
            page = await self.client.payments.list(customer_id=customer_id, page_size=limit)
            return [_as_dict(item) for item in page.items]
        except Exception as e:
            logger.error(f"Failed to list payments for customer {customer_id}: {e}")
            raise


# Singleton instance
dodo_service = DodoPaymentsService()
