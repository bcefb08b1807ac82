from dataclasses import dataclass
import logging

import httpx

from lifeshield.core import config

logger = logging.getLogger(__name__)

PAYMENT_INTENTS_PATH = "/v1/payment_intents"


class PaymentProcessorError(Exception):
    """Raised when the payment processor cannot create a payment intent."""


@dataclass
class StripeClient:
    secret_key: str
    api_base: str = "https://api.stripe.com"
    timeout: float = 10

    def create_payment_intent(self, amount: int, currency: str) -> str:
        """Create a card payment intent and return its client secret.

        ``amount`` is in minor units (cents for usd).
        """
        url = f"{self.api_base.rstrip('/')}{PAYMENT_INTENTS_PATH}"
        data = {
            "amount": str(amount),
            "currency": currency,
            "payment_method_types[]": "card",
        }
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(url, data=data, auth=(self.secret_key, ""))
        except httpx.HTTPError as e:
            logger.error(
                f"Payment intent request failed: exception_type={type(e).__name__}, error={e}"
            )
            raise PaymentProcessorError("Payment processor unavailable") from e

        if response.status_code >= 400:
            logger.error(
                f"Payment processor rejected intent: status={response.status_code}, body={response.text[:200]}"
            )
            raise PaymentProcessorError(
                f"Payment processor returned HTTP {response.status_code}"
            )

        try:
            client_secret = response.json().get("client_secret")
        except ValueError as e:
            raise PaymentProcessorError("Payment processor returned an unreadable response") from e
        if not client_secret:
            raise PaymentProcessorError("Payment processor response had no client secret")
        return client_secret


def get_payment_client() -> StripeClient:
    return StripeClient(
        secret_key=config.STRIPE_SECRET_KEY,
        api_base=config.STRIPE_API_BASE,
        timeout=config.STRIPE_TIMEOUT_SECONDS,
    )
