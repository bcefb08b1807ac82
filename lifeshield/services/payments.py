"""Payment intent creation for policy purchases."""

import logging
from decimal import Decimal, InvalidOperation, ROUND_DOWN

from lifeshield.core import config
from lifeshield.integrations.stripe_client import StripeClient

logger = logging.getLogger(__name__)


class InvalidAmountError(ValueError):
    """Raised when a price cannot be charged."""


def to_minor_units(price) -> int:
    """Convert a price to whole cents, truncating toward zero.

    Decimal arithmetic keeps e.g. 0.29 at 29 cents instead of 28.
    """
    if price is None:
        raise InvalidAmountError("Price is required.")
    try:
        decimal_price = Decimal(str(price))
    except InvalidOperation as exc:
        raise InvalidAmountError("Price must be a number.") from exc
    if not decimal_price.is_finite() or decimal_price <= 0:
        raise InvalidAmountError("Price must be greater than zero.")

    amount = int((decimal_price * 100).to_integral_value(rounding=ROUND_DOWN))
    if amount < 1:
        raise InvalidAmountError("Price is below the smallest chargeable amount.")
    return amount


def create_intent(client: StripeClient, price) -> str:
    amount = to_minor_units(price)
    client_secret = client.create_payment_intent(amount, config.PAYMENT_CURRENCY)
    logger.info("Created payment intent for %s %s", amount, config.PAYMENT_CURRENCY)
    return client_secret
