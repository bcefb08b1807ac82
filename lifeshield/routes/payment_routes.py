from fastapi import APIRouter, Depends, HTTPException, status

from lifeshield.integrations.stripe_client import PaymentProcessorError, StripeClient, get_payment_client
from lifeshield.routes.common import CamelModel
from lifeshield.services import payments

router = APIRouter(tags=['payments'])


class PaymentIntentRequest(CamelModel):
    price: float | None = None


class PaymentIntentResponse(CamelModel):
    client_secret: str


@router.post('/create-payment-intent', response_model=PaymentIntentResponse)
def create_payment_intent(
    data: PaymentIntentRequest,
    client: StripeClient = Depends(get_payment_client),
):
    try:
        client_secret = payments.create_intent(client, data.price)
    except payments.InvalidAmountError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except PaymentProcessorError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Payment processor unavailable',
        ) from exc

    return PaymentIntentResponse(client_secret=client_secret)
