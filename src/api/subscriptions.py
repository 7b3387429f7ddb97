"""Subscription API endpoints."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, status

from src.api.dependencies import get_current_user, get_mailer, get_subscription_service
from src.models.subscription import Subscription
from src.models.user import User
from src.schemas.common import Envelope
from src.schemas.subscription import SubscriptionCreate, SubscriptionResponse, SubscriptionUpdate
from src.services.email_service import EmailService
from src.services.email_templates import NotificationEvent
from src.services.subscription_service import SubscriptionService

router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])

Service = Annotated[SubscriptionService, Depends(get_subscription_service)]
CurrentUser = Annotated[User, Depends(get_current_user)]


def _to_response(subscriptions: list[Subscription]) -> list[SubscriptionResponse]:
    return [SubscriptionResponse.model_validate(s) for s in subscriptions]


@router.get("", response_model=Envelope[list[SubscriptionResponse]])
async def get_subscriptions(current_user: CurrentUser, service: Service):
    """Get every subscription."""
    return Envelope(data=_to_response(service.list_all()))


@router.post("", response_model=Envelope[SubscriptionResponse], status_code=status.HTTP_201_CREATED)
async def create_subscription(
    subscription_data: SubscriptionCreate,
    current_user: CurrentUser,
    service: Service,
):
    """Create a subscription owned by the caller."""
    subscription = service.create(current_user.id, subscription_data)
    return Envelope(
        message="Subscription created successfully",
        data=SubscriptionResponse.model_validate(subscription),
    )


@router.get("/user/{user_id}", response_model=Envelope[list[SubscriptionResponse]])
async def get_user_subscriptions(user_id: int, current_user: CurrentUser, service: Service):
    """Get all subscriptions of a user (the caller must be that user)."""
    return Envelope(data=_to_response(service.list_by_user(user_id, current_user.id)))


@router.get(
    "/user/{user_id}/upcoming-renewals",
    response_model=Envelope[list[SubscriptionResponse]],
)
async def get_upcoming_renewals(user_id: int, current_user: CurrentUser, service: Service):
    """Get a user's active subscriptions that renew in the future."""
    return Envelope(data=_to_response(service.upcoming_renewals(user_id, current_user.id)))


@router.get("/{subscription_id}", response_model=Envelope[SubscriptionResponse])
async def get_subscription(subscription_id: int, current_user: CurrentUser, service: Service):
    """Get a specific subscription."""
    return Envelope(data=SubscriptionResponse.model_validate(service.get(subscription_id)))


@router.put("/{subscription_id}", response_model=Envelope[SubscriptionResponse])
async def update_subscription(
    subscription_id: int,
    subscription_data: SubscriptionUpdate,
    current_user: CurrentUser,
    service: Service,
):
    """Update a subscription (owner only)."""
    subscription = service.update(subscription_id, current_user.id, subscription_data)
    return Envelope(
        message="Subscription updated successfully",
        data=SubscriptionResponse.model_validate(subscription),
    )


@router.delete("/{subscription_id}", response_model=Envelope[dict])
async def delete_subscription(subscription_id: int, current_user: CurrentUser, service: Service):
    """Permanently delete a subscription (owner only)."""
    service.delete(subscription_id, current_user.id)
    return Envelope(message="Subscription deleted successfully")


@router.post("/{subscription_id}/cancel", response_model=Envelope[SubscriptionResponse])
@router.put(
    "/{subscription_id}/cancel",
    response_model=Envelope[SubscriptionResponse],
    include_in_schema=False,
)
async def cancel_subscription(
    subscription_id: int,
    current_user: CurrentUser,
    service: Service,
    background_tasks: BackgroundTasks,
    mailer: Annotated[EmailService, Depends(get_mailer)],
):
    """Cancel a subscription (owner only) and email a confirmation."""
    subscription = service.cancel(subscription_id, current_user.id)

    background_tasks.add_task(
        mailer.dispatch_quietly,
        NotificationEvent.CANCELLATION,
        current_user.email,
        user_name=current_user.name,
        subscription={
            "name": subscription.name,
            "amount": subscription.price,
            "currency": subscription.currency.value,
            "last_payment_date": subscription.start_date,
        },
    )

    return Envelope(
        message="Subscription cancelled successfully",
        data=SubscriptionResponse.model_validate(subscription),
    )
