# ABOUTME: Subscription routes for the weather update signup flow.
# ABOUTME: Handles subscribe, confirm, and unsubscribe actions as a JSON API.

from datetime import datetime
from typing import Annotated

import structlog
from fastapi import APIRouter, HTTPException, Path
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from weather_notify.exceptions import (
    AlreadyConfirmedError,
    AlreadyExistsError,
    NotFoundError,
    SubscriptionValidationError,
)
from weather_notify.models import Frequency
from weather_notify.web.dependencies import SubscriptionSvc

router = APIRouter(prefix="/api", tags=["subscriptions"])
log = structlog.get_logger()

CITY_PATTERN = r"^[A-Za-z\s-]+$"
TOKEN_PATTERN = r"^[0-9a-f]{32}$"

Token = Annotated[str, Path(pattern=TOKEN_PATTERN, description="32 hex character token")]


class SubscribeRequest(BaseModel):
    """Request body for POST /api/subscribe."""

    email: EmailStr
    city: str = Field(min_length=1, max_length=255, pattern=CITY_PATTERN)
    frequency: Frequency


class SubscriptionResponse(BaseModel):
    """Public view of a subscription. Tokens are never echoed back."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    city: str
    frequency: str
    confirmed: bool
    created_at: datetime
    updated_at: datetime


class SubscribeResponse(BaseModel):
    message: str
    subscription: SubscriptionResponse


class MessageResponse(BaseModel):
    message: str


@router.post("/subscribe", response_model=SubscribeResponse)
async def subscribe(body: SubscribeRequest, service: SubscriptionSvc):
    """Create a subscription and send its confirmation email."""
    try:
        subscription = await service.subscribe(body.email, body.city, body.frequency.value)
    except AlreadyExistsError as e:
        raise HTTPException(status_code=409, detail="Email already subscribed") from e
    except SubscriptionValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return SubscribeResponse(
        message="Subscription created. Check your email to confirm.",
        subscription=SubscriptionResponse.model_validate(subscription),
    )


@router.get("/confirm/{token}", response_model=MessageResponse)
async def confirm(token: Token, service: SubscriptionSvc):
    """Confirm email subscription."""
    try:
        await service.confirm_subscription(token)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Token not found") from e
    except AlreadyConfirmedError as e:
        raise HTTPException(status_code=400, detail="Subscription already confirmed") from e

    return MessageResponse(message="Subscription confirmed successfully")


@router.get("/unsubscribe/{token}", response_model=MessageResponse)
async def unsubscribe(token: Token, service: SubscriptionSvc):
    """Delete the subscription owning the unsubscribe token."""
    try:
        await service.unsubscribe(token)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Token not found") from e

    return MessageResponse(message="Unsubscribed successfully")
