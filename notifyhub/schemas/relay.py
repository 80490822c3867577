"""Passthrough relay API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from notifyhub.domain.enums import PushPlatform


class RelayNotifyRequest(BaseModel):
    """Notification relayed from another deployment."""

    platform: PushPlatform
    notification: dict[str, Any] = Field(..., description="Provider-agnostic notification payload")
    device: dict[str, Any] = Field(..., description="Target device (e.g. push token)")


class RelayNotifyResponse(BaseModel):
    """Delivery result. error is a generic class, never provider detail."""

    model_config = ConfigDict(from_attributes=True)

    success: bool
    platform: PushPlatform
    sent_at: datetime
    error: str | None = None
