"""Container return API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ContainerAdjustRequest(BaseModel):
    delta: int = Field(..., description="Positive for containers handed out, negative for returns.")


class ContainerReturnRequest(BaseModel):
    count: Optional[int] = Field(default=None, ge=0)
    bottles: Optional[int] = Field(default=None, ge=0)
    jugs: Optional[int] = Field(default=None, ge=0)


class DeliveryBatchModel(BaseModel):
    customer_id: str
    created_at: Optional[datetime] = None
    bottles: int = 0
    jugs: int = 0
