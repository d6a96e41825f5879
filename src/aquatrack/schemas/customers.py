"""Customer-facing API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    is_regular: bool = Field(default=True, description="Subscription customer billed monthly.")
    default_units: Optional[int] = Field(default=None, ge=0)
    route_id: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_regular: Optional[bool] = None
    default_units: Optional[int] = Field(default=None, ge=0)
    route_id: Optional[str] = None


class CustomerModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    phone: str
    address: str
    is_regular: bool
    containers_held: int
    default_units: Optional[int] = None
    route_id: Optional[str] = None
    created_at: Optional[datetime] = None
