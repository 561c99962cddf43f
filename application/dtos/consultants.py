"""
Consultant DTOs. A consultant is an Express connected account.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class ConsultantCreatePayload(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr


class ConsultantResult(BaseModel):
    id: str
    created: Optional[int] = None
    onboarded: bool = False
    first_name: Optional[str] = None
    email: Optional[str] = None
    default_currency: Optional[str] = None
    stripe_account_id: str


class OnboardingLinkResult(BaseModel):
    url: str
