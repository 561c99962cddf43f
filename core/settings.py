"""
Payment-related settings using pydantic-settings v2 with nested env keys.

Kept apart from core.config.Settings so the gateway adapter can be configured
(and tested) without the application's security settings.
"""
from __future__ import annotations

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field


class StripeSettings(BaseModel):
    secret_key: Optional[str] = None
    api_version: Optional[str] = None
    # Requests are never retried locally; the SDK must not retry either
    max_network_retries: int = 0


class CheckoutSettings(BaseModel):
    success_url: str = "http://localhost:3000/success?session_id={CHECKOUT_SESSION_ID}"
    cancel_url: str = "http://localhost:3000/cancel"


class ConnectSettings(BaseModel):
    country: str = "US"
    default_currency: str = "usd"
    refresh_url: str = "http://localhost:3000/onboarding/refresh"
    return_url: str = "http://localhost:3000/onboarding/return"
    list_limit: int = 100


class CatalogSettings(BaseModel):
    currency: str = "usd"


class PaymentSettings(BaseSettings):
    stripe: StripeSettings = Field(default_factory=StripeSettings)
    checkout: CheckoutSettings = Field(default_factory=CheckoutSettings)
    connect: ConnectSettings = Field(default_factory=ConnectSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )


payment_settings = PaymentSettings()
