"""
Catalog DTOs: products and their current one-time price.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ProductCreatePayload(BaseModel):
    name: str = Field(..., min_length=1, max_length=250)
    description: Optional[str] = Field(None, max_length=200)
    # major units, converted with the catalog currency exponent
    price: float = Field(..., gt=0)
    active: bool = True


class ProductUpdatePayload(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=250)
    description: Optional[str] = Field(None, max_length=200)
    price: Optional[float] = Field(None, gt=0)
    active: Optional[bool] = None


class ProductResult(BaseModel):
    product_id: str
    price_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    active: bool
    price: Optional[float] = None


class ProductArchiveResult(BaseModel):
    product_id: str
    status: str
