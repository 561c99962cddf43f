"""
Product catalog API routes. Products and prices live in the processor.
"""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from api.dependencies import get_current_user, get_product_service
from application.dtos.products import (
    ProductArchiveResult,
    ProductCreatePayload,
    ProductResult,
    ProductUpdatePayload,
)
from application.services.product_service import ProductService
from core.response import Response as ApiResponse, created_response, success_response


router = APIRouter(
    prefix="/products",
    tags=["Products"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=ApiResponse[List[ProductResult]])
async def list_products(service: ProductService = Depends(get_product_service)):
    """Every product with its first active price."""
    return success_response(result=await service.list())


@router.get("/{product_id}", response_model=ApiResponse[ProductResult])
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    return success_response(result=await service.get(product_id))


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[ProductResult])
async def create_product(
    payload: ProductCreatePayload,
    service: ProductService = Depends(get_product_service),
):
    return created_response(result=await service.create(payload))


@router.put("/{product_id}", response_model=ApiResponse[ProductResult])
async def update_product(
    product_id: str,
    payload: ProductUpdatePayload,
    service: ProductService = Depends(get_product_service),
):
    return success_response(result=await service.update(product_id, payload))


@router.delete("/{product_id}", response_model=ApiResponse[ProductArchiveResult])
async def archive_product(product_id: str, service: ProductService = Depends(get_product_service)):
    """Archive (deactivate) a product."""
    return success_response(result=await service.archive(product_id))
