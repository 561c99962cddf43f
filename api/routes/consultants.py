"""
Consultant API routes. Consultants are Express connected accounts.
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_consultant_service, get_current_user
from application.dtos.consultants import ConsultantCreatePayload, ConsultantResult, OnboardingLinkResult
from application.services.consultant_service import ConsultantService
from core.response import Response as ApiResponse, success_response


router = APIRouter(
    prefix="/consultants",
    tags=["Consultants"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=ApiResponse[List[ConsultantResult]])
async def list_consultants(service: ConsultantService = Depends(get_consultant_service)):
    return success_response(result=await service.list())


@router.post("", response_model=ApiResponse[ConsultantResult])
async def create_consultant(
    payload: ConsultantCreatePayload,
    service: ConsultantService = Depends(get_consultant_service),
):
    return success_response(result=await service.create(payload))


# Declared before /{account_id} so "onboarding" is not taken as an id
@router.get("/onboarding", response_model=ApiResponse[OnboardingLinkResult])
async def onboarding_link(
    account_id: Optional[str] = Query(None),
    service: ConsultantService = Depends(get_consultant_service),
):
    return success_response(result=await service.onboarding_link(account_id))


@router.get("/{account_id}", response_model=ApiResponse[ConsultantResult])
async def show_consultant(account_id: str, service: ConsultantService = Depends(get_consultant_service)):
    return success_response(result=await service.get(account_id))


@router.delete("/{account_id}", response_model=ApiResponse[dict])
async def delete_consultant(account_id: str, service: ConsultantService = Depends(get_consultant_service)):
    return success_response(result=await service.delete(account_id))
