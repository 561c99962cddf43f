"""
用户API路由 - FastAPI表现层
"""
from typing import List

from fastapi import APIRouter, Depends, Query

from application.dto import UserUpdateDTO, UserResponseDTO
from application.services.user_service import UserApplicationService
from api.dependencies import get_current_user, get_user_service
from core.response import success_response, Response as ApiResponse


router = APIRouter(
    prefix="/users",
    tags=["用户管理"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", summary="用户列表", response_model=ApiResponse[List[UserResponseDTO]])
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: UserApplicationService = Depends(get_user_service),
):
    users = await service.list_users(skip=skip, limit=limit)
    return success_response(result=users)


@router.get("/{user_id}", summary="获取用户", response_model=ApiResponse[UserResponseDTO])
async def get_user(
    user_id: int,
    service: UserApplicationService = Depends(get_user_service),
):
    return success_response(result=await service.get_user(user_id))


@router.put("/{user_id}", summary="更新用户", response_model=ApiResponse[UserResponseDTO])
async def update_user(
    user_id: int,
    data: UserUpdateDTO,
    service: UserApplicationService = Depends(get_user_service),
):
    """更新邮箱/密码；邮箱被其他用户占用时返回 400"""
    return success_response(result=await service.update_user(user_id, data))


@router.delete("/{user_id}", summary="删除用户", response_model=ApiResponse[UserResponseDTO])
async def delete_user(
    user_id: int,
    service: UserApplicationService = Depends(get_user_service),
):
    """删除用户并返回被删除的用户"""
    return success_response(result=await service.delete_user(user_id))
