"""
User profile endpoints
======================

GET   /api/v1/users/me -- the caller's profile
PATCH /api/v1/users/me -- update name, phone, avatar, notifications, home point
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from parkride.api.dependencies import get_current_user_id, get_user_repo
from parkride.api.middleware import limiter
from parkride.api.schemas import UserResponse, UserUpdateRequest
from parkride.config import settings
from parkride.infrastructure.repositories import UserRepository

router = APIRouter(prefix="/users", tags=["users"])


async def _current_user(repo: UserRepository, user_id: int):
    user = await repo.get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/me", response_model=UserResponse, summary="Get the caller's profile")
@limiter.limit(settings.rate_limit)
async def get_me(
    request: Request,
    user_id: int = Depends(get_current_user_id),
    repo: UserRepository = Depends(get_user_repo),
):
    return await _current_user(repo, user_id)


@router.patch("/me", response_model=UserResponse, summary="Update the caller's profile")
@limiter.limit(settings.rate_limit)
async def update_me(
    request: Request,
    body: UserUpdateRequest,
    user_id: int = Depends(get_current_user_id),
    repo: UserRepository = Depends(get_user_repo),
):
    user = await _current_user(repo, user_id)
    return await repo.update_profile(user, body.model_dump(exclude_unset=True))
