from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, Path, status

from user_registry.deps import get_user_store
from user_registry.models import CountResponse, ErrorResponse, MessageResponse, UserCandidate, UserResponse
from user_registry.user_store import InMemoryUserStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["users"])

# Handlers are plain `def` so FastAPI runs each request on its worker thread
# pool; the store's readers-writer lock is what serializes them.
#
# Static paths (/count, /clear) must be registered before /{user_id}.

_BAD_ID = {400: {"model": ErrorResponse, "description": "Invalid user ID"}}
_NOT_FOUND = {404: {"model": ErrorResponse, "description": "User not found"}}
_CONFLICT = {409: {"model": ErrorResponse, "description": "Email already exists"}}
_INVALID = {400: {"model": ErrorResponse, "description": "Invalid JSON or missing fields"}}


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED, responses={**_INVALID, **_CONFLICT})
def create_user(
    payload: UserCandidate = Body(...),
    store: InMemoryUserStore = Depends(get_user_store),
) -> UserResponse:
    user = store.create(name=payload.name, email=payload.email, age=payload.age)
    logger.info("Created user id=%s", user.id)
    return UserResponse.model_validate(user)


@router.get("", response_model=list[UserResponse])
def list_users(store: InMemoryUserStore = Depends(get_user_store)) -> list[UserResponse]:
    return [UserResponse.model_validate(u) for u in store.list_all()]


@router.get("/count", response_model=CountResponse)
def count_users(store: InMemoryUserStore = Depends(get_user_store)) -> CountResponse:
    return CountResponse(count=store.count())


@router.delete("/clear", response_model=MessageResponse)
def clear_users(store: InMemoryUserStore = Depends(get_user_store)) -> MessageResponse:
    message = store.clear()
    logger.info("Cleared all users")
    return MessageResponse(message=message)


@router.get("/{user_id}", response_model=UserResponse, responses={**_BAD_ID, **_NOT_FOUND})
def get_user(
    user_id: int = Path(..., description="User id"),
    store: InMemoryUserStore = Depends(get_user_store),
) -> UserResponse:
    return UserResponse.model_validate(store.get(user_id))


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses={**_INVALID, **_NOT_FOUND, **_CONFLICT},
)
def update_user(
    user_id: int = Path(..., description="User id"),
    payload: UserCandidate = Body(...),
    store: InMemoryUserStore = Depends(get_user_store),
) -> UserResponse:
    user = store.update(user_id, name=payload.name, email=payload.email, age=payload.age)
    logger.info("Updated user id=%s", user.id)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse, responses={**_BAD_ID, **_NOT_FOUND})
def delete_user(
    user_id: int = Path(..., description="User id"),
    store: InMemoryUserStore = Depends(get_user_store),
) -> MessageResponse:
    message = store.delete(user_id)
    logger.info("Deleted user id=%s", user_id)
    return MessageResponse(message=message)
