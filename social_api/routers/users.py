from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response

from social_api.routers.deps import get_storage
from social_api.schemas import CreateUserRequest, UpdateUserRequest

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=201)
def create_user(payload: CreateUserRequest, request: Request):
    user = get_storage(request).create_user(payload.email, payload.password, payload.name, payload.age)
    return user.to_dict()


@router.get("")
@router.get("/{email:path}")
def get_user(request: Request, email: str = ""):
    if not email:
        raise HTTPException(404, "empty email ID")
    user = get_storage(request).get_user(email)
    # the store answers a miss with the zero-value User
    if user.is_zero():
        raise HTTPException(404, "user not found")
    return user.to_dict()


@router.put("")
@router.put("/{email:path}")
def update_user(payload: UpdateUserRequest, request: Request, email: str = ""):
    if not email:
        raise HTTPException(404, "invalid email")
    user = get_storage(request).update_user(email, payload.password, payload.name, payload.age)
    return user.to_dict()


@router.delete("")
@router.delete("/{email:path}")
def delete_user(request: Request, email: str = ""):
    if not email:
        raise HTTPException(404, "invalid email")
    get_storage(request).delete_user(email)
    return Response(status_code=204)
