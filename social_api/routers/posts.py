from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response

from social_api.routers.deps import get_storage
from social_api.schemas import CreatePostRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("", status_code=201)
def create_post(payload: CreatePostRequest, request: Request):
    post = get_storage(request).create_post(payload.user_email, payload.text)
    return post.to_dict()


@router.get("/{user_email:path}")
def get_posts(user_email: str, request: Request):
    posts = get_storage(request).get_posts(user_email)
    return [post.to_dict() for post in posts]


@router.delete("/{post_id:path}")
def delete_post(post_id: str, request: Request):
    logger.info("Received post %s for deletion", post_id)
    get_storage(request).delete_post(post_id)
    return Response(status_code=204)
