from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from datetime import datetime
from blogsmith.core.config import settings
from blogsmith.core.database import get_db
from blogsmith.api.dependencies import Identity, get_current_identity, get_optional_identity
from blogsmith.services.post_service import normalize_post_id, post_service
from blogsmith.services.response_cache import response_cache

router = APIRouter(prefix="/posts", tags=["posts"])


class PostCreate(BaseModel):
    title: str
    content: str


class PostUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


class PostResponse(BaseModel):
    """Canonical post representation returned by every endpoint"""
    id: str
    title: str
    content: str
    owner: str = Field(validation_alias="owner_id")
    published: bool
    created_at: datetime
    updated_at: datetime

    # Read owner_id from ORM rows, accept "owner" when re-validating dumped payloads
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @field_serializer('created_at', 'updated_at')
    def serialize_timestamps(self, value: datetime, _info):
        return value.isoformat() if value else None


class PostEnvelope(BaseModel):
    success: bool = True
    data: PostResponse


class PostListEnvelope(BaseModel):
    success: bool = True
    count: int
    data: List[PostResponse]


class DeleteEnvelope(BaseModel):
    success: bool = True
    data: dict
    message: str


@router.post("/save", response_model=PostEnvelope, status_code=status.HTTP_201_CREATED)
async def create_post(
    post: PostCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Save a post (typed or generated) for the current user"""
    db_post = post_service.create_post(db, post.title, post.content, identity.id)
    return {"success": True, "data": PostResponse.model_validate(db_post)}


@router.get("/user", response_model=PostListEnvelope)
async def list_user_posts(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """List the current user's posts, newest first"""
    posts = post_service.get_user_posts(db, identity.id)
    return {
        "success": True,
        "count": len(posts),
        "data": [PostResponse.model_validate(p) for p in posts],
    }


@router.get("/{post_id}", response_model=PostEnvelope)
async def get_post(
    post_id: str,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db)
):
    """Public single-post view; anyone with the id can read it"""
    if settings.RESPONSE_CACHE_ENABLED:
        cache_key = normalize_post_id(post_id)
        cached = response_cache.get(cache_key)
        if cached is not None:
            return cached

    db_post = post_service.get_post_by_id(db, post_id)
    payload = {"success": True, "data": PostResponse.model_validate(db_post).model_dump(mode="json")}

    if settings.RESPONSE_CACHE_ENABLED:
        response_cache.set(db_post.id, payload)
    return payload


@router.put("/{post_id}", response_model=PostEnvelope)
async def update_post(
    post_id: str,
    post_update: PostUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Update a post; only its owner may do this"""
    db_post = post_service.update_post(
        db, post_id, identity.id, title=post_update.title, content=post_update.content
    )
    response_cache.invalidate(db_post.id)
    return {"success": True, "data": PostResponse.model_validate(db_post)}


@router.delete("/{post_id}", response_model=DeleteEnvelope)
async def delete_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Delete a post; only its owner may do this"""
    post_service.delete_post(db, post_id, identity.id)
    response_cache.invalidate(normalize_post_id(post_id))
    return {"success": True, "data": {}, "message": "Post deleted successfully"}
