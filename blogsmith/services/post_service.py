import logging
import uuid
from typing import List, Optional
from sqlalchemy.orm import Session
from blogsmith.core.exceptions import Forbidden, InvalidId, NotFound, Unauthenticated, ValidationError
from blogsmith.models.post import Post, TITLE_MAX_LENGTH

logger = logging.getLogger(__name__)


def normalize_post_id(post_id: str) -> str:
    """Return the canonical form of a post id, or raise InvalidId."""
    try:
        return str(uuid.UUID(str(post_id)))
    except (ValueError, TypeError, AttributeError):
        raise InvalidId()


def _validate_fields(title: Optional[str], content: Optional[str]) -> str:
    """Check title/content constraints and return the trimmed title"""
    title = (title or "").strip()
    if not title or not content:
        raise ValidationError("Please provide title and content")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title cannot be more than {TITLE_MAX_LENGTH} characters")
    return title


class PostService:
    @staticmethod
    def create_post(db: Session, title: str, content: str, owner_id: Optional[str]) -> Post:
        """Persist a new post owned by ``owner_id``"""
        title = _validate_fields(title, content)
        if not owner_id:
            raise Unauthenticated("User not found")

        post = Post(title=title, content=content, owner_id=owner_id)
        db.add(post)
        db.commit()
        db.refresh(post)

        logger.info(f"User {owner_id} created post {post.id}")
        return post

    @staticmethod
    def get_user_posts(db: Session, owner_id: Optional[str]) -> List[Post]:
        """All posts owned by ``owner_id``, newest first"""
        if not owner_id:
            raise Unauthenticated("User not found")

        return (
            db.query(Post)
            .filter(Post.owner_id == owner_id)
            .order_by(Post.created_at.desc())
            .all()
        )

    @staticmethod
    def get_post_by_id(db: Session, post_id: str) -> Post:
        """Look up a post by id. Readable by anyone who has the id."""
        post = db.query(Post).filter(Post.id == normalize_post_id(post_id)).first()
        if not post:
            raise NotFound("Post not found")
        return post

    @staticmethod
    def _get_owned_post(db: Session, post_id: str, user_id: Optional[str], action: str) -> Post:
        normalized_id = normalize_post_id(post_id)
        if not user_id:
            raise Unauthenticated("User not found")

        post = db.query(Post).filter(Post.id == normalized_id).first()
        if not post:
            raise NotFound("Post not found")

        if post.owner_id != user_id:
            logger.warning(f"User {user_id} denied {action} on post {post.id}")
            raise Forbidden(f"Not authorized to {action} this post")

        return post

    @staticmethod
    def update_post(
        db: Session,
        post_id: str,
        user_id: Optional[str],
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Post:
        """Replace title/content of a post owned by ``user_id``. Omitted fields keep their value."""
        post = PostService._get_owned_post(db, post_id, user_id, "update")

        new_title = post.title if title is None else title
        new_content = post.content if content is None else content
        post.title = _validate_fields(new_title, new_content)
        post.content = new_content

        db.commit()
        db.refresh(post)

        logger.info(f"User {user_id} updated post {post.id}")
        return post

    @staticmethod
    def delete_post(db: Session, post_id: str, user_id: Optional[str]) -> None:
        """Delete a post owned by ``user_id``"""
        post = PostService._get_owned_post(db, post_id, user_id, "delete")

        db.delete(post)
        db.commit()

        logger.info(f"User {user_id} deleted post {post_id}")


post_service = PostService()
