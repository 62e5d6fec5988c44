import logging
from typing import Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from blogsmith.core.exceptions import DuplicateEmail, InternalError, InvalidCredentials, ValidationError
from blogsmith.core.security import create_access_token, get_password_hash, verify_password
from blogsmith.models.user import User

logger = logging.getLogger(__name__)


class AuthService:
    @staticmethod
    def issue_token(user: User) -> str:
        """Sign a token carrying the user's id, name and email"""
        return create_access_token(user.id, name=user.name, email=user.email)

    @staticmethod
    def register_user(db: Session, name: str, email: str, password: str) -> Tuple[User, str]:
        """Create a user and return it with a freshly issued token"""
        if not name or not email or not password:
            raise ValidationError("Please provide name, email and password")

        # Explicit check gives a clearer error than the unique constraint
        existing_user = db.query(User).filter(User.email == email).first()
        if existing_user:
            raise DuplicateEmail()

        user = User(name=name, email=email, hashed_password=get_password_hash(password))
        try:
            db.add(user)
            db.commit()
        except IntegrityError:
            # Two signups for the same email raced past the check above
            db.rollback()
            raise DuplicateEmail()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Database error during signup")
            raise InternalError("Database error occurred")
        db.refresh(user)

        logger.info(f"Registered user {user.id}")
        return user, AuthService.issue_token(user)

    @staticmethod
    def login_user(db: Session, email: str, password: str) -> Tuple[User, str]:
        """Check credentials and return the user with a new token"""
        if not email or not password:
            raise ValidationError("Please provide email and password")

        user = db.query(User).filter(User.email == email).first()

        # One generic error for both cases so emails cannot be enumerated
        if not user or not verify_password(password, user.hashed_password):
            logger.info("Rejected login attempt")
            raise InvalidCredentials()

        logger.info(f"User {user.id} logged in")
        return user, AuthService.issue_token(user)


auth_service = AuthService()
