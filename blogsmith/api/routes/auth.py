from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, field_validator
from email_validator import validate_email
from blogsmith.core.database import get_db
from blogsmith.api.dependencies import Identity, get_current_identity
from blogsmith.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


class UserCreate(BaseModel):
    name: str
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email_format(cls, value: str) -> str:
        # Reject malformed addresses but keep exactly what was typed;
        # login matches emails case-sensitively
        validate_email(value, check_deliverability=False)
        return value


class UserLogin(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    id: str
    name: str
    email: str
    token: str


class SignupResponse(BaseModel):
    success: bool = True
    data: AuthResponse


class IdentityResponse(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class MeResponse(BaseModel):
    success: bool = True
    data: IdentityResponse


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user and return a token"""
    user, token = auth_service.register_user(
        db, name=user_data.name, email=user_data.email, password=user_data.password
    )
    return {
        "success": True,
        "data": {"id": user.id, "name": user.name, "email": user.email, "token": token},
    }


@router.post("/login", response_model=AuthResponse)
async def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login and get access token"""
    user, token = auth_service.login_user(db, email=credentials.email, password=credentials.password)
    return {"id": user.id, "name": user.name, "email": user.email, "token": token}


@router.get("/me", response_model=MeResponse)
async def get_current_user_info(identity: Identity = Depends(get_current_identity)):
    """Identity claims from the caller's token"""
    return {
        "success": True,
        "data": {"id": identity.id, "name": identity.name, "email": identity.email},
    }
