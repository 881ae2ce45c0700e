import logging
from datetime import date
from pathlib import Path
from typing import Optional
from fastapi import APIRouter, Depends, File as FastAPIFile, Form, HTTPException, Response, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import get_db
from app.core.security import create_access_token, token_lifetime
from app.api.dependencies import AUTH_COOKIE_NAME, get_current_user
from app.models.user import User
from app.services.registration_validator import RuleViolation, parse_birth_date, validate_registration
from app.services.user_service import user_service
from app.storage.local_storage import storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

ALLOWED_AVATAR_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


class UserResponse(BaseModel):
    """Public user record - the password hash is never part of it"""
    id: int
    user_name: str = Field(alias="userName")
    email: str
    birth_date: date = Field(alias="dataNascimento")
    phone: str = Field(alias="telefone")
    avatar_path: Optional[str] = Field(default=None, alias="imagemUrl")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse


class LoginRequest(BaseModel):
    # Missing fields fall through to the "User not found"/"Invalid password" answers
    user_name: str = Field(default="", alias="userName")
    password: str = ""
    remember_me: bool = Field(default=False, alias="rememberMe")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("user_name")
    @classmethod
    def strip_user_name(cls, value: str) -> str:
        # Registration stores user names trimmed
        return value.strip()


class LoginResponse(BaseModel):
    message: str
    token: str


def _avatar_violations(upload: Optional[UploadFile]) -> list[RuleViolation]:
    if upload is None or not upload.filename:
        return []
    errors = []
    if Path(upload.filename).suffix.lower() not in ALLOWED_AVATAR_EXTENSIONS:
        errors.append(RuleViolation(
            field="imagem",
            message=f"Image type not supported. Allowed: {', '.join(sorted(ALLOWED_AVATAR_EXTENSIONS))}"
        ))
    if upload.size is not None and upload.size > settings.MAX_FILE_SIZE:
        errors.append(RuleViolation(field="imagem", message="Image is too large"))
    return errors


@router.post("/registro", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_name: Optional[str] = Form(None, alias="userName"),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    birth_date: Optional[str] = Form(None, alias="dataNascimento"),
    phone: Optional[str] = Form(None, alias="telefone"),
    avatar: Optional[UploadFile] = FastAPIFile(None, alias="imagem"),
    db: Session = Depends(get_db)
):
    """Register a new user, with an optional avatar image"""
    payload = {
        "userName": user_name,
        "email": email,
        "password": password,
        "dataNascimento": birth_date,
        "telefone": phone,
    }
    # Validation runs before anything touches the store or the disk
    errors = validate_registration(payload) + _avatar_violations(avatar)
    if errors:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"errors": [error.model_dump() for error in errors]}
        )

    avatar_path = None
    try:
        if avatar is not None and avatar.filename:
            avatar_path = await storage.save_avatar(avatar)

        db_user = user_service.create_user(
            db,
            user_name=user_name.strip(),
            email=email,
            password=password,
            birth_date=parse_birth_date(birth_date),
            phone=phone.strip(),
            avatar_path=avatar_path
        )
    except HTTPException:
        # Duplicate email/username - the row was rolled back, drop the file too
        if avatar_path:
            storage.delete_avatar(avatar_path)
        raise
    except Exception:
        logger.exception("Error creating user %s", user_name)
        db.rollback()
        if avatar_path:
            storage.delete_avatar(avatar_path)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error creating user"
        )

    logger.info("Registered user %s (id=%s)", db_user.user_name, db_user.id)
    return RegisterResponse(
        message="User created successfully",
        user=UserResponse.model_validate(db_user)
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """Log in and get a bearer token; remember-me also sets it as a cookie"""
    try:
        user = user_service.authenticate(db, credentials.user_name, credentials.password)

        # Remember-me tokens live as long as the cookie carrying them
        lifetime = token_lifetime(credentials.remember_me)
        token = create_access_token(
            data={"sub": user.user_name},
            expires_delta=lifetime
        )
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error logging in %s", credentials.user_name)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error logging in"
        )

    if credentials.remember_me:
        response.set_cookie(
            AUTH_COOKIE_NAME,
            token,
            httponly=True,
            samesite=settings.COOKIE_SAMESITE,
            secure=settings.COOKIE_SECURE,
            max_age=int(lifetime.total_seconds()),
        )

    logger.info("Login ok user=%s remember_me=%s", user.user_name, credentials.remember_me)
    return {"message": "Login successful", "token": token}


@router.get("/user/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a user by user name; callers may only read their own record unless admin"""
    user_id = user_id.strip()
    if current_user.user_name != user_id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to read this user"
        )

    try:
        user = user_service.get_by_user_name(db, user_id)
    except Exception:
        logger.exception("Error fetching user %s", user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching user"
        )

    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    return user
