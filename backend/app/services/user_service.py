from datetime import date
from typing import Optional
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.security import get_password_hash, verify_password
from app.models.user import User


class UserService:
    @staticmethod
    def get_by_user_name(db: Session, user_name: str) -> Optional[User]:
        return db.query(User).filter(User.user_name == user_name).first()

    @staticmethod
    def create_user(
        db: Session,
        user_name: str,
        email: str,
        password: str,
        birth_date: date,
        phone: str,
        avatar_path: Optional[str] = None
    ) -> User:
        """
        Insert a new user with a hashed password.

        Duplicates are caught by the unique constraints on user_name and email in a
        single insert, so two concurrent registrations cannot both succeed. The
        offending column is looked up after the rollback to pick the message.
        """
        db_user = User(
            user_name=user_name,
            email=email,
            hashed_password=get_password_hash(password),
            birth_date=birth_date,
            phone=phone,
            avatar_path=avatar_path
        )
        db.add(db_user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if db.query(User).filter(User.email == email).first():
                detail = "Email already registered"
            else:
                detail = "Username already registered"
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

        # Refresh to load auto-generated fields (id, created_at)
        db.refresh(db_user)
        return db_user

    @staticmethod
    def authenticate(db: Session, user_name: str, password: str) -> User:
        """Return the user if the password matches, else raise a 400"""
        user = UserService.get_by_user_name(db, user_name)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User not found"
            )
        if not verify_password(password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid password"
            )
        return user


user_service = UserService()
