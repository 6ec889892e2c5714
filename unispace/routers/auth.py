from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from unispace.db import get_db
from unispace.errors import ConflictError
from unispace.models.user import User
from unispace.schemas.user import Token, UserCreate, UserResponse
from unispace.utils.auth import create_access_token, get_password_hash, verify_password
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
def register(user: UserCreate, db: Session = Depends(get_db)):
    """
    Register a student or lecturer account.

    - **full_name**: Display name.
    - **email**: Login name, unique.
    - **password**: At least 6 characters.
    - **role**: Student (default) or Lecturer.
    """
    if db.query(User).filter(User.email == user.email).first():
        logger.warning(f"Registration with an existing email: {user.email}")
        raise ConflictError("Email is already registered")

    db_user = User(
        full_name=user.full_name.strip(),
        email=user.email,
        hashed_password=get_password_hash(user.password),
        role=user.role,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info(f"Registered user: {db_user.id}")
    return db_user


@router.post("/login", response_model=Token, summary="Obtain an access token")
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """
    Exchange email and password for a JWT bearer token.
    The email goes in the **username** form field.
    """
    user = db.query(User).filter(User.email == form_data.username.strip().lower()).first()
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = create_access_token(data={"sub": user.email, "role": user.role.value})
    return {"access_token": access_token, "token_type": "bearer"}
