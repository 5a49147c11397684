from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from study_server.api_service.core.database import get_db
from study_server.api_service.core.models import User
from study_server.api_service.core.settings import settings
from study_server.api_service import schemas

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/token")

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Signs `data` as a bearer token; the student's username travels in `sub`."""
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {**data, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()

async def authenticate_user(db: AsyncSession, username: str, password: str) -> Optional[User]:
    """Returns the account for a correct username/password pair, else None."""
    user = await get_user_by_username(db, username)
    if user is None or not verify_password(password, user.hashed_password):
        logger.info(f"Rejected login for '{username}'")
        return None
    return user

async def create_user(db: AsyncSession, user_create: schemas.UserCreate) -> User:
    """Registers a student account. Every course, event and setting is scoped to its id."""
    db_user = User(
        username=user_create.username,
        hashed_password=get_password_hash(user_create.password),
    )
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)
    logger.info(f"Registered user '{db_user.username}'")
    return db_user

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Resolves the bearer token to the signed-in student.
    Expired or malformed tokens and tokens for deleted accounts all answer 401.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise credentials_exception
    username = payload.get("sub")
    if username is None:
        raise credentials_exception

    user = await get_user_by_username(db, username=username)
    if user is None:
        raise credentials_exception
    return user
