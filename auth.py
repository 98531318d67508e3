import logging
from datetime import datetime, timedelta

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

import config
from database import get_db
from errors import AuthenticationError
from models import Role
from permissions import Caller, deny

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def hash_password(password):
    return pwd_context.hash(password)


def verify_password(plain, hashed):
    return pwd_context.verify(plain, hashed)


def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def token_for(user: dict) -> str:
    return create_access_token({"sub": user["email"], "role": user["role"]})


def get_current_user(token: str = Depends(oauth2_scheme), db=Depends(get_db)):
    if not token:
        raise AuthenticationError("No token, authorization denied")
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError as e:
        logger.debug("Rejected token: %s", e)
        raise AuthenticationError("Invalid token")
    user_email = payload.get("sub")
    if user_email is None:
        raise AuthenticationError("Invalid token")
    user = db.users.find_one({"email": user_email})
    if user is None:
        raise AuthenticationError("User not found")
    return user


def get_caller(user=Depends(get_current_user)) -> Caller:
    return Caller.from_user(user)


def require_roles(*roles: Role):
    """Dependency factory that only lets the listed roles through."""
    def checker(caller: Caller = Depends(get_caller)) -> Caller:
        if caller.role not in roles:
            deny(caller, "Insufficient permissions")
        return caller
    return checker
