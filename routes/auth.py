# routes/auth.py

import logging
from datetime import datetime

from fastapi import APIRouter, Depends

from auth import get_current_user, hash_password, token_for, verify_password
from database import get_db, serialize_doc
from errors import AuthenticationError, ValidationError
from models import Role, UserCreate, UserLogin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", status_code=201)
def register(user: UserCreate, db=Depends(get_db)):
    if user.role is Role.ADMIN:
        raise ValidationError.for_field("role", "Cannot self-register as admin")
    if db.users.find_one({"email": user.email}):
        raise ValidationError("User already exists")
    user_data = user.model_dump(mode="json")
    user_data["password"] = hash_password(user.password)
    user_data["createdAt"] = datetime.utcnow()
    user_data["_id"] = db.users.insert_one(user_data).inserted_id
    logger.info("Registered %s as %s", user.email, user_data["role"])
    return {
        "message": "Registered successfully",
        "token": token_for(user_data),
        "user": serialize_doc(user_data),
    }


@router.post("/login")
def login(user: UserLogin, db=Depends(get_db)):
    found = db.users.find_one({"email": user.email})
    if not found or not verify_password(user.password, found["password"]):
        raise AuthenticationError("Invalid credentials")
    return {"message": "Login successful", "token": token_for(found), "user": serialize_doc(found)}


@router.get("/me")
def me(user=Depends(get_current_user)):
    return {"user": serialize_doc(user)}
