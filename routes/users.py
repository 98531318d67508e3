# routes/users.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pymongo import ReturnDocument

from auth import require_roles
from database import get_db, parse_object_id, serialize_doc
from errors import NotFoundError, ValidationError
from models import Role, RoleUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])

admin_only = require_roles(Role.ADMIN)


@router.get("")
def list_users(role: Optional[Role] = None, caller=Depends(admin_only), db=Depends(get_db)):
    query = {"role": role.value} if role else {}
    users = db.users.find(query, {"password": 0}).sort("name", 1)
    return {"users": [serialize_doc(u) for u in users]}


@router.get("/mechanics")
def list_mechanics(caller=Depends(admin_only), db=Depends(get_db)):
    mechanics = db.users.find({"role": Role.MECHANIC.value}, {"password": 0}).sort("name", 1)
    return {"mechanics": [serialize_doc(m) for m in mechanics]}


@router.patch("/{user_id}/role")
def update_role(user_id: str, payload: RoleUpdate, caller=Depends(admin_only), db=Depends(get_db)):
    target = parse_object_id(user_id, "user id")
    if target == caller.id and payload.role is not Role.ADMIN:
        raise ValidationError("Admins cannot demote themselves")
    user = db.users.find_one_and_update(
        {"_id": target},
        {"$set": {"role": payload.role.value}},
        projection={"password": 0},
        return_document=ReturnDocument.AFTER,
    )
    if not user:
        raise NotFoundError("User not found")
    logger.info("User %s role set to %s by %s", user_id, payload.role.value, caller.id)
    return {"message": "Role updated successfully", "user": serialize_doc(user)}
