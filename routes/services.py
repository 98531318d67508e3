# routes/services.py

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from pymongo import ReturnDocument

from auth import require_roles
from database import get_db, parse_object_id, serialize_doc
from errors import NotFoundError, ValidationError
from models import Role, ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/services", tags=["Services"])

admin_only = require_roles(Role.ADMIN)


@router.get("")
def list_services(db=Depends(get_db)):
    services = db.services.find({"isActive": True}).sort("name", 1)
    return {"services": [serialize_doc(s) for s in services]}


@router.get("/{service_id}")
def get_service(service_id: str, db=Depends(get_db)):
    service = db.services.find_one({"_id": parse_object_id(service_id, "service id")})
    if not service:
        raise NotFoundError("Service not found")
    return {"service": serialize_doc(service)}


@router.post("", status_code=201)
def create_service(payload: ServiceCreate, caller=Depends(admin_only), db=Depends(get_db)):
    now = datetime.utcnow()
    service = payload.model_dump()
    service.update({"isActive": True, "createdAt": now, "updatedAt": now})
    service["_id"] = db.services.insert_one(service).inserted_id
    logger.info("Service %s (%s) created", service["_id"], service["name"])
    return {"message": "Service created successfully", "service": serialize_doc(service)}


@router.put("/{service_id}")
def update_service(service_id: str, payload: ServiceUpdate, caller=Depends(admin_only), db=Depends(get_db)):
    changes = payload.model_dump(exclude_none=True, by_alias=True)
    if not changes:
        raise ValidationError("No fields to update")
    changes["updatedAt"] = datetime.utcnow()
    # Existing bookings keep their totalAmount snapshot
    service = db.services.find_one_and_update(
        {"_id": parse_object_id(service_id, "service id")},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    if not service:
        raise NotFoundError("Service not found")
    return {"message": "Service updated successfully", "service": serialize_doc(service)}


@router.delete("/{service_id}")
def deactivate_service(service_id: str, caller=Depends(admin_only), db=Depends(get_db)):
    # Soft delete so bookings can still resolve the reference
    result = db.services.update_one(
        {"_id": parse_object_id(service_id, "service id")},
        {"$set": {"isActive": False, "updatedAt": datetime.utcnow()}},
    )
    if result.matched_count == 0:
        raise NotFoundError("Service not found")
    return {"message": "Service deactivated successfully"}
