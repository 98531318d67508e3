# Booking lifecycle handlers. Each takes the database and an explicit Caller.

import logging
from datetime import date, datetime

from pymongo import DESCENDING, ReturnDocument

import permissions
from database import parse_object_id, serialize_doc
from errors import NotFoundError, ValidationError
from models import BookingCreate, BookingStatus, Role
from permissions import Caller

logger = logging.getLogger(__name__)

PERSON_FIELDS = {"name": 1, "email": 1, "phone": 1}
SERVICE_FIELDS = {"name": 1, "description": 1, "price": 1, "duration": 1}


def _summary(collection, ref, projection):
    if ref is None:
        return None
    doc = collection.find_one({"_id": ref}, projection)
    return serialize_doc(doc)


def expand_booking(db, booking: dict) -> dict:
    """
    Replace the user, service and mechanic references with summaries.

    This is a separate read after any write: a reference that no longer
    resolves comes back as None instead of failing the request.
    """
    out = serialize_doc(booking)
    out["user"] = _summary(db.users, booking.get("user"), PERSON_FIELDS)
    out["service"] = _summary(db.services, booking.get("service"), SERVICE_FIELDS)
    out["mechanic"] = _summary(db.users, booking.get("mechanic"), PERSON_FIELDS)
    return out


def _parse_status(value) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError:
        raise ValidationError.for_field("status", "Invalid status")


def _find_booking(db, booking_id):
    booking = db.bookings.find_one({"_id": parse_object_id(booking_id, "booking id")})
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def list_bookings(db, caller, status=None):
    query = dict(permissions.list_scope(caller))
    if status:
        # Passed through as-is; an unknown value simply matches nothing
        query["status"] = status
    cursor = db.bookings.find(query).sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
    return [expand_booking(db, b) for b in cursor]


def create_booking(db, caller: Caller, payload: BookingCreate) -> dict:
    permissions.check_create(caller)

    service = db.services.find_one({"_id": parse_object_id(payload.service, "service")})
    if not service:
        raise NotFoundError("Service not found")

    if payload.appointment_date < date.today():
        raise ValidationError.for_field("appointmentDate", "Appointment date must be in the future")

    now = datetime.utcnow()
    booking = {
        "user": caller.id,
        "service": service["_id"],
        "mechanic": None,
        "vehicleDetails": payload.vehicle_details.model_dump(mode="json", by_alias=True),
        # BSON has no date type, store midnight
        "appointmentDate": datetime.combine(payload.appointment_date, datetime.min.time()),
        "appointmentTime": payload.appointment_time,
        "notes": payload.notes,
        "totalAmount": service["price"],
        "status": BookingStatus.PENDING.value,
        "createdAt": now,
        "updatedAt": now,
    }
    booking["_id"] = db.bookings.insert_one(booking).inserted_id
    logger.info("Booking %s created by %s for service %s", booking["_id"], caller.id, service["_id"])
    return expand_booking(db, booking)


def get_booking(db, caller, booking_id):
    booking = _find_booking(db, booking_id)
    permissions.check_view(caller, booking)
    return expand_booking(db, booking)


def update_status(db, caller, booking_id, status):
    new_status = _parse_status(status)
    booking = _find_booking(db, booking_id)
    permissions.check_status_update(caller, booking, new_status)

    # Last write wins; concurrent updates are not serialized
    updated = db.bookings.find_one_and_update(
        {"_id": booking["_id"]},
        {"$set": {"status": new_status.value, "updatedAt": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        raise NotFoundError("Booking not found")
    logger.info("Booking %s: %s -> %s by %s", booking["_id"], booking["status"], new_status.value, caller.id)
    return expand_booking(db, updated)


def assign_mechanic(db, booking_id, mechanic_id):
    mechanic = db.users.find_one({
        "_id": parse_object_id(mechanic_id, "mechanicId"),
        "role": Role.MECHANIC.value,
    })
    if not mechanic:
        raise NotFoundError("Mechanic not found")

    updated = db.bookings.find_one_and_update(
        {"_id": parse_object_id(booking_id, "booking id")},
        {"$set": {"mechanic": mechanic["_id"], "updatedAt": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        raise NotFoundError("Booking not found")
    logger.info("Booking %s assigned to mechanic %s", updated["_id"], mechanic["_id"])
    return expand_booking(db, updated)
