# routes/bookings.py

from typing import Optional

from fastapi import APIRouter, Depends

import booking_service
from auth import get_caller, require_roles
from database import get_db
from models import AssignMechanic, BookingCreate, Role, StatusUpdate
from permissions import Caller

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])


# Bookings visible to the caller, newest first
@router.get("")
def list_bookings(status: Optional[str] = None, caller: Caller = Depends(get_caller), db=Depends(get_db)):
    return {"bookings": booking_service.list_bookings(db, caller, status)}


@router.post("", status_code=201)
def create_booking(payload: BookingCreate, caller: Caller = Depends(get_caller), db=Depends(get_db)):
    booking = booking_service.create_booking(db, caller, payload)
    return {"message": "Booking created successfully", "booking": booking}


@router.get("/{booking_id}")
def get_booking(booking_id: str, caller: Caller = Depends(get_caller), db=Depends(get_db)):
    return {"booking": booking_service.get_booking(db, caller, booking_id)}


@router.patch("/{booking_id}/status")
def update_booking_status(booking_id: str, payload: StatusUpdate, caller: Caller = Depends(get_caller), db=Depends(get_db)):
    booking = booking_service.update_status(db, caller, booking_id, payload.status)
    return {"message": "Booking status updated successfully", "booking": booking}


# Admin only
@router.patch("/{booking_id}/assign-mechanic")
def assign_mechanic(booking_id: str, payload: AssignMechanic, caller: Caller = Depends(require_roles(Role.ADMIN)), db=Depends(get_db)):
    booking = booking_service.assign_mechanic(db, booking_id, payload.mechanic_id)
    return {"message": "Mechanic assigned successfully", "booking": booking}
