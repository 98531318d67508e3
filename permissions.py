# Authorization gate: one check per row of the booking capability matrix, exhaustive over Role.

import logging
from dataclasses import dataclass

from bson import ObjectId

from errors import AuthorizationError
from models import BookingStatus, Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
    id: ObjectId
    role: Role
    email: str = ""

    @classmethod
    def from_user(cls, user: dict) -> "Caller":
        return cls(id=user["_id"], role=Role(user["role"]), email=user.get("email", ""))


def _unhandled(role):
    raise ValueError(f"Unhandled role: {role!r}")


def deny(caller: Caller, message: str):
    logger.warning("Denied %s (%s): %s", caller.email or caller.id, caller.role.value, message)
    raise AuthorizationError(message)


def _ref_id(ref):
    # A reference may be a raw ObjectId or an already-expanded summary
    if isinstance(ref, dict):
        return ref.get("_id")
    return ref


def list_scope(caller: Caller) -> dict:
    """Mongo filter restricting a listing to what the caller may see."""
    if caller.role is Role.USER:
        return {"user": caller.id}
    elif caller.role is Role.MECHANIC:
        return {"mechanic": caller.id}
    elif caller.role is Role.ADMIN:
        return {}
    return _unhandled(caller.role)


def check_create(caller: Caller):
    if caller.role is Role.USER:
        return
    elif caller.role in (Role.MECHANIC, Role.ADMIN):
        deny(caller, "Only customers can create bookings")
    else:
        _unhandled(caller.role)


def _is_party(caller, booking):
    # Ownership and assignment hold regardless of the caller's current role
    if _ref_id(booking.get("user")) == caller.id:
        return True
    mechanic = _ref_id(booking.get("mechanic"))
    return mechanic is not None and mechanic == caller.id


def check_view(caller: Caller, booking: dict):
    if caller.role is Role.ADMIN:
        return
    elif caller.role in (Role.USER, Role.MECHANIC):
        if _is_party(caller, booking):
            return
    else:
        _unhandled(caller.role)
    deny(caller, "Access denied")


def check_status_update(caller: Caller, booking: dict, status: BookingStatus):
    if caller.role is Role.USER:
        if _ref_id(booking.get("user")) != caller.id:
            deny(caller, "Access denied")
        if status is not BookingStatus.CANCELLED:
            deny(caller, "Users can only cancel bookings")
    elif caller.role in (Role.MECHANIC, Role.ADMIN):
        # No transition adjacency is enforced for staff
        return
    else:
        _unhandled(caller.role)


def check_assign(caller: Caller):
    if caller.role is Role.ADMIN:
        return
    elif caller.role in (Role.USER, Role.MECHANIC):
        deny(caller, "Insufficient permissions")
    else:
        _unhandled(caller.role)
