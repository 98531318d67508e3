# models.py

from datetime import date, datetime
from enum import Enum
from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class Role(str, Enum):
    USER = "user"
    MECHANIC = "mechanic"
    ADMIN = "admin"


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class VehicleType(str, Enum):
    CAR = "car"
    BIKE = "bike"


# Users

class UserCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: str = Field(..., min_length=1)
    role: Role = Role.USER


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class RoleUpdate(BaseModel):
    role: Role


# Services

class ServiceCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    duration: int = Field(..., gt=0, description="Duration in minutes")


class ServiceUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, gt=0)
    duration: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = Field(None, alias="isActive")


# Bookings

class VehicleDetails(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    type: VehicleType
    make: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    year: int = Field(..., ge=1900)
    license_plate: str = Field(..., min_length=1, alias="licensePlate")


class BookingCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    service: str
    vehicle_details: VehicleDetails = Field(..., alias="vehicleDetails")
    appointment_date: date = Field(..., alias="appointmentDate")
    appointment_time: str = Field(..., min_length=1, alias="appointmentTime")
    notes: Optional[str] = None

    @field_validator("service")
    @classmethod
    def service_must_be_object_id(cls, value):
        if not ObjectId.is_valid(value):
            raise ValueError("not a valid ObjectId")
        return value

    @field_validator("appointment_date", mode="before")
    @classmethod
    def date_from_timestamp(cls, value):
        # Browsers send Date.toISOString(); keep the calendar date it names
        if isinstance(value, str) and "T" in value:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
        return value


class StatusUpdate(BaseModel):
    status: str


class AssignMechanic(BaseModel):
    mechanic_id: str = Field(..., alias="mechanicId")


# Messages returned for request-body fields that fail validation
FIELD_MESSAGES = {
    "service": "Valid service ID is required",
    "vehicleDetails": "Vehicle details are required",
    "vehicleDetails.type": "Vehicle type must be car or bike",
    "vehicleDetails.make": "Vehicle make is required",
    "vehicleDetails.model": "Vehicle model is required",
    "vehicleDetails.year": "Valid year is required",
    "vehicleDetails.licensePlate": "License plate is required",
    "appointmentDate": "Valid appointment date is required",
    "appointmentTime": "Appointment time is required",
    "status": "Status is required",
    "mechanicId": "Mechanic ID is required",
    "email": "Valid email is required",
    "password": "Password must be at least 6 characters",
    "price": "Price must be a positive number",
    "duration": "Duration must be a positive number of minutes",
}
