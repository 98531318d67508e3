from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient

import config
from errors import ValidationError

# MongoClient connects lazily, so importing this module never blocks on the server
client = MongoClient(config.MONGODB_URI)
db = client[config.MONGODB_DB]


def get_db():
    return db


def ensure_indexes(database):
    database.users.create_index([("email", ASCENDING)], unique=True)
    database.users.create_index([("role", ASCENDING)])
    database.bookings.create_index([("user", ASCENDING), ("createdAt", DESCENDING)])
    database.bookings.create_index([("mechanic", ASCENDING), ("createdAt", DESCENDING)])
    database.bookings.create_index([("status", ASCENDING)])


def parse_object_id(value, field: str = "id") -> ObjectId:
    """Turn a path/body identifier into an ObjectId or raise a field-level ValidationError."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise ValidationError.for_field(field, f"Invalid {field}")
    return ObjectId(value)


def serialize_doc(doc: dict) -> dict:
    """Stringify ObjectIds and drop the password hash so a document is safe to return."""
    if doc is None:
        return None
    out = {}
    for key, value in doc.items():
        if key == "password":
            continue
        if isinstance(value, ObjectId):
            out[key] = str(value)
        elif isinstance(value, dict):
            out[key] = serialize_doc(value)
        else:
            out[key] = value
    return out
