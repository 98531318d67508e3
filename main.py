import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from auth import hash_password
from database import db, ensure_indexes
from errors import AppError
from models import FIELD_MESSAGES, Role
from routes import auth, bookings, services, users

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def seed_admin(database):
    if not (config.ADMIN_EMAIL and config.ADMIN_PASSWORD):
        return
    if database.users.find_one({"email": config.ADMIN_EMAIL}):
        return
    database.users.insert_one({
        "name": config.ADMIN_NAME,
        "email": config.ADMIN_EMAIL,
        "phone": "",
        "role": Role.ADMIN.value,
        "password": hash_password(config.ADMIN_PASSWORD),
        "createdAt": datetime.utcnow(),
    })
    logger.info("Created bootstrap admin %s", config.ADMIN_EMAIL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_indexes(db)
    seed_admin(db)
    logger.info("Vehicle Service Booking API started")
    yield


app = FastAPI(title="Vehicle Service Booking API", lifespan=lifespan)

app.include_router(auth.router)
app.include_router(services.router)
app.include_router(bookings.router)
app.include_router(users.router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        # Drop the leading "body"/"query"/"path" segment
        field = ".".join(str(part) for part in err["loc"][1:])
        errors.append({"field": field, "message": FIELD_MESSAGES.get(field, err["msg"])})
    return JSONResponse(status_code=400, content={"message": "Validation failed", "errors": errors})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Server error"})


@app.get("/")
def home():
    return {"message": "Vehicle Service Booking API is live"}


@app.get("/api/health")
def health():
    return {"message": "Vehicle Service Booking API is running!"}
