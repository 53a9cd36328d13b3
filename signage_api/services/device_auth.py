import logging
import os

import jwt
from sqlalchemy.orm import Session

from signage_api.errors import DeviceAuthError
from signage_api.models.display import Display

logger = logging.getLogger(__name__)

JWT_SECRET = (os.getenv("SIGNAGE_JWT_SECRET", "") or "").strip() or "default_secret"
JWT_ALGORITHMS = [
    item.strip()
    for item in (os.getenv("SIGNAGE_JWT_ALGORITHMS", "HS256") or "HS256").split(",")
    if item.strip()
]

if JWT_SECRET == "default_secret":
    logger.warning("SIGNAGE_JWT_SECRET is not set; device tokens are verified with the default secret")


def bearer_token(authorization: str | None) -> str | None:
    raw = (authorization or "").strip()
    scheme, _, token = raw.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def verify_device_token(token: str) -> dict:
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=JWT_ALGORITHMS)
    except jwt.PyJWTError as exc:
        raise DeviceAuthError(f"Device token rejected: {exc}") from exc


def authenticate_device(db: Session, authorization: str | None) -> Display:
    token = bearer_token(authorization)
    if token is None:
        raise DeviceAuthError("Missing bearer token")
    verify_device_token(token)
    display = db.query(Display).filter(Display.device_token == token).first()
    if display is None:
        raise DeviceAuthError("Token does not belong to any display")
    return display
