import logging

import jwt
from flask import current_app, request

logger = logging.getLogger(__name__)


def decode_jwt(token, secret):
    try:
        return jwt.decode(token, secret, algorithms=["HS256"], options={"verify_aud": False})
    except jwt.ExpiredSignatureError:
        logger.info("Expired session token")
        return None
    except jwt.InvalidTokenError as e:
        logger.info("Invalid session token: %s", e)
        return None


def get_current_user_id():
    """User id ('sub' claim) of the bearer token on the current request, or None."""
    secret = current_app.config.get("AUTH_JWT_SECRET")
    auth = request.headers.get("Authorization")
    if not secret or not auth:
        return None
    parts = auth.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    data = decode_jwt(parts[1], secret)
    if not data:
        return None
    return data.get("sub")
