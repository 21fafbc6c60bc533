from datetime import timedelta

from jose import jwt, JWTError

from colearn import config
from colearn.errors import AuthError
from colearn.utils import utc_now


def create_access_token(user_id: str, expires_minutes: int = None) -> str:
    expire = utc_now() + timedelta(minutes=expires_minutes or config.JWT_EXPIRE_MINUTES)
    payload = {"sub": user_id, "exp": expire}
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the user id carried by a valid token"""
    try:
        payload = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise AuthError("Invalid or Expired Token")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthError("Invalid or Expired Token")
    return user_id
