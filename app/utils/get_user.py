# app/utils/get_user.py
from dataclasses import dataclass

from fastapi import Request, HTTPException, Header
from jose import jwt, JWTError

from app.core.config import JWT_SECRET, JWT_ALGORITHM


@dataclass
class CatalogUser:
    username: str
    role: str


async def get_current_user(
    request: Request,
    token: str | None = Header(default=None),
    authorization: str | None = Header(default=None),
) -> CatalogUser:
    # Support either header
    raw_token = token
    if not raw_token and authorization and authorization.startswith("Bearer "):
        raw_token = authorization.split("Bearer ")[1]

    if not raw_token:
        raise HTTPException(status_code=401, detail="Missing access token")

    try:
        payload = jwt.decode(raw_token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    username = payload.get("sub")
    role = payload.get("role")
    if not username or not role:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = CatalogUser(username=username, role=str(role))
    request.state.user = user
    return user
