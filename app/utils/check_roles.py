# app/utils/check_roles.py
import logging
from functools import wraps
from typing import Callable, Iterable, Optional

from fastapi import HTTPException

from app.core.config import ADMIN_ROLES

logger = logging.getLogger(__name__)


def require_role(roles: Optional[Iterable[str]] = None):
    """
    Route decorator: the wrapped route must take `_user=Depends(get_current_user)`.
    Defaults to the configured catalog admin roles.
    """
    allowed = {r.lower() for r in (roles if roles is not None else ADMIN_ROLES)}

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, _user, **kwargs):
            if _user is None:
                raise HTTPException(status_code=401, detail="User not authenticated")
            if _user.role.lower() not in allowed:
                logger.warning("Denied %s to '%s' (role %s)", func.__name__, _user.username, _user.role)
                raise HTTPException(status_code=403, detail="Permission denied")
            return await func(*args, _user=_user, **kwargs)
        return wrapper
    return decorator


require_admin = require_role()
