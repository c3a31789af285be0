# Bearer tokens are issued by the identity provider; here they are only resolved.

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from ParkLedger.api.session_manager import Principal

logger = logging.getLogger(__name__)


def extract_bearer_token(headers) -> Optional[str]:
    auth_header = headers.get("Authorization")
    if not auth_header:
        return None

    parts = auth_header.split(" ", 1)
    if len(parts) != 2:
        logger.debug("Invalid Authorization header format")
        return None

    scheme, token = parts
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(request: Request) -> Principal:
    token = extract_bearer_token(request.headers)
    principal = request.app.state.token_store.get(token) if token else None
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


def require_roles(*roles: str):
    def dependency(user: Principal = Depends(get_current_user)) -> Principal:
        if user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        return user
    return dependency


def require_self_or_admin(user: Principal, username: str):
    if user.role != "ADMIN" and user.username != username:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
