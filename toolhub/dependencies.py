"""FastAPI dependencies for the mock user identity and shared services."""
from typing import Optional
from fastapi import Depends, Header, HTTPException, Request, status

from toolhub.settings import settings
from toolhub.startup import Services


def get_services(request: Request) -> Services:
    """Services built at startup for this application instance."""
    return request.app.state.services


async def get_current_user_id(
    user_id: Optional[str] = Header(None, alias=settings.USER_ID_HEADER),
) -> Optional[str]:
    """
    Get the signed-in user's id (optional).

    Identity is supplied by the UI and not verified.

    Returns:
        User id if present, None for anonymous visitors
    """
    if not user_id or not user_id.strip():
        return None
    return user_id.strip()


async def require_user_id(
    user_id: Optional[str] = Depends(get_current_user_id),
) -> str:
    """
    Require a user id (for personalised endpoints).

    Raises:
        HTTPException 401 if no user id was sent
    """
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return user_id
