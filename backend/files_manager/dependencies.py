"""FastAPI dependencies: service handles and the requester's identity."""
from typing import Optional

from fastapi import Header, Request

from files_manager.container import Services
from files_manager.exceptions import AuthError
from files_manager.types import OwnerId


def get_services(request: Request) -> Services:
    return request.app.state.services


async def optional_owner(
    request: Request,
    x_token: Optional[str] = Header(None),
) -> Optional[OwnerId]:
    """The owner behind X-Token, or None for anonymous requests."""
    if not x_token:
        return None
    return await get_services(request).session_store.resolve(x_token)


async def require_owner(
    request: Request,
    x_token: Optional[str] = Header(None),
) -> OwnerId:
    owner_id = await optional_owner(request, x_token)
    if owner_id is None:
        raise AuthError()
    return owner_id
