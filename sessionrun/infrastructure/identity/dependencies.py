"""FastAPI dependencies for identifying the calling user."""

from typing import Annotated

from fastapi import Header, HTTPException, status

from sessionrun.domain.common.value_objects import UserId

CredentialsException = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Missing or invalid user identity",
)


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> UserId:
    """
    Get the calling user from the X-User-Id header.

    Authentication happens upstream (gateway); this service only trusts
    the forwarded user id.

    Raises:
        CredentialsException: If the header is missing or not a positive integer
    """
    if x_user_id is None or not x_user_id.strip().isdigit():
        raise CredentialsException
    user_id = int(x_user_id.strip())
    if user_id <= 0:
        raise CredentialsException
    return UserId(user_id)
