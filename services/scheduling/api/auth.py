import uuid

from fastapi import HTTPException, Request


def get_user_id_from_request(request: Request) -> uuid.UUID:
    """
    Extract the calling user's ID from request headers.

    The scheduling service expects user identity via the X-User-Id header,
    set by the gateway in front of it.
    """
    user_id_str = request.headers.get("X-User-Id")
    if not user_id_str:
        raise HTTPException(status_code=400, detail="Missing X-User-Id header")
    try:
        return uuid.UUID(user_id_str)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid X-User-Id header")
