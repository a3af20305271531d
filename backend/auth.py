from fastapi import Header, HTTPException, status

from services.users_service import StoredUser, authenticate


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


async def get_current_user(
    authorization: str | None = Header(default=None, convert_underscores=False),
    user_id: str | None = Header(default=None, alias="X-User-Id"),
    session_id: str | None = Header(default=None, alias="X-Session-Id"),
) -> StoredUser:
    if not authorization or not authorization.startswith("Bearer "):
        raise _unauthorized("Missing auth token")
    if not user_id or not session_id:
        raise _unauthorized("Missing user or session id")
    token = authorization.split(" ", 1)[1]
    user = await authenticate(user_id, token, session_id)
    if user is None:
        raise _unauthorized("Invalid or expired session")
    return user
