from fastapi import APIRouter, Depends, HTTPException, status

from auth import get_current_user
from mobile_order.errors import MobileOrderError
from schemas import LoginRequest, LoginResponse, LogoutResponse, UserProfileResponse
from services import users_service
from services.users_service import StoredUser

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest) -> LoginResponse:
    try:
        return await users_service.login(payload.username, payload.password)
    except MobileOrderError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.get("/profile", response_model=UserProfileResponse)
async def read_profile(
    user: StoredUser = Depends(get_current_user),
) -> UserProfileResponse:
    return users_service.profile(user)


@router.post("/logout", response_model=LogoutResponse)
async def logout(user: StoredUser = Depends(get_current_user)) -> LogoutResponse:
    logged_out = await users_service.logout(user.user_id)
    return LogoutResponse(logged_out=logged_out)
