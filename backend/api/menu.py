from fastapi import APIRouter, Depends, HTTPException, status

from auth import get_current_user
from mobile_order.errors import MobileOrderError
from schemas import LocationListResponse, MenuResponse
from services import menu_service
from services.users_service import StoredUser

router = APIRouter(prefix="/api", tags=["menu"])


@router.get("/menu/{location_id}", response_model=MenuResponse)
async def read_menu(
    location_id: str,
    user: StoredUser = Depends(get_current_user),
) -> MenuResponse:
    try:
        items = await menu_service.get_menu(user, location_id)
    except MobileOrderError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return MenuResponse(location_id=location_id, items=items)


@router.get("/locations", response_model=LocationListResponse)
async def read_locations() -> LocationListResponse:
    return LocationListResponse(items=menu_service.list_locations())
