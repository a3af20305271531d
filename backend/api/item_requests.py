from fastapi import APIRouter, Depends, HTTPException, status

from auth import get_current_user
from mobile_order.errors import MobileOrderError
from schemas import (
    FulfillItemRequest,
    FulfillItemResponse,
    ItemRequestCreate,
    ItemRequestListResponse,
    ItemRequestRecord,
)
from services import item_requests_service
from services.users_service import StoredUser

router = APIRouter(prefix="/api/item-requests", tags=["item-requests"])


@router.post("", response_model=ItemRequestRecord, status_code=status.HTTP_201_CREATED)
async def create_item_request(
    payload: ItemRequestCreate,
    user: StoredUser = Depends(get_current_user),
) -> ItemRequestRecord:
    return await item_requests_service.create_item_request(user, payload)


@router.get("", response_model=ItemRequestListResponse)
async def list_item_requests(
    user: StoredUser = Depends(get_current_user),
) -> ItemRequestListResponse:
    return await item_requests_service.list_item_requests(user.user_id)


@router.get("/public", response_model=ItemRequestListResponse)
async def list_public_item_requests() -> ItemRequestListResponse:
    return await item_requests_service.list_public_item_requests()


@router.get("/{request_id}", response_model=ItemRequestRecord)
async def read_item_request(
    request_id: str,
    user: StoredUser = Depends(get_current_user),
) -> ItemRequestRecord:
    item_request = await item_requests_service.get_item_request(user.user_id, request_id)
    if item_request is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return item_request


@router.post("/{request_id}/fulfill", response_model=FulfillItemResponse)
async def fulfill_item_request(
    request_id: str,
    payload: FulfillItemRequest,
    user: StoredUser = Depends(get_current_user),
) -> FulfillItemResponse:
    try:
        return await item_requests_service.fulfill_item_request(user, request_id, payload)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (ValueError, MobileOrderError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
