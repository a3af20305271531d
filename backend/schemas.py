from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(..., description="Campus SSO username")
    password: str = Field(..., description="Campus SSO password")


class LoginResponse(BaseModel):
    user_id: str
    session_id: str
    login_token: str
    name: Optional[str]
    email: Optional[str]


class UserProfileResponse(BaseModel):
    user_id: str
    name: Optional[str]
    email: Optional[str]
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class LogoutResponse(BaseModel):
    logged_out: bool


class PlaceOrderRequest(BaseModel):
    cart_items: List[Dict[str, Any]] = Field(..., min_length=1)
    location_id: str
    total: float = Field(..., description="Amount submitted as the order total")
    special_request: Optional[str] = None


class PlacedOrderResponse(BaseModel):
    order_id: str
    status: str
    barcode: Optional[str]
    message: str
    order_details: Dict[str, Any] = {}
    database_id: Optional[str] = None


class OrderRecord(BaseModel):
    id: str
    user_id: str
    user_email: Optional[str] = None
    order_id: str
    location_id: str
    location_name: Optional[str] = None
    status: str
    barcode: Optional[str] = None
    items: List[Dict[str, Any]] = []
    order_total: Optional[float] = None
    special_comment: Optional[str] = None
    order_type: str = "direct"
    related_id: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class OrderListResponse(BaseModel):
    items: List[OrderRecord]


class LiveOrderStatusResponse(BaseModel):
    order_id: str
    status: str
    barcode: Optional[str]
    payload: Dict[str, Any]


class MenuOptionValue(BaseModel):
    name: str
    price: float
    opt_id: int
    value_id: int


class MenuItem(BaseModel):
    id: int
    sectionid: int
    name: str
    description: str = ""
    price: float
    category: str = ""
    available: bool
    options: List[List[MenuOptionValue]] = []


class MenuResponse(BaseModel):
    location_id: str
    items: List[MenuItem]


class Location(BaseModel):
    location_id: str
    name: str


class LocationListResponse(BaseModel):
    items: List[Location]


class ScheduledOrderCreate(BaseModel):
    location_id: str
    location_name: Optional[str] = None
    items: List[Dict[str, Any]] = []
    cart_items: List[Dict[str, Any]]
    total: float
    special_request: Optional[str] = None
    scheduled_time: datetime
    notes: Optional[str] = None


class ScheduledOrderRecord(BaseModel):
    id: str
    user_id: str
    user_email: Optional[str] = None
    location_id: str
    location_name: Optional[str] = None
    items: List[Dict[str, Any]] = []
    cart_items: List[Dict[str, Any]] = []
    total: float
    special_request: Optional[str] = None
    scheduled_time: datetime
    status: str
    notes: Optional[str] = None
    actual_order_id: Optional[str] = None
    barcode: Optional[str] = None
    processed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ScheduledOrderListResponse(BaseModel):
    items: List[ScheduledOrderRecord]


class SchedulerStatusResponse(BaseModel):
    running: bool
    interval_seconds: int
    lookahead_seconds: int
    last_run_at: Optional[datetime]
    last_success_at: Optional[datetime]
    last_error: Optional[str]
    completed_count: int
    failed_count: int


class SchedulerTriggerResponse(BaseModel):
    completed: int
    status: SchedulerStatusResponse


class SelectedOption(BaseModel):
    name: Optional[str] = None
    value: Optional[str] = None
    opt_id: int
    value_id: int
    price: Optional[float] = None


class ItemDetails(BaseModel):
    id: Optional[int] = None
    sectionid: Optional[int] = None
    name: Optional[str] = None
    price: Optional[float] = None
    cart_item: Optional[Dict[str, Any]] = None


class ItemRequestCreate(BaseModel):
    item_name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    location_id: Optional[str] = None
    location_name: Optional[str] = None
    item_details: Optional[ItemDetails] = None
    selected_options: List[SelectedOption] = []


class ItemRequestRecord(BaseModel):
    id: str
    user_id: str
    user_email: Optional[str] = None
    item_name: str
    description: str
    location_id: Optional[str] = None
    location_name: Optional[str] = None
    item_details: Optional[Dict[str, Any]] = None
    selected_options: List[Dict[str, Any]] = []
    status: str
    order_id: Optional[str] = None
    barcode: Optional[str] = None
    fulfilled_by: Optional[str] = None
    fulfilled_by_email: Optional[str] = None
    fulfilled_at: Optional[datetime] = None
    fulfillment_details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


class ItemRequestListResponse(BaseModel):
    items: List[ItemRequestRecord]


class FulfillItemRequest(BaseModel):
    requester_email: Optional[str] = None
    special_request: Optional[str] = None


class FulfillItemResponse(BaseModel):
    request: ItemRequestRecord
    order: PlacedOrderResponse
