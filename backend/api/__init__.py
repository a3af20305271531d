from .account import router as account_router
from .item_requests import router as item_requests_router
from .menu import router as menu_router
from .orders import router as orders_router
from .scheduled_orders import router as scheduled_orders_router
from .scheduler import router as scheduler_router
from .session import router as session_router

__all__ = [
    "account_router",
    "item_requests_router",
    "menu_router",
    "orders_router",
    "scheduled_orders_router",
    "scheduler_router",
    "session_router",
]
