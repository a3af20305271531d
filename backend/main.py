import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import (
    account_router,
    item_requests_router,
    menu_router,
    orders_router,
    scheduled_orders_router,
    scheduler_router,
    session_router,
)
from config import settings
from services.scheduler import scheduled_order_scheduler

logger = logging.getLogger("mobile-order")

app = FastAPI(title="Mobile Order API")

if settings.allowed_origins == ["*"]:
    allow_origins = ["*"]
else:
    allow_origins = settings.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(session_router)
app.include_router(account_router)
app.include_router(menu_router)
app.include_router(orders_router)
app.include_router(scheduled_orders_router)
app.include_router(item_requests_router)
app.include_router(scheduler_router)


@app.on_event("startup")
async def _on_startup() -> None:
    if settings.scheduler_autostart:
        await scheduled_order_scheduler.start()
    if allow_origins == ["*"]:
        logger.warning(
            "CORS is set to allow all origins with credentials; set ALLOWED_ORIGINS to explicit values for local dev."
        )


@app.on_event("shutdown")
async def _on_shutdown() -> None:
    await scheduled_order_scheduler.stop()


@app.get("/health")
async def health():
    return {
        "status": "OK",
        "scheduler": scheduled_order_scheduler.get_status(),
    }
