import asyncio
from typing import Any, Callable, Dict

from mobile_order import SessionClient
from services.users_service import StoredUser, open_session


async def _fetch(
    user: StoredUser, call: Callable[[SessionClient], Dict[str, Any]]
) -> Dict[str, Any]:
    client = open_session(user.token)
    try:
        return await asyncio.to_thread(call, client)
    finally:
        client.close()


async def get_locations(user: StoredUser) -> Dict[str, Any]:
    return await _fetch(user, SessionClient.get_locations)


async def get_payment_methods(user: StoredUser) -> Dict[str, Any]:
    return await _fetch(user, SessionClient.get_payment_methods)


async def get_order_history(user: StoredUser) -> Dict[str, Any]:
    return await _fetch(user, SessionClient.get_order_history)
