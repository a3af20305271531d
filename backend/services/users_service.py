import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from config import settings
from mobile_order import ClientConfig, Credentials, Identity, SessionClient, Token
from repositories.users_repository import (
    deactivate_user,
    fetch_active_user,
    upsert_user,
)
from schemas import LoginResponse, UserProfileResponse
from security import decrypt_token, encrypt_token, token_matches

logger = logging.getLogger("mobile-order")


@dataclass
class StoredUser:
    user_id: str
    name: Optional[str]
    email: Optional[str]
    token: Token = field(repr=False)
    row: Dict[str, Any] = field(default_factory=dict, repr=False)


def mobile_order_config() -> ClientConfig:
    return ClientConfig(
        base_api_url=settings.mobile_order_api_url,
        base_idp_url=settings.mobile_order_idp_url,
        campus_id=settings.mobile_order_campus_id,
        secret_key=settings.mobile_order_secret_key,
        timeout=settings.mobile_order_http_timeout_seconds,
    )


def open_session(identity: Identity) -> SessionClient:
    return SessionClient(identity, mobile_order_config(), logger=logger)


def stored_user_from_row(row: Dict[str, Any]) -> StoredUser:
    return StoredUser(
        user_id=str(row["user_id"]),
        name=row.get("name"),
        email=row.get("email"),
        token=Token(
            user_id=str(row["user_id"]),
            login_token=decrypt_token(row["login_token_encrypted"]),
            session_id=row.get("session_id"),
        ),
        row=row,
    )


def load_active_user(user_id: str) -> Optional[StoredUser]:
    row = fetch_active_user(user_id)
    if not row:
        return None
    return stored_user_from_row(row)


def _email_for(name: str) -> str:
    if "@" in name:
        return name
    return f"{name}@{settings.user_email_domain}"


async def login(username: str, password: str) -> LoginResponse:
    client = open_session(Credentials(username=username, password=password))
    try:
        result = await asyncio.to_thread(client.login)
    finally:
        client.close()

    name = result.name or username
    record = {
        "user_id": result.user_id,
        "name": name,
        "email": _email_for(name),
        "session_id": result.session_id,
        "login_token_encrypted": encrypt_token(result.login_token),
        "is_active": True,
        "last_login": datetime.now(timezone.utc).isoformat(),
    }
    await asyncio.to_thread(upsert_user, record)
    logger.info("User %s (%s) logged in and stored", name, result.user_id)
    return LoginResponse(
        user_id=result.user_id,
        session_id=result.session_id,
        login_token=result.login_token,
        name=name,
        email=record["email"],
    )


async def authenticate(
    user_id: str, login_token: str, session_id: str
) -> Optional[StoredUser]:
    row = await asyncio.to_thread(fetch_active_user, user_id)
    if not row:
        return None
    if str(row.get("session_id") or "") != session_id:
        return None
    if not token_matches(row.get("login_token_encrypted") or "", login_token):
        return None
    return stored_user_from_row(row)


def profile(user: StoredUser) -> UserProfileResponse:
    return UserProfileResponse(
        user_id=user.user_id,
        name=user.name,
        email=user.email,
        created_at=user.row.get("created_at"),
        last_login=user.row.get("last_login"),
    )


async def logout(user_id: str) -> bool:
    return await asyncio.to_thread(deactivate_user, user_id)
