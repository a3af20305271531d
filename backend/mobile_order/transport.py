from __future__ import annotations

import http.cookiejar
from dataclasses import dataclass
from typing import Dict, Optional

import httpx

from .constants import APP_USER_AGENT, BROWSER_HEADERS, SSO_PATH
from .identity import SessionState


@dataclass(frozen=True)
class ClientConfig:
    base_api_url: str
    base_idp_url: str
    campus_id: str
    secret_key: str
    timeout: float = 30.0

    def api_url(self, endpoint: str) -> str:
        return f"{self.base_api_url.rstrip('/')}/api_user/{endpoint}"

    def sso_url(self, execution: str) -> str:
        return f"{self.idp_origin}{SSO_PATH}?execution={execution}"

    @property
    def idp_origin(self) -> str:
        return self.base_idp_url.rstrip("/")


def create_http_client(
    config: ClientConfig,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    # Cookies are replayed by hand from SessionState.cookies, so httpx's own
    # jar must never accept any.
    blocked = http.cookiejar.CookieJar(
        policy=http.cookiejar.DefaultCookiePolicy(allowed_domains=[])
    )
    return httpx.Client(
        timeout=config.timeout,
        follow_redirects=False,
        transport=transport,
        cookies=blocked,
    )


def browser_headers(**extra: str) -> Dict[str, str]:
    headers = dict(BROWSER_HEADERS)
    headers.update(extra)
    return headers


def app_headers(state: SessionState, *, with_token: bool = False) -> Dict[str, str]:
    headers = dict(BROWSER_HEADERS)
    headers.update(
        {
            "sessionid": state.session_id,
            "Content-Type": "application/json",
            "User-Agent": APP_USER_AGENT,
        }
    )
    if with_token:
        headers["login_token"] = state.login_token
    return headers


def is_success(
    status_code: int,
    *,
    allow_found: bool = False,
    allow_redirects: bool = False,
) -> bool:
    if 200 <= status_code < 300:
        return True
    if allow_redirects:
        return 300 <= status_code < 400
    return allow_found and status_code == 302
