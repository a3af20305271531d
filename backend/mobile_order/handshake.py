"""Shibboleth SSO login handshake for the mobile ordering API.

The handshake trades a username/password for a durable
``(user_id, session_id, login_token)`` triple. It is modelled as an explicit
state machine: ``advance()`` performs exactly one transition (one logical
round trip) and ``run()`` drives it until a terminal step. Any missing marker
or unexpected response moves the machine to ``FAILED`` and raises; nothing is
retried here.
"""

from __future__ import annotations

import html
import logging
import re
from enum import Enum
from typing import Any, Callable, Dict, Optional, Type
from urllib.parse import quote

import httpx

from .constants import (
    APP_BUNDLE_NAME,
    APP_VERSION,
    CSRF_PATTERN,
    DEVICE_MODEL,
    ENDPOINT_LOGIN_WITH_TOKEN,
    ENDPOINT_REGISTER,
    ENDPOINT_SAML_LOGIN,
    ENDPOINT_SAML_SUCCESS,
    NAVIGATE_HEADERS,
    OS_TYPE,
    OS_VERSION,
    PUSH_TOKEN,
    SAML_RESPONSE_PATTERN,
    SHIB_LOCAL_STORAGE_FIELDS,
    SSO_EXECUTION_CSRF,
    SSO_EXECUTION_LOGIN,
    TEMP_TOKEN_PATTERN,
)
from .errors import (
    CsrfExtractionError,
    HandshakeError,
    LoginWithTokenError,
    RegistrationError,
    SamlExtractionError,
    TempTokenMissingError,
)
from .identity import Credentials, LoginResult, SessionState
from .signing import HmacSigner
from .transport import ClientConfig, app_headers, browser_headers, is_success


class HandshakeStep(str, Enum):
    START = "start"
    SAML_INITIATED = "saml_initiated"
    IDP_REDIRECTED = "idp_redirected"
    CSRF_FORM_SUBMITTED = "csrf_form_submitted"
    LOGIN_PAGE_RETRIEVED = "login_page_retrieved"
    CREDENTIALS_SUBMITTED = "credentials_submitted"
    SAML_RESPONSE_SUBMITTED = "saml_response_submitted"
    REGISTERED_WITH_TOKEN = "registered_with_token"
    LOGGED_IN = "logged_in"
    FAILED = "failed"


TERMINAL_STEPS = frozenset({HandshakeStep.LOGGED_IN, HandshakeStep.FAILED})


def _extract(pattern: str, text: str) -> Optional[str]:
    match = re.search(pattern, text or "")
    if not match or not match.group(1):
        return None
    return html.unescape(match.group(1))


class AuthHandshake:
    def __init__(
        self,
        http: httpx.Client,
        config: ClientConfig,
        state: SessionState,
        credentials: Credentials,
        *,
        signer: Optional[HmacSigner] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._http = http
        self._config = config
        self._state = state
        self._credentials: Optional[Credentials] = credentials
        self._signer = signer or HmacSigner(config.secret_key)
        self._logger = logger or logging.getLogger("mobile-order")

        self.step = HandshakeStep.START
        self.failed_step: Optional[HandshakeStep] = None
        self.login_with_token_error: Optional[LoginWithTokenError] = None
        self.name: Optional[str] = None

        self._csrf_token: Optional[str] = None
        self._saml_response: Optional[str] = None
        self._temp_token: Optional[str] = None

        self._transitions: Dict[HandshakeStep, Callable[[], HandshakeStep]] = {
            HandshakeStep.START: self._initiate_saml,
            HandshakeStep.SAML_INITIATED: self._follow_idp_redirect,
            HandshakeStep.IDP_REDIRECTED: self._submit_csrf_form,
            HandshakeStep.CSRF_FORM_SUBMITTED: self._get_login_page,
            HandshakeStep.LOGIN_PAGE_RETRIEVED: self._submit_credentials,
            HandshakeStep.CREDENTIALS_SUBMITTED: self._submit_saml_response,
            HandshakeStep.SAML_RESPONSE_SUBMITTED: self._register_with_token,
            HandshakeStep.REGISTERED_WITH_TOKEN: self._login_with_token,
        }

    def run(self) -> LoginResult:
        while self.step not in TERMINAL_STEPS:
            self.advance()
        return LoginResult(
            user_id=self._state.user_id,
            session_id=self._state.session_id,
            login_token=self._state.login_token,
            name=self.name,
        )

    def advance(self) -> HandshakeStep:
        current = self.step
        if current in TERMINAL_STEPS:
            return current
        handler = self._transitions[current]
        try:
            next_step = handler()
        except HandshakeError:
            self._fail(current)
            raise
        except httpx.HTTPError as exc:
            self._fail(current)
            raise HandshakeError(current.value, str(exc)) from exc
        self._logger.info("Login handshake %s -> %s", current.value, next_step.value)
        self.step = next_step
        return next_step

    def _fail(self, current: HandshakeStep) -> None:
        self.failed_step = current
        self.step = HandshakeStep.FAILED
        self._logger.warning("Login handshake failed at %s", current.value)

    def _round_trip(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        *,
        allow_found: bool = False,
        allow_redirects: bool = False,
        error_cls: Type[HandshakeError] = HandshakeError,
        **body: Any,
    ) -> httpx.Response:
        request_headers = dict(headers)
        cookie_header = self._state.cookies.header()
        if cookie_header:
            request_headers["Cookie"] = cookie_header
        response = self._http.request(method, url, headers=request_headers, **body)
        self._state.cookies.store_response(response)
        if not is_success(
            response.status_code,
            allow_found=allow_found,
            allow_redirects=allow_redirects,
        ):
            raise error_cls(
                self.step.value,
                f"unexpected HTTP {response.status_code} from {url}",
            )
        return response

    def _idp_headers(self, site: str, **extra: str) -> Dict[str, str]:
        return browser_headers(**NAVIGATE_HEADERS, **{"Sec-Fetch-Site": site}, **extra)

    def _initiate_saml(self) -> HandshakeStep:
        url = (
            f"{self._config.api_url(ENDPOINT_SAML_LOGIN)}"
            f"?campusid={self._config.campus_id}"
        )
        response = self._round_trip(
            "GET", url, self._idp_headers("none"), allow_found=True
        )
        location = response.headers.get("location")
        if not location:
            raise HandshakeError(
                self.step.value, "SAML login did not redirect to the identity provider"
            )
        location = str(response.url.join(location))
        self._round_trip("GET", location, self._idp_headers("none"), allow_found=True)
        return HandshakeStep.SAML_INITIATED

    def _follow_idp_redirect(self) -> HandshakeStep:
        response = self._round_trip(
            "GET",
            self._config.sso_url(SSO_EXECUTION_CSRF),
            self._idp_headers("none"),
            allow_found=True,
        )
        self._csrf_token = _extract(CSRF_PATTERN, response.text)
        if not self._csrf_token:
            raise CsrfExtractionError(self.step.value, "csrf_token not found on IdP page")
        return HandshakeStep.IDP_REDIRECTED

    def _submit_csrf_form(self) -> HandshakeStep:
        form = {"csrf_token": self._csrf_token, **SHIB_LOCAL_STORAGE_FIELDS}
        self._round_trip(
            "POST",
            self._config.sso_url(SSO_EXECUTION_CSRF),
            self._idp_headers(
                "same-origin",
                **{
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Origin": self._config.idp_origin,
                    "Referer": self._config.sso_url(SSO_EXECUTION_CSRF),
                },
            ),
            allow_found=True,
            data=form,
        )
        return HandshakeStep.CSRF_FORM_SUBMITTED

    def _get_login_page(self) -> HandshakeStep:
        response = self._round_trip(
            "GET",
            self._config.sso_url(SSO_EXECUTION_LOGIN),
            self._idp_headers(
                "same-origin", Referer=self._config.sso_url(SSO_EXECUTION_CSRF)
            ),
        )
        self._csrf_token = _extract(CSRF_PATTERN, response.text)
        if not self._csrf_token:
            raise CsrfExtractionError(self.step.value, "csrf_token not found on login page")
        return HandshakeStep.LOGIN_PAGE_RETRIEVED

    def _submit_credentials(self) -> HandshakeStep:
        credentials = self._credentials
        form = {
            "csrf_token": self._csrf_token,
            "j_username": credentials.username,
            "j_password": credentials.password,
            "_eventId_proceed": "",
        }
        response = self._round_trip(
            "POST",
            self._config.sso_url(SSO_EXECUTION_LOGIN),
            self._idp_headers(
                "same-origin",
                **{
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Origin": self._config.idp_origin,
                    "Referer": self._config.sso_url(SSO_EXECUTION_LOGIN),
                },
            ),
            allow_redirects=True,
            data=form,
        )
        self._credentials = None
        self.name = credentials.username
        self._saml_response = _extract(SAML_RESPONSE_PATTERN, response.text)
        if not self._saml_response:
            raise SamlExtractionError(
                self.step.value, "SAMLResponse not found; check username and password"
            )
        return HandshakeStep.CREDENTIALS_SUBMITTED

    def _submit_saml_response(self) -> HandshakeStep:
        response = self._round_trip(
            "POST",
            self._config.api_url(ENDPOINT_SAML_SUCCESS),
            self._idp_headers(
                "cross-site",
                **{
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Origin": self._config.idp_origin,
                    "Referer": f"{self._config.idp_origin}/",
                },
            ),
            # Percent-encoded; captured app traffic sends the base64 value raw.
            content=f"SAMLResponse={quote(self._saml_response, safe='')}",
        )
        self._temp_token = _extract(TEMP_TOKEN_PATTERN, response.text)
        if not self._temp_token:
            raise TempTokenMissingError(self.step.value, "temp_token not found in SAML response page")
        return HandshakeStep.SAML_RESPONSE_SUBMITTED

    def _register_with_token(self) -> HandshakeStep:
        payload = {
            "userid": "0",
            "hash": self._signer.sign(self._temp_token),
            "os_type": OS_TYPE,
            "app_bundle_name": APP_BUNDLE_NAME,
            "language": "EN",
            "temp_token": self._temp_token,
            "campusid": self._config.campus_id,
        }
        response = self._round_trip(
            "POST",
            self._config.api_url(ENDPOINT_REGISTER),
            app_headers(self._state),
            error_cls=RegistrationError,
            json=payload,
        )
        try:
            data = response.json()
        except ValueError as exc:
            raise RegistrationError(self.step.value, "registration response is not JSON") from exc
        user = data.get("user") if isinstance(data, dict) else None
        if not isinstance(user, dict) or not user.get("login_token") or not user.get("userid"):
            raise RegistrationError(
                self.step.value, "Failed to get login token from registration response"
            )
        self._state.login_token = str(user["login_token"])
        self._state.user_id = str(user["userid"])
        if user.get("name"):
            self.name = str(user["name"])
        return HandshakeStep.REGISTERED_WITH_TOKEN

    def _login_with_token(self) -> HandshakeStep:
        payload = {
            "device_model": DEVICE_MODEL,
            "campusid": self._config.campus_id,
            "on_launch": "1",
            "app_version": APP_VERSION,
            "userid": self._state.user_id,
            "carrier_name": "",
            "accessibility_mode": "0",
            "device_name": "iPad",
            "push_enabled": "1",
            "os_language": "en-US",
            "timezone": "PST",
            "app_bundle_name": APP_BUNDLE_NAME,
            "os_version": OS_VERSION,
            "push_token": PUSH_TOKEN,
            "os_type": OS_TYPE,
        }
        # Registration already produced a usable token; this call only
        # announces the device and may fail without failing the login.
        try:
            self._round_trip(
                "POST",
                self._config.api_url(ENDPOINT_LOGIN_WITH_TOKEN),
                app_headers(self._state, with_token=True),
                error_cls=LoginWithTokenError,
                json=payload,
            )
        except LoginWithTokenError as exc:
            self.login_with_token_error = exc
            self._logger.warning("loginwithtoken failed for user %s: %s", self._state.user_id, exc)
        except httpx.HTTPError as exc:
            self.login_with_token_error = LoginWithTokenError(self.step.value, str(exc))
            self._logger.warning("loginwithtoken failed for user %s: %s", self._state.user_id, exc)
        return HandshakeStep.LOGGED_IN
