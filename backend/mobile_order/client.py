from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

import httpx

from .cart import PricedCart, build_cart_payload
from .constants import (
    ENDPOINT_CALCULATE_CART,
    ENDPOINT_LOCATIONS,
    ENDPOINT_MENU,
    ENDPOINT_ORDER_HISTORY,
    ENDPOINT_ORDER_STATUS,
    ENDPOINT_PAYMENT_METHODS,
    ENDPOINT_PROCESS_ORDER,
)
from .errors import (
    CredentialsMissingError,
    NotAuthenticatedError,
    OrderIdMissingError,
    UpstreamRequestError,
)
from .handshake import AuthHandshake
from .identity import Credentials, Identity, LoginResult, SessionState
from .signing import HmacSigner
from .transport import ClientConfig, app_headers, create_http_client, is_success


class SessionClient:
    """Authenticated session against the mobile ordering API.

    Built from ``Credentials`` the client must ``login()`` first; built from a
    ``Token`` it is usable immediately. One instance serves one logical
    session and must not be shared between concurrent callers.
    """

    def __init__(
        self,
        identity: Identity,
        config: ClientConfig,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config
        self._logger = logger or logging.getLogger("mobile-order")
        self._credentials: Optional[Credentials] = (
            identity if isinstance(identity, Credentials) else None
        )
        self._signer = HmacSigner(config.secret_key)
        self._http = create_http_client(config, transport)
        self.state = SessionState.from_identity(identity)
        self.last_handshake: Optional[AuthHandshake] = None

    def __enter__(self) -> "SessionClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def login(self) -> LoginResult:
        if self._credentials is None:
            raise CredentialsMissingError()
        handshake = AuthHandshake(
            self._http,
            self._config,
            self.state,
            self._credentials,
            signer=self._signer,
            logger=self._logger,
        )
        self.last_handshake = handshake
        result = handshake.run()
        self._credentials = None
        self._logger.info("Logged in mobile order user %s", result.user_id)
        return result

    def _base_payload(self) -> Dict[str, Any]:
        return {"userid": self.state.user_id, "campusid": self._config.campus_id}

    def _post(self, endpoint: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        if not self.state.is_authenticated:
            raise NotAuthenticatedError()
        try:
            response = self._http.post(
                self._config.api_url(endpoint),
                json=dict(payload),
                headers=app_headers(self.state, with_token=True),
            )
        except httpx.HTTPError as exc:
            raise UpstreamRequestError(endpoint, str(exc)) from exc
        if not is_success(response.status_code):
            raise UpstreamRequestError(
                endpoint, f"HTTP {response.status_code}", response.status_code
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamRequestError(
                endpoint, "response is not valid JSON", response.status_code
            ) from exc
        if not isinstance(data, dict):
            raise UpstreamRequestError(
                endpoint, "unexpected response shape", response.status_code
            )
        return data

    def get_menu(self, location_id: str) -> Dict[str, Any]:
        payload = {
            "ct_id2": "0",
            "target_date": "",
            "userid": self.state.user_id,
            "target_time": "",
            "campusid": self._config.campus_id,
            "ct_id": "0",
            "locationid": str(location_id),
            "payment_method": "0",
            "retrieval_type": "0",
        }
        return self._post(ENDPOINT_MENU, payload)

    def price_cart(
        self, items: Sequence[Mapping[str, Any]], location_id: str
    ) -> PricedCart:
        cart_data = build_cart_payload(
            items,
            location_id=location_id,
            user_id=self.state.user_id,
            campus_id=self._config.campus_id,
        )
        pricing = self._post(ENDPOINT_CALCULATE_CART, cart_data)
        return PricedCart(pricing=pricing, cart_data=cart_data)

    def submit_order(self, cart: Mapping[str, Any]) -> str:
        data = self._post(ENDPOINT_PROCESS_ORDER, cart)
        order_id = data.get("orderid")
        if order_id is None or str(order_id).strip() == "":
            raise OrderIdMissingError()
        order_id = str(order_id).strip()
        self._logger.info("Order %s submitted", order_id)
        return order_id

    def check_order_status(self, order_id: str) -> Dict[str, Any]:
        payload = {"orderid": str(order_id), **self._base_payload()}
        return self._post(ENDPOINT_ORDER_STATUS, payload)

    def get_locations(self) -> Dict[str, Any]:
        return self._post(ENDPOINT_LOCATIONS, self._base_payload())

    def get_payment_methods(self) -> Dict[str, Any]:
        return self._post(ENDPOINT_PAYMENT_METHODS, self._base_payload())

    def get_order_history(self) -> Dict[str, Any]:
        return self._post(ENDPOINT_ORDER_HISTORY, self._base_payload())
