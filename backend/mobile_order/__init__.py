"""Client for the Transact mobile ordering API used by campus dining."""

from .cart import PricedCart, build_order_cart, normalize_cart_item
from .client import SessionClient
from .cookies import CookieJar
from .handshake import AuthHandshake, HandshakeStep
from .identity import Credentials, Identity, LoginResult, SessionState, Token
from .signing import HmacSigner, to_hex
from .transport import ClientConfig

__all__ = [
    "AuthHandshake",
    "ClientConfig",
    "CookieJar",
    "Credentials",
    "HandshakeStep",
    "HmacSigner",
    "Identity",
    "LoginResult",
    "PricedCart",
    "SessionClient",
    "SessionState",
    "Token",
    "build_order_cart",
    "normalize_cart_item",
    "to_hex",
]
