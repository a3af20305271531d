from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional, Union

from .cookies import CookieJar


def new_session_id() -> str:
    return str(int(time.time() * 1000))


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class Token:
    user_id: str
    login_token: str = field(repr=False)
    session_id: Optional[str] = None


Identity = Union[Credentials, Token]


@dataclass
class SessionState:
    session_id: str = field(default_factory=new_session_id)
    user_id: str = ""
    login_token: str = field(default="", repr=False)
    cookies: CookieJar = field(default_factory=CookieJar)

    @classmethod
    def from_identity(cls, identity: Identity) -> "SessionState":
        if isinstance(identity, Token):
            return cls(
                session_id=identity.session_id or new_session_id(),
                user_id=str(identity.user_id),
                login_token=identity.login_token,
            )
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id and self.login_token)


@dataclass(frozen=True)
class LoginResult:
    user_id: str
    session_id: str
    login_token: str = field(repr=False)
    name: Optional[str] = None
