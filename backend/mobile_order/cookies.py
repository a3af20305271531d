from __future__ import annotations

from typing import Dict, Iterable

import httpx


class CookieJar:
    """Name/value cookie store replayed verbatim on the next request.

    Attributes such as Path or Secure are dropped; the last value written for
    a name wins and names keep their first-insertion order.
    """

    def __init__(self) -> None:
        self._cookies: Dict[str, str] = {}

    def store(self, set_cookie_values: Iterable[str]) -> None:
        for raw in set_cookie_values:
            pair = raw.split(";", 1)[0]
            name, sep, value = pair.partition("=")
            name = name.strip()
            if not sep or not name:
                continue
            self._cookies[name] = value

    def store_response(self, response: httpx.Response) -> None:
        self.store(response.headers.get_list("set-cookie"))

    def header(self) -> str:
        return "; ".join(f"{name}={value}" for name, value in self._cookies.items())

    def as_dict(self) -> Dict[str, str]:
        return dict(self._cookies)

    def __len__(self) -> int:
        return len(self._cookies)
