import hashlib
import hmac


def to_hex(data: bytes) -> str:
    return data.hex()


class HmacSigner:
    def __init__(self, secret_key: str) -> None:
        self._key = secret_key.encode("utf-8")

    def sign(self, message: str) -> str:
        digest = hmac.new(self._key, message.encode("utf-8"), hashlib.sha256).digest()
        return to_hex(digest)
