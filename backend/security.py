import hmac

from cryptography.fernet import Fernet, InvalidToken

from config import settings


_fernet = Fernet(settings.encryption_key)


def encrypt_token(token: str) -> str:
    return _fernet.encrypt(token.encode("utf-8")).decode("utf-8")


def decrypt_token(encrypted_value: str) -> str:
    return _fernet.decrypt(encrypted_value.encode("utf-8")).decode("utf-8")


def token_matches(encrypted_value: str, candidate: str) -> bool:
    try:
        stored = decrypt_token(encrypted_value)
    except InvalidToken:
        return False
    return hmac.compare_digest(stored.encode("utf-8"), candidate.encode("utf-8"))
