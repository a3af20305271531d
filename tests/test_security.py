from security import decrypt_token, encrypt_token, token_matches


def test_tokens_round_trip_through_encryption():
    encrypted = encrypt_token("login-token")
    assert encrypted != "login-token"
    assert decrypt_token(encrypted) == "login-token"


def test_token_matches_compares_against_stored_value():
    encrypted = encrypt_token("login-token")
    assert token_matches(encrypted, "login-token")
    assert not token_matches(encrypted, "other-token")
    assert not token_matches("not-a-fernet-token", "login-token")
