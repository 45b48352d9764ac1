"""Tests for bearer token verification and issuance."""

from datetime import timedelta

import pytest
from jose import jwt

from app.core.exceptions import AuthenticationException, ConfigurationException
from app.core.security import (
    INVALID_CREDENTIAL_MESSAGE,
    NO_CREDENTIAL_MESSAGE,
    CallerIdentity,
    TokenVerifier,
    create_access_token,
)

class TestTokenVerifier:
    """Test TokenVerifier.verify."""

    def test_returns_owner_id_embedded_at_issuance(self, verifier, make_token):
        for owner_id in ["u1", "507f1f77bcf86cd799439011", "someone@example.com"]:
            identity = verifier.verify(make_token(owner_id))
            assert identity == CallerIdentity(owner_id=owner_id)

    @pytest.mark.parametrize("credential", [None, ""])
    def test_missing_credential(self, verifier, credential):
        with pytest.raises(AuthenticationException) as exc_info:
            verifier.verify(credential)
        assert str(exc_info.value) == NO_CREDENTIAL_MESSAGE

    def test_expired_token(self, verifier, make_token):
        token = make_token("u1", expires_delta=timedelta(seconds=-30))
        with pytest.raises(AuthenticationException) as exc_info:
            verifier.verify(token)
        assert str(exc_info.value) == INVALID_CREDENTIAL_MESSAGE

    def test_wrong_secret(self, verifier, make_token):
        token = make_token("u1", secret="some-other-secret")
        with pytest.raises(AuthenticationException) as exc_info:
            verifier.verify(token)
        assert str(exc_info.value) == INVALID_CREDENTIAL_MESSAGE

    def test_tampered_payload(self, verifier, make_token):
        header, _, signature = make_token("u1").split(".")
        forged_payload = make_token("attacker", secret="irrelevant").split(".")[1]
        with pytest.raises(AuthenticationException) as exc_info:
            verifier.verify(".".join([header, forged_payload, signature]))
        assert str(exc_info.value) == INVALID_CREDENTIAL_MESSAGE

    @pytest.mark.parametrize("credential", ["garbage", "a.b.c", "Bearer xyz"])
    def test_malformed_token(self, verifier, credential):
        with pytest.raises(AuthenticationException) as exc_info:
            verifier.verify(credential)
        assert str(exc_info.value) == INVALID_CREDENTIAL_MESSAGE

    def test_missing_owner_claim(self, verifier, test_secret):
        token = jwt.encode({"sub": "u1"}, test_secret, algorithm="HS256")
        with pytest.raises(AuthenticationException) as exc_info:
            verifier.verify(token)
        assert str(exc_info.value) == INVALID_CREDENTIAL_MESSAGE

    def test_empty_owner_claim(self, verifier, test_secret):
        token = jwt.encode({"userId": ""}, test_secret, algorithm="HS256")
        with pytest.raises(AuthenticationException):
            verifier.verify(token)

    def test_numeric_owner_claim_is_stringified(self, verifier, test_secret):
        token = jwt.encode({"userId": 42}, test_secret, algorithm="HS256")
        assert verifier.verify(token).owner_id == "42"

    def test_custom_owner_claim(self, test_secret):
        custom = TokenVerifier(test_secret, owner_claim="sub")
        token = create_access_token("u9", test_secret, owner_claim="sub")
        assert custom.verify(token).owner_id == "u9"

    @pytest.mark.parametrize("secret", [None, ""])
    def test_requires_secret(self, secret):
        with pytest.raises(ConfigurationException):
            TokenVerifier(secret)

class TestCreateAccessToken:
    """Test token issuance."""

    def test_payload_contains_owner_and_expiry(self, test_secret):
        token = create_access_token("u1", test_secret, expires_delta=timedelta(minutes=1))
        payload = jwt.decode(token, test_secret, algorithms=["HS256"])
        assert payload["userId"] == "u1"
        assert "exp" in payload

    def test_extra_claims_do_not_override_owner(self, test_secret):
        token = create_access_token("u1", test_secret, extra_claims={"userId": "u2", "role": "x"})
        payload = jwt.decode(token, test_secret, algorithms=["HS256"])
        assert payload["userId"] == "u1"
        assert payload["role"] == "x"
